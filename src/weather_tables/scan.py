"""
Scan lifecycle: begin -> next ... -> end, plus rescan.

A :class:`ScanContext` sequences the whole pipeline for one logical scan::

    resolve table -> extract parameters -> build request -> GET
        -> parse JSON -> decode row-set -> project rows on demand

``begin`` is the only call that touches the network, and it is
all-or-nothing: if anything fails the context stays IDLE with no state
applied. Rows are then pulled one at a time with ``next()`` (or by iterating
the context) until it returns ``None``.

Usage::

    from weather_tables.parameters import Predicate
    from weather_tables.scan import ScanContext

    with ScanContext.from_settings() as ctx:
        ctx.begin(
            "hourly_forecast",
            [Predicate("latitude", "=", 52.52), Predicate("longitude", "=", 13.405)],
            columns=["forecast_time", "temperature_temp"],
        )
        for row in ctx:
            print(row)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from weather_tables import request
from weather_tables.config import get_settings
from weather_tables.decoders import MissingValuePolicy, decode, parse_json
from weather_tables.endpoints import resolve
from weather_tables.errors import TransportError, UnknownColumn, UnsupportedOperation
from weather_tables.parameters import Predicate, equality_predicates, extract
from weather_tables.projector import project_row
from weather_tables.rowsets import rowset_type
from weather_tables.services.http import SessionTransport, create_session

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence
    from types import TracebackType

    from weather_tables.cells import Cell
    from weather_tables.config import Settings
    from weather_tables.parameters import QueryParameters
    from weather_tables.request import Credentials
    from weather_tables.rowsets import RowSet
    from weather_tables.services.http import Transport

logger = logging.getLogger(__name__)

#: Longest response body excerpt carried in a TransportError message.
BODY_EXCERPT = 500


class ScanPhase(StrEnum):
    IDLE = "idle"
    SCANNING = "scanning"
    EXHAUSTED = "exhausted"


@dataclass
class ScanStats:
    """Per-scan counters."""

    bytes_in: int = 0
    rows_in: int = 0
    rows_out: int = 0


@dataclass(frozen=True)
class _ScanRequest:
    table_name: str
    predicates: tuple[Predicate, ...]
    columns: tuple[str, ...] | None


class ScanContext:
    """
    State for one logical scan, owned by the caller.

    Independent contexts share nothing mutable and may be used from different
    threads; a single context must not.
    """

    def __init__(
        self,
        credentials: Credentials,
        transport: Transport | None = None,
        policy: MissingValuePolicy = MissingValuePolicy.NULL,
    ) -> None:
        self.credentials = credentials
        self.transport: Transport = transport or SessionTransport()
        self.policy = policy

        self.phase = ScanPhase.IDLE
        self.params: QueryParameters | None = None
        self.rowset: RowSet | None = None
        self.columns: list[str] = []
        self.cursor = 0
        self.stats = ScanStats()
        self._last: _ScanRequest | None = None

    @classmethod
    def from_settings(
        cls, settings: Settings | None = None, transport: Transport | None = None
    ) -> ScanContext:
        """
        Build a context from application settings.

        Raises:
            ConfigurationError: If no API key is configured.
        """
        if settings is None:
            settings = get_settings()
        if transport is None:
            session = create_session(timeout=settings.timeout, user_agent=settings.user_agent)
            transport = SessionTransport(session)
        return cls(settings.credentials(), transport, settings.missing_value_policy)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def begin(
        self,
        table_name: str,
        predicates: Iterable[Predicate],
        columns: Sequence[str] | None = None,
    ) -> None:
        """
        Start a scan: one request, one decode, cursor at row 0.

        Args:
            table_name: One of the eight logical table names.
            predicates: Final predicate list; only equality predicates count.
            columns: Columns to project, in order. ``None`` means all.

        Raises:
            WeatherTableError: Any subclass; the context is left IDLE.
        """
        if self.phase is not ScanPhase.IDLE:
            self.end()

        scan_request = _ScanRequest(
            table_name=table_name,
            predicates=tuple(predicates),
            columns=tuple(columns) if columns is not None else None,
        )

        descriptor = resolve(table_name)
        row_type = rowset_type(descriptor.kind)
        column_names = _check_columns(table_name, row_type, scan_request.columns)
        params = extract(scan_request.predicates, descriptor)
        outbound = request.build(descriptor, params, self.credentials)

        logger.info("GET %s", outbound.redacted_url())
        response = self.transport.get(outbound.endpoint, outbound.params)
        bytes_in = len(response.body.encode("utf-8"))
        logger.info("Received HTTP %d (%d bytes)", response.status_code, bytes_in)

        if not response.ok:
            excerpt = response.body[:BODY_EXCERPT]
            msg = f"HTTP {response.status_code} from {outbound.endpoint}: {excerpt}"
            raise TransportError(msg, status_code=response.status_code, body=response.body)

        rowset = decode(descriptor.kind, parse_json(response.body), params, self.policy)

        # Nothing since end() mutated self; commit the new scan in one step.
        self._last = scan_request
        self.params = params
        self.rowset = rowset
        self.columns = column_names
        self.cursor = 0
        self.stats = ScanStats(bytes_in=bytes_in, rows_in=rowset.row_count())
        self.phase = ScanPhase.SCANNING
        logger.debug("%s: IDLE -> SCANNING (%d rows)", table_name, rowset.row_count())

    def next(self) -> tuple[Cell, ...] | None:
        """Return the next row, or ``None`` at end-of-data or when no scan is active."""
        if self.phase is not ScanPhase.SCANNING or self.rowset is None:
            return None
        if self.cursor >= self.rowset.row_count():
            self.phase = ScanPhase.EXHAUSTED
            logger.debug("%s: SCANNING -> EXHAUSTED", self.rowset.kind.value)
            return None
        row = project_row(self.rowset, self.cursor, self.columns)
        self.cursor += 1
        self.stats.rows_out += 1
        return row

    def end(self) -> None:
        """Release the scan. Safe to call any number of times."""
        if self.phase is ScanPhase.IDLE:
            return
        table = self.rowset.kind.value if self.rowset is not None else "?"
        logger.info(
            "Scan of %s finished: bytes_in=%d rows_in=%d rows_out=%d",
            table,
            self.stats.bytes_in,
            self.stats.rows_in,
            self.stats.rows_out,
        )
        self.params = None
        self.rowset = None
        self.columns = []
        self.cursor = 0
        self.phase = ScanPhase.IDLE
        logger.debug("%s: -> IDLE", table)

    def rescan(self) -> None:
        """Re-run the last ``begin`` with the same arguments (a fresh request)."""
        if self._last is None:
            return
        last = self._last
        self.begin(last.table_name, last.predicates, last.columns)

    # =========================================================================
    # Write path (permanently unsupported)
    # =========================================================================

    def _reject(self, operation: str) -> None:
        msg = f"weather tables are read-only: {operation} is not supported"
        raise UnsupportedOperation(msg, operation=operation)

    def begin_modify(self, *args: Any, **kwargs: Any) -> None:
        self._reject("MODIFY")

    def insert(self, *args: Any, **kwargs: Any) -> None:
        self._reject("INSERT")

    def update(self, *args: Any, **kwargs: Any) -> None:
        self._reject("UPDATE")

    def delete(self, *args: Any, **kwargs: Any) -> None:
        self._reject("DELETE")

    def end_modify(self, *args: Any, **kwargs: Any) -> None:
        self._reject("MODIFY")

    # =========================================================================
    # Protocols
    # =========================================================================

    def __iter__(self) -> Iterator[tuple[Cell, ...]]:
        while (row := self.next()) is not None:
            yield row

    def __enter__(self) -> ScanContext:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.end()


def _check_columns(
    table_name: str, row_type: type[RowSet], columns: Sequence[str] | None
) -> list[str]:
    if columns is None:
        return row_type.column_names()
    known = row_type.column_map()
    for name in columns:
        if name not in known:
            msg = f"unknown column '{name}' for {table_name} endpoint"
            raise UnknownColumn(msg, column=name, table=table_name)
    return list(columns)


def scan(
    table_name: str,
    predicates: Iterable[Predicate] | Mapping[str, Any],
    columns: Sequence[str] | None = None,
    *,
    context: ScanContext | None = None,
) -> list[dict[str, Any]]:
    """
    Run one complete scan and return its rows as dicts.

    ``predicates`` may be a plain mapping, read as equality predicates::

        rows = scan("current_weather", {"latitude": 52.52, "longitude": 13.405})

    Values are converted with :meth:`Cell.to_python` (timestamps become UTC
    ``datetime`` objects).
    """
    if isinstance(predicates, Mapping):
        predicates = equality_predicates(predicates)
    ctx = context or ScanContext.from_settings()
    with ctx:
        ctx.begin(table_name, predicates, columns)
        return [
            {name: cell.to_python() for name, cell in zip(ctx.columns, row, strict=True)}
            for row in ctx
        ]
