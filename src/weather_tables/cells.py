"""Typed cell values handed across the iteration boundary."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum

#: Microseconds per second; the API speaks seconds, cells speak microseconds.
MICROS_PER_SECOND = 1_000_000

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class CellKind(StrEnum):
    """Tag for the cell union."""

    FLOAT64 = "float64"
    INT64 = "int64"
    STRING = "string"
    TIMESTAMP = "timestamp"
    NULL = "null"


#: SQL type used for each cell kind in generated table definitions.
SQL_TYPES: dict[CellKind, str] = {
    CellKind.FLOAT64: "numeric",
    CellKind.INT64: "bigint",
    CellKind.STRING: "text",
    CellKind.TIMESTAMP: "timestamp with time zone",
}


@dataclass(frozen=True)
class Cell:
    """
    A single typed value for one (row, column) pair.

    ``TIMESTAMP`` values hold microseconds since the Unix epoch.
    """

    kind: CellKind
    value: float | int | str | None = None

    @classmethod
    def null(cls) -> Cell:
        return cls(CellKind.NULL, None)

    @classmethod
    def float64(cls, value: float | None) -> Cell:
        if value is None:
            return cls.null()
        return cls(CellKind.FLOAT64, float(value))

    @classmethod
    def int64(cls, value: int | None) -> Cell:
        if value is None:
            return cls.null()
        return cls(CellKind.INT64, int(value))

    @classmethod
    def string(cls, value: str | None) -> Cell:
        if value is None:
            return cls.null()
        return cls(CellKind.STRING, value)

    @classmethod
    def timestamp(cls, micros: int | None) -> Cell:
        if micros is None:
            return cls.null()
        return cls(CellKind.TIMESTAMP, int(micros))

    @classmethod
    def from_epoch_seconds(cls, seconds: int | None) -> Cell:
        """Build a timestamp cell from epoch seconds (``seconds * 1_000_000``)."""
        if seconds is None:
            return cls.null()
        return cls.timestamp(int(seconds) * MICROS_PER_SECOND)

    @property
    def is_null(self) -> bool:
        return self.kind is CellKind.NULL

    def to_python(self) -> float | int | str | datetime | None:
        """Convert to the natural Python value (UTC ``datetime`` for timestamps)."""
        if self.kind is CellKind.TIMESTAMP and isinstance(self.value, int):
            return _EPOCH + timedelta(microseconds=self.value)
        return self.value

    def __str__(self) -> str:
        value = self.to_python()
        if value is None:
            return "NULL"
        if isinstance(value, datetime):
            return value.isoformat()
        return str(value)
