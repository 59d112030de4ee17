"""Outbound request construction for One Call endpoints."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from urllib.parse import urlencode

from weather_tables.endpoints import DEFAULT_API_URL, EndpointKind
from weather_tables.errors import MissingRequiredParameter
from weather_tables.parameters import HISTORICAL_EXAMPLE, SUMMARY_EXAMPLE

if TYPE_CHECKING:
    from weather_tables.endpoints import EndpointDescriptor
    from weather_tables.parameters import QueryParameters

REDACTED = "***"


@dataclass(frozen=True)
class Credentials:
    """API key plus the base URL it is valid for."""

    api_key: str
    base_url: str = DEFAULT_API_URL

    def __repr__(self) -> str:
        return f"Credentials(api_key={REDACTED!r}, base_url={self.base_url!r})"


@dataclass(frozen=True)
class OutboundRequest:
    """A fully-specified ``GET`` request. No body, no headers (the session adds them)."""

    endpoint: str
    params: tuple[tuple[str, str], ...] = field(default_factory=tuple)
    method: str = "GET"

    @property
    def url(self) -> str:
        """Endpoint URL with the query string appended."""
        return f"{self.endpoint}?{urlencode(self.params)}"

    def redacted_url(self) -> str:
        """Same as :attr:`url` with the API key masked, safe for logs."""
        safe = tuple((k, REDACTED if k == "appid" else v) for k, v in self.params)
        return f"{self.endpoint}?{urlencode(safe, safe='*')}"

    def param(self, name: str) -> str | None:
        for key, value in self.params:
            if key == name:
                return value
        return None


def format_coordinate(value: float) -> str:
    """Render a coordinate without a spurious trailing ``.0``."""
    if value.is_integer():
        return str(int(value))
    return repr(value)


def build(
    descriptor: EndpointDescriptor,
    params: QueryParameters,
    credentials: Credentials,
) -> OutboundRequest:
    """
    Build the request for one scan.

    Every endpoint gets ``lat``, ``lon``, ``appid``, ``units`` and ``lang``.
    Historical weather adds ``dt``; daily summary adds ``date`` and an optional
    ``tz``; overview adds an optional ``date``.

    Raises:
        MissingRequiredParameter: If an endpoint-specific required value is
            absent from ``params``.
    """
    query: list[tuple[str, str]] = [
        ("lat", format_coordinate(params.latitude)),
        ("lon", format_coordinate(params.longitude)),
        ("appid", credentials.api_key),
        ("units", params.units),
        ("lang", params.language),
    ]

    if descriptor.kind is EndpointKind.HISTORICAL_WEATHER:
        if params.observation_time is None:
            msg = (
                "observation_time parameter required for historical_weather. "
                f"{HISTORICAL_EXAMPLE}"
            )
            raise MissingRequiredParameter(msg, parameter="observation_time")
        query.append(("dt", str(params.observation_time)))

    elif descriptor.kind is EndpointKind.DAILY_SUMMARY:
        if params.summary_date is None:
            msg = (
                "summary_date parameter required for daily_summary (YYYY-MM-DD format). "
                f"{SUMMARY_EXAMPLE}"
            )
            raise MissingRequiredParameter(msg, parameter="summary_date")
        query.append(("date", params.summary_date))
        if params.timezone_offset is not None:
            query.append(("tz", params.timezone_offset))

    elif descriptor.kind is EndpointKind.WEATHER_OVERVIEW:
        if params.overview_date is not None:
            query.append(("date", params.overview_date))

    base_url = credentials.base_url.rstrip("/")
    return OutboundRequest(endpoint=f"{base_url}{descriptor.api_path}", params=tuple(query))
