"""OpenWeather One Call 3.0 endpoints and the table-name registry.

API docs: https://openweathermap.org/api/one-call-3

Eight logical tables map onto four API paths. The five ``/onecall`` tables
share one response shape and each reads a different top-level section.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType

from weather_tables.errors import UnsupportedEndpoint

DEFAULT_API_URL = "https://api.openweathermap.org/data/3.0"

ONECALL_PATH = "/onecall"
TIMEMACHINE_PATH = "/onecall/timemachine"
DAY_SUMMARY_PATH = "/onecall/day_summary"
OVERVIEW_PATH = "/onecall/overview"

# Parameters every endpoint accepts
LOCATION_PARAMS = frozenset({"latitude", "longitude"})
COMMON_OPTIONAL_PARAMS = frozenset({"units", "lang"})


class EndpointKind(StrEnum):
    """One case per logical table."""

    CURRENT_WEATHER = "current_weather"
    MINUTELY_FORECAST = "minutely_forecast"
    HOURLY_FORECAST = "hourly_forecast"
    DAILY_FORECAST = "daily_forecast"
    WEATHER_ALERTS = "weather_alerts"
    HISTORICAL_WEATHER = "historical_weather"
    DAILY_SUMMARY = "daily_summary"
    WEATHER_OVERVIEW = "weather_overview"


@dataclass(frozen=True)
class EndpointDescriptor:
    """Static description of one logical table."""

    table_name: str
    kind: EndpointKind
    api_path: str
    required_params: frozenset[str]
    optional_params: frozenset[str]
    response_key: str | None = None
    description: str = ""

    @property
    def calls_onecall(self) -> bool:
        """Whether this table shares the ``/onecall`` response."""
        return self.api_path == ONECALL_PATH

    def accepts(self, param: str) -> bool:
        return param in self.required_params or param in self.optional_params


def _descriptor(
    kind: EndpointKind,
    api_path: str,
    *,
    required: frozenset[str] = frozenset(),
    optional: frozenset[str] = frozenset(),
    response_key: str | None = None,
    description: str = "",
) -> EndpointDescriptor:
    return EndpointDescriptor(
        table_name=kind.value,
        kind=kind,
        api_path=api_path,
        required_params=LOCATION_PARAMS | required,
        optional_params=COMMON_OPTIONAL_PARAMS | optional,
        response_key=response_key,
        description=description,
    )


_DESCRIPTORS = (
    _descriptor(
        EndpointKind.CURRENT_WEATHER,
        ONECALL_PATH,
        response_key="current",
        description="Current conditions (1 row)",
    ),
    _descriptor(
        EndpointKind.MINUTELY_FORECAST,
        ONECALL_PATH,
        response_key="minutely",
        description="Minute-by-minute precipitation for the next hour (up to 60 rows)",
    ),
    _descriptor(
        EndpointKind.HOURLY_FORECAST,
        ONECALL_PATH,
        response_key="hourly",
        description="Hourly forecast (up to 48 rows)",
    ),
    _descriptor(
        EndpointKind.DAILY_FORECAST,
        ONECALL_PATH,
        response_key="daily",
        description="Daily forecast (up to 8 rows)",
    ),
    _descriptor(
        EndpointKind.WEATHER_ALERTS,
        ONECALL_PATH,
        response_key="alerts",
        description="Government weather alerts (0..N rows)",
    ),
    _descriptor(
        EndpointKind.HISTORICAL_WEATHER,
        TIMEMACHINE_PATH,
        required=frozenset({"observation_time"}),
        response_key="data",
        description="Observed weather at a point in time (1 row)",
    ),
    _descriptor(
        EndpointKind.DAILY_SUMMARY,
        DAY_SUMMARY_PATH,
        required=frozenset({"summary_date"}),
        optional=frozenset({"timezone_offset"}),
        description="Aggregated statistics for one day (1 row)",
    ),
    _descriptor(
        EndpointKind.WEATHER_OVERVIEW,
        OVERVIEW_PATH,
        optional=frozenset({"overview_date"}),
        description="Human-readable weather summary (1 row)",
    ),
)

#: Process-wide registry, table name -> descriptor. Read-only.
ENDPOINTS: MappingProxyType[str, EndpointDescriptor] = MappingProxyType(
    {d.table_name: d for d in _DESCRIPTORS}
)


def table_names() -> list[str]:
    """All recognized table names, in registry order."""
    return list(ENDPOINTS)


def resolve(table_name: str) -> EndpointDescriptor:
    """
    Resolve a logical table name to its endpoint descriptor.

    Raises:
        UnsupportedEndpoint: If the name is not one of the eight tables.
    """
    descriptor = ENDPOINTS.get(table_name)
    if descriptor is None:
        supported = ", ".join(ENDPOINTS)
        msg = f"unsupported endpoint object '{table_name}'. Supported: {supported}"
        raise UnsupportedEndpoint(msg, table_name=table_name)
    return descriptor
