"""
Decoded, flattened row-sets: one dataclass per endpoint.

Each row-set declares its column catalog once in ``COLUMNS``. The projector
and the DDL renderer both read it, so a column exists in a table definition if
and only if it can be projected.

Single-row endpoints hold scalars. Multi-row endpoints hold parallel tuples
that are all indexed by the same row position; their lengths must match, and
that shared length is the row count. Raw API values are kept as-is (epoch
seconds, tag tuples, ``None`` for unreported quantities) until projection.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar

from weather_tables import projector
from weather_tables.columns import LOCATION_COLUMNS, Column, bigint, numeric, text, timestamp
from weather_tables.endpoints import EndpointKind

if TYPE_CHECKING:
    from weather_tables.cells import Cell

# =============================================================================
# Base classes
# =============================================================================


class RowSet(ABC):
    """Capability interface shared by every endpoint's row-set."""

    kind: ClassVar[EndpointKind]
    COLUMNS: ClassVar[tuple[Column, ...]]

    @abstractmethod
    def row_count(self) -> int:
        """Number of rows this row-set yields."""

    @classmethod
    def column_map(cls) -> dict[str, Column]:
        return {column.name: column for column in cls.COLUMNS}

    @classmethod
    def column_names(cls) -> list[str]:
        return [column.name for column in cls.COLUMNS]

    @classmethod
    def column_types(cls) -> dict[str, str]:
        """Column name -> SQL type, in declaration order."""
        return {column.name: column.sql_type for column in cls.COLUMNS}

    def raw_value(self, index: int, column: Column) -> Any:
        """Unconverted value for ``column`` at ``index`` (no bounds check)."""
        value = getattr(self, column.source)
        return value[index] if column.per_row else value

    def project(self, index: int, column_name: str) -> Cell:
        return projector.project(self, index, column_name)

    def __len__(self) -> int:
        return self.row_count()


class SingleRowSet(RowSet):
    """Row-set for endpoints that answer with one scalar record."""

    def row_count(self) -> int:
        return 1


class MultiRowSet(RowSet):
    """Row-set backed by parallel per-row sequences."""

    def __post_init__(self) -> None:
        lengths = {
            column.source: len(getattr(self, column.source))
            for column in self.COLUMNS
            if column.per_row
        }
        if len(set(lengths.values())) > 1:
            msg = f"{self.kind.value} sequences have unequal lengths: {lengths}"
            raise ValueError(msg)

    def row_count(self) -> int:
        for column in self.COLUMNS:
            if column.per_row:
                return len(getattr(self, column.source))
        return 0


# =============================================================================
# Shared column groups
# =============================================================================

_CONDITION_COLUMNS = (
    text("weather_condition"),
    text("weather_description"),
    text("weather_icon_code"),
)

_SCALAR_CONDITION_COLUMNS = tuple(
    Column(c.name, c.kind, c.source, per_row=False) for c in _CONDITION_COLUMNS
)

# =============================================================================
# /onecall -> current
# =============================================================================


@dataclass(frozen=True)
class CurrentWeatherRowSet(SingleRowSet):
    """Current conditions at the requested location."""

    kind: ClassVar[EndpointKind] = EndpointKind.CURRENT_WEATHER
    COLUMNS: ClassVar[tuple[Column, ...]] = (
        *LOCATION_COLUMNS,
        text("timezone_name", per_row=False),
        timestamp("observation_time", per_row=False),
        numeric("temperature_temp", per_row=False),
        numeric("apparent_temperature_temp", per_row=False),
        bigint("pressure_hpa", per_row=False),
        bigint("humidity_pct", per_row=False),
        numeric("dew_point_temp", per_row=False),
        numeric("uv_index", per_row=False),
        bigint("cloud_cover_pct", per_row=False),
        bigint("visibility_m", per_row=False),
        numeric("wind_speed_m_s", per_row=False),
        bigint("wind_direction_deg", per_row=False),
        numeric("wind_gust_speed_m_s", per_row=False, nullable=True),
        *_SCALAR_CONDITION_COLUMNS,
    )

    latitude: float
    longitude: float
    timezone_name: str
    observation_time: int
    temperature_temp: float
    apparent_temperature_temp: float
    pressure_hpa: int
    humidity_pct: int
    dew_point_temp: float
    uv_index: float
    cloud_cover_pct: int
    visibility_m: int
    wind_speed_m_s: float
    wind_direction_deg: int
    wind_gust_speed_m_s: float | None
    weather_condition: str
    weather_description: str
    weather_icon_code: str


# =============================================================================
# /onecall -> minutely[]
# =============================================================================


@dataclass(frozen=True)
class MinutelyForecastRowSet(MultiRowSet):
    """Precipitation for each minute of the next hour."""

    kind: ClassVar[EndpointKind] = EndpointKind.MINUTELY_FORECAST
    COLUMNS: ClassVar[tuple[Column, ...]] = (
        *LOCATION_COLUMNS,
        timestamp("forecast_time"),
        numeric("precipitation_mm", nullable=True),
    )

    latitude: float
    longitude: float
    forecast_time: tuple[int, ...] = ()
    precipitation_mm: tuple[float | None, ...] = ()


# =============================================================================
# /onecall -> hourly[]
# =============================================================================


@dataclass(frozen=True)
class HourlyForecastRowSet(MultiRowSet):
    """Hour-by-hour forecast, one row per hour."""

    kind: ClassVar[EndpointKind] = EndpointKind.HOURLY_FORECAST
    COLUMNS: ClassVar[tuple[Column, ...]] = (
        *LOCATION_COLUMNS,
        timestamp("forecast_time"),
        numeric("temperature_temp"),
        numeric("apparent_temperature_temp"),
        bigint("pressure_hpa"),
        bigint("humidity_pct"),
        numeric("dew_point_temp"),
        numeric("uv_index"),
        bigint("cloud_cover_pct"),
        bigint("visibility_m"),
        numeric("wind_speed_m_s"),
        bigint("wind_direction_deg"),
        numeric("wind_gust_speed_m_s", nullable=True),
        numeric("precipitation_probability"),
        numeric("rain_volume_1h_mm", nullable=True),
        numeric("snow_volume_1h_mm", nullable=True),
        *_CONDITION_COLUMNS,
    )

    latitude: float
    longitude: float
    forecast_time: tuple[int, ...] = ()
    temperature_temp: tuple[float, ...] = ()
    apparent_temperature_temp: tuple[float, ...] = ()
    pressure_hpa: tuple[int, ...] = ()
    humidity_pct: tuple[int, ...] = ()
    dew_point_temp: tuple[float, ...] = ()
    uv_index: tuple[float, ...] = ()
    cloud_cover_pct: tuple[int, ...] = ()
    visibility_m: tuple[int, ...] = ()
    wind_speed_m_s: tuple[float, ...] = ()
    wind_direction_deg: tuple[int, ...] = ()
    wind_gust_speed_m_s: tuple[float | None, ...] = ()
    precipitation_probability: tuple[float, ...] = ()
    rain_volume_1h_mm: tuple[float | None, ...] = ()
    snow_volume_1h_mm: tuple[float | None, ...] = ()
    weather_condition: tuple[str, ...] = ()
    weather_description: tuple[str, ...] = ()
    weather_icon_code: tuple[str, ...] = ()


# =============================================================================
# /onecall -> daily[]
# =============================================================================


@dataclass(frozen=True)
class DailyForecastRowSet(MultiRowSet):
    """Day-by-day forecast, one row per day."""

    kind: ClassVar[EndpointKind] = EndpointKind.DAILY_FORECAST
    COLUMNS: ClassVar[tuple[Column, ...]] = (
        *LOCATION_COLUMNS,
        timestamp("forecast_date"),
        timestamp("sunrise_time"),
        timestamp("sunset_time"),
        timestamp("moonrise_time"),
        timestamp("moonset_time"),
        numeric("moon_phase_fraction"),
        numeric("temperature_day_temp"),
        numeric("temperature_min_temp"),
        numeric("temperature_max_temp"),
        numeric("temperature_night_temp"),
        numeric("temperature_evening_temp"),
        numeric("temperature_morning_temp"),
        numeric("apparent_temperature_day_temp"),
        numeric("apparent_temperature_night_temp"),
        numeric("apparent_temperature_evening_temp"),
        numeric("apparent_temperature_morning_temp"),
        bigint("pressure_hpa"),
        bigint("humidity_pct"),
        numeric("dew_point_temp"),
        numeric("wind_speed_m_s"),
        bigint("wind_direction_deg"),
        numeric("wind_gust_speed_m_s", nullable=True),
        bigint("cloud_cover_pct"),
        numeric("precipitation_probability"),
        numeric("rain_volume_mm", nullable=True),
        numeric("snow_volume_mm", nullable=True),
        numeric("uv_index"),
        *_CONDITION_COLUMNS,
    )

    latitude: float
    longitude: float
    forecast_date: tuple[int, ...] = ()
    sunrise_time: tuple[int, ...] = ()
    sunset_time: tuple[int, ...] = ()
    moonrise_time: tuple[int, ...] = ()
    moonset_time: tuple[int, ...] = ()
    moon_phase_fraction: tuple[float, ...] = ()
    temperature_day_temp: tuple[float, ...] = ()
    temperature_min_temp: tuple[float, ...] = ()
    temperature_max_temp: tuple[float, ...] = ()
    temperature_night_temp: tuple[float, ...] = ()
    temperature_evening_temp: tuple[float, ...] = ()
    temperature_morning_temp: tuple[float, ...] = ()
    apparent_temperature_day_temp: tuple[float, ...] = ()
    apparent_temperature_night_temp: tuple[float, ...] = ()
    apparent_temperature_evening_temp: tuple[float, ...] = ()
    apparent_temperature_morning_temp: tuple[float, ...] = ()
    pressure_hpa: tuple[int, ...] = ()
    humidity_pct: tuple[int, ...] = ()
    dew_point_temp: tuple[float, ...] = ()
    wind_speed_m_s: tuple[float, ...] = ()
    wind_direction_deg: tuple[int, ...] = ()
    wind_gust_speed_m_s: tuple[float | None, ...] = ()
    cloud_cover_pct: tuple[int, ...] = ()
    precipitation_probability: tuple[float, ...] = ()
    rain_volume_mm: tuple[float | None, ...] = ()
    snow_volume_mm: tuple[float | None, ...] = ()
    uv_index: tuple[float, ...] = ()
    weather_condition: tuple[str, ...] = ()
    weather_description: tuple[str, ...] = ()
    weather_icon_code: tuple[str, ...] = ()


# =============================================================================
# /onecall -> alerts[]
# =============================================================================


@dataclass(frozen=True)
class AlertRecord:
    """One government weather alert."""

    sender_name: str
    event: str
    start: int | None
    end: int | None
    description: str
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class WeatherAlertsRowSet(RowSet):
    """Active alerts; zero rows when the location has none."""

    kind: ClassVar[EndpointKind] = EndpointKind.WEATHER_ALERTS
    COLUMNS: ClassVar[tuple[Column, ...]] = (
        *LOCATION_COLUMNS,
        text("alert_sender_name", "sender_name"),
        text("alert_event_type", "event"),
        timestamp("alert_start_time", "start", nullable=True),
        timestamp("alert_end_time", "end", nullable=True),
        text("alert_description", "description"),
        text("alert_tags", "tags"),
    )

    latitude: float
    longitude: float
    alerts: tuple[AlertRecord, ...] = field(default_factory=tuple)

    def row_count(self) -> int:
        return len(self.alerts)

    def raw_value(self, index: int, column: Column) -> Any:
        if column.per_row:
            return getattr(self.alerts[index], column.source)
        return getattr(self, column.source)


# =============================================================================
# /onecall/timemachine -> data[0]
# =============================================================================


@dataclass(frozen=True)
class HistoricalWeatherRowSet(SingleRowSet):
    """Observed weather at the requested timestamp."""

    kind: ClassVar[EndpointKind] = EndpointKind.HISTORICAL_WEATHER
    COLUMNS: ClassVar[tuple[Column, ...]] = (
        *LOCATION_COLUMNS,
        timestamp("observation_time", per_row=False),
        numeric("temperature_temp", per_row=False),
        numeric("apparent_temperature_temp", per_row=False),
        bigint("pressure_hpa", per_row=False),
        bigint("humidity_pct", per_row=False),
        numeric("dew_point_temp", per_row=False),
        bigint("cloud_cover_pct", per_row=False),
        bigint("visibility_m", per_row=False),
        numeric("wind_speed_m_s", per_row=False),
        bigint("wind_direction_deg", per_row=False),
        *_SCALAR_CONDITION_COLUMNS,
    )

    latitude: float
    longitude: float
    observation_time: int
    temperature_temp: float
    apparent_temperature_temp: float
    pressure_hpa: int
    humidity_pct: int
    dew_point_temp: float
    cloud_cover_pct: int
    visibility_m: int
    wind_speed_m_s: float
    wind_direction_deg: int
    weather_condition: str
    weather_description: str
    weather_icon_code: str


# =============================================================================
# /onecall/day_summary
# =============================================================================


@dataclass(frozen=True)
class DailySummaryRowSet(SingleRowSet):
    """Aggregates for one calendar day."""

    kind: ClassVar[EndpointKind] = EndpointKind.DAILY_SUMMARY
    COLUMNS: ClassVar[tuple[Column, ...]] = (
        *LOCATION_COLUMNS,
        text("timezone_offset", per_row=False),
        text("summary_date", per_row=False),
        text("unit_system", per_row=False),
        numeric("temperature_min_temp", per_row=False),
        numeric("temperature_max_temp", per_row=False),
        numeric("temperature_morning_temp", per_row=False, nullable=True),
        numeric("temperature_afternoon_temp", per_row=False, nullable=True),
        numeric("temperature_evening_temp", per_row=False, nullable=True),
        numeric("temperature_night_temp", per_row=False, nullable=True),
        numeric("cloud_cover_afternoon_pct", per_row=False, nullable=True),
        numeric("humidity_afternoon_pct", per_row=False, nullable=True),
        numeric("pressure_afternoon_hpa", per_row=False, nullable=True),
        numeric("precipitation_total_mm", per_row=False, nullable=True),
        numeric("wind_max_speed_m_s", per_row=False, nullable=True),
        numeric("wind_max_direction_deg", per_row=False, nullable=True),
    )

    latitude: float
    longitude: float
    timezone_offset: str
    summary_date: str
    unit_system: str
    temperature_min_temp: float
    temperature_max_temp: float
    temperature_morning_temp: float | None
    temperature_afternoon_temp: float | None
    temperature_evening_temp: float | None
    temperature_night_temp: float | None
    cloud_cover_afternoon_pct: float | None
    humidity_afternoon_pct: float | None
    pressure_afternoon_hpa: float | None
    precipitation_total_mm: float | None
    wind_max_speed_m_s: float | None
    wind_max_direction_deg: float | None


# =============================================================================
# /onecall/overview
# =============================================================================


@dataclass(frozen=True)
class WeatherOverviewRowSet(SingleRowSet):
    """Free-text weather summary for one day."""

    kind: ClassVar[EndpointKind] = EndpointKind.WEATHER_OVERVIEW
    COLUMNS: ClassVar[tuple[Column, ...]] = (
        *LOCATION_COLUMNS,
        text("timezone_offset", per_row=False),
        text("overview_date", per_row=False),
        text("unit_system", per_row=False),
        text("weather_overview", per_row=False),
    )

    latitude: float
    longitude: float
    timezone_offset: str
    overview_date: str
    unit_system: str
    weather_overview: str


#: Endpoint kind -> row-set class.
ROWSET_TYPES: dict[EndpointKind, type[RowSet]] = {
    cls.kind: cls
    for cls in (
        CurrentWeatherRowSet,
        MinutelyForecastRowSet,
        HourlyForecastRowSet,
        DailyForecastRowSet,
        WeatherAlertsRowSet,
        HistoricalWeatherRowSet,
        DailySummaryRowSet,
        WeatherOverviewRowSet,
    )
}


def rowset_type(kind: EndpointKind) -> type[RowSet]:
    return ROWSET_TYPES[kind]
