"""
JSON response decoding, one function per endpoint.

The One Call family shares a response document; each ``/onecall`` table reads
its own section of it (``current``, ``minutely``, ``hourly``, ``daily``,
``alerts``). The other three endpoints have their own shapes:

- ``/onecall/timemachine``: ``{"data": [ {...} ]}``, only element 0 is used
- ``/onecall/day_summary``: nested aggregate objects (``temperature.min`` ...)
- ``/onecall/overview``: a handful of scalars plus free text

Decoding is all-or-nothing: any missing or wrongly-typed required field raises
:class:`~weather_tables.errors.MalformedResponse` naming the field path and no
row-set is produced.
"""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from weather_tables.endpoints import EndpointKind
from weather_tables.errors import MalformedResponse
from weather_tables.rowsets import (
    AlertRecord,
    CurrentWeatherRowSet,
    DailyForecastRowSet,
    DailySummaryRowSet,
    HistoricalWeatherRowSet,
    HourlyForecastRowSet,
    MinutelyForecastRowSet,
    RowSet,
    WeatherAlertsRowSet,
    WeatherOverviewRowSet,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from weather_tables.parameters import QueryParameters

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE_NAME = "UTC"
DEFAULT_TIMEZONE_OFFSET = "+00:00"
DEFAULT_UNIT_SYSTEM = "metric"

# weather[0] sub-field defaults
DEFAULT_CONDITION = "Unknown"
DEFAULT_DESCRIPTION = "unknown"
DEFAULT_ICON = "01d"

DEFAULT_ALERT_SENDER = "Unknown"
DEFAULT_ALERT_EVENT = "Unknown"


class MissingValuePolicy(StrEnum):
    """What an absent optional aggregate becomes."""

    NULL = "null"  # absent -> None
    ZERO = "zero"  # absent -> 0.0


# =============================================================================
# Document parsing and typed field readers
# =============================================================================


def parse_json(body: str | bytes) -> dict[str, Any]:
    """
    Parse a response body into a JSON object.

    Raises:
        MalformedResponse: If the body is not JSON or the top level is not
            an object.
    """
    try:
        document = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        msg = f"failed to parse JSON response: {e}"
        raise MalformedResponse(msg) from e
    if not isinstance(document, dict):
        msg = f"expected a JSON object at the top level, got {type(document).__name__}"
        raise MalformedResponse(msg)
    return document


def _path(parent: str, key: str) -> str:
    return f"{parent}.{key}" if parent else key


def _missing(path: str) -> MalformedResponse:
    return MalformedResponse(f"missing required field '{path}'", path=path)


def _wrong_type(path: str, expected: str, value: Any) -> MalformedResponse:
    msg = f"field '{path}' must be {expected}, got {type(value).__name__}"
    return MalformedResponse(msg, path=path)


def _coerce_float(value: Any, path: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _wrong_type(path, "a number", value)
    try:
        return float(value)
    except OverflowError as e:
        raise _wrong_type(path, "a finite number", value) from e


def _coerce_int(value: Any, path: str) -> int:
    if isinstance(value, bool):
        raise _wrong_type(path, "an integer", value)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise _wrong_type(path, "an integer", value)


def _require(obj: dict[str, Any], key: str, parent: str) -> Any:
    value = obj.get(key)
    if value is None:
        raise _missing(_path(parent, key))
    return value


def _float(obj: dict[str, Any], key: str, parent: str = "") -> float:
    return _coerce_float(_require(obj, key, parent), _path(parent, key))


def _int(obj: dict[str, Any], key: str, parent: str = "") -> int:
    return _coerce_int(_require(obj, key, parent), _path(parent, key))


def _optional_float(obj: dict[str, Any] | None, key: str, parent: str = "") -> float | None:
    if obj is None:
        return None
    value = obj.get(key)
    if value is None:
        return None
    return _coerce_float(value, _path(parent, key))


def _optional_int(obj: dict[str, Any] | None, key: str, parent: str = "") -> int | None:
    if obj is None:
        return None
    value = obj.get(key)
    if value is None:
        return None
    return _coerce_int(value, _path(parent, key))


def _string(obj: dict[str, Any], key: str, default: str, parent: str = "") -> str:
    value = obj.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise _wrong_type(_path(parent, key), "a string", value)
    return value


def _object(obj: dict[str, Any], key: str, parent: str = "") -> dict[str, Any]:
    value = _require(obj, key, parent)
    if not isinstance(value, dict):
        raise _wrong_type(_path(parent, key), "an object", value)
    return value


def _optional_object(obj: dict[str, Any], key: str, parent: str = "") -> dict[str, Any] | None:
    value = obj.get(key)
    if value is None:
        return None
    if not isinstance(value, dict):
        raise _wrong_type(_path(parent, key), "an object", value)
    return value


def _array(obj: dict[str, Any], key: str, parent: str = "") -> list[Any]:
    value = _require(obj, key, parent)
    if not isinstance(value, list):
        raise _wrong_type(_path(parent, key), "an array", value)
    return value


def _elements(items: list[Any], parent: str) -> list[tuple[str, dict[str, Any]]]:
    """Pair every array element with its path, checking each is an object."""
    out = []
    for i, item in enumerate(items):
        path = f"{parent}[{i}]"
        if not isinstance(item, dict):
            raise _wrong_type(path, "an object", item)
        out.append((path, item))
    return out


def _read_weather(obj: dict[str, Any], parent: str) -> tuple[str, str, str]:
    """``weather[0]`` -> (condition, description, icon)."""
    items = _array(obj, "weather", parent)
    if not items:
        raise MalformedResponse("weather array is empty", path=_path(parent, "weather"))
    path = _path(parent, "weather[0]")
    first = items[0]
    if not isinstance(first, dict):
        raise _wrong_type(path, "an object", first)
    return (
        _string(first, "main", DEFAULT_CONDITION, path),
        _string(first, "description", DEFAULT_DESCRIPTION, path),
        _string(first, "icon", DEFAULT_ICON, path),
    )


def _apply_policy(value: float | None, policy: MissingValuePolicy) -> float | None:
    if value is None and policy is MissingValuePolicy.ZERO:
        return 0.0
    return value


# =============================================================================
# /onecall
# =============================================================================


def decode_current_weather(
    document: dict[str, Any],
    params: QueryParameters,
    policy: MissingValuePolicy = MissingValuePolicy.NULL,
) -> CurrentWeatherRowSet:
    current = _object(document, "current")
    p = "current"
    condition, description, icon = _read_weather(current, p)
    rowset = CurrentWeatherRowSet(
        latitude=params.latitude,
        longitude=params.longitude,
        timezone_name=_string(document, "timezone", DEFAULT_TIMEZONE_NAME),
        observation_time=_int(current, "dt", p),
        temperature_temp=_float(current, "temp", p),
        apparent_temperature_temp=_float(current, "feels_like", p),
        pressure_hpa=_int(current, "pressure", p),
        humidity_pct=_int(current, "humidity", p),
        dew_point_temp=_float(current, "dew_point", p),
        uv_index=_float(current, "uvi", p),
        cloud_cover_pct=_int(current, "clouds", p),
        visibility_m=_int(current, "visibility", p),
        wind_speed_m_s=_float(current, "wind_speed", p),
        wind_direction_deg=_int(current, "wind_deg", p),
        wind_gust_speed_m_s=_optional_float(current, "wind_gust", p),
        weather_condition=condition,
        weather_description=description,
        weather_icon_code=icon,
    )
    logger.info("Decoded current weather (1 row)")
    return rowset


def decode_minutely_forecast(
    document: dict[str, Any],
    params: QueryParameters,
    policy: MissingValuePolicy = MissingValuePolicy.NULL,
) -> MinutelyForecastRowSet:
    forecast_time: list[int] = []
    precipitation: list[float | None] = []
    for path, item in _elements(_array(document, "minutely"), "minutely"):
        forecast_time.append(_int(item, "dt", path))
        precipitation.append(_apply_policy(_optional_float(item, "precipitation", path), policy))

    rowset = MinutelyForecastRowSet(
        latitude=params.latitude,
        longitude=params.longitude,
        forecast_time=tuple(forecast_time),
        precipitation_mm=tuple(precipitation),
    )
    logger.info("Decoded %d minutely forecast rows", rowset.row_count())
    return rowset


def decode_hourly_forecast(
    document: dict[str, Any],
    params: QueryParameters,
    policy: MissingValuePolicy = MissingValuePolicy.NULL,
) -> HourlyForecastRowSet:
    cols: dict[str, list[Any]] = defaultdict(list)
    for path, item in _elements(_array(document, "hourly"), "hourly"):
        condition, description, icon = _read_weather(item, path)
        cols["forecast_time"].append(_int(item, "dt", path))
        cols["temperature_temp"].append(_float(item, "temp", path))
        cols["apparent_temperature_temp"].append(_float(item, "feels_like", path))
        cols["pressure_hpa"].append(_int(item, "pressure", path))
        cols["humidity_pct"].append(_int(item, "humidity", path))
        cols["dew_point_temp"].append(_float(item, "dew_point", path))
        cols["uv_index"].append(_float(item, "uvi", path))
        cols["cloud_cover_pct"].append(_int(item, "clouds", path))
        cols["visibility_m"].append(_int(item, "visibility", path))
        cols["wind_speed_m_s"].append(_float(item, "wind_speed", path))
        cols["wind_direction_deg"].append(_int(item, "wind_deg", path))
        cols["wind_gust_speed_m_s"].append(_optional_float(item, "wind_gust", path))
        cols["precipitation_probability"].append(_float(item, "pop", path))
        # rain/snow are objects keyed by accumulation window: {"1h": 0.5}
        rain = _optional_object(item, "rain", path)
        snow = _optional_object(item, "snow", path)
        cols["rain_volume_1h_mm"].append(_optional_float(rain, "1h", _path(path, "rain")))
        cols["snow_volume_1h_mm"].append(_optional_float(snow, "1h", _path(path, "snow")))
        cols["weather_condition"].append(condition)
        cols["weather_description"].append(description)
        cols["weather_icon_code"].append(icon)

    rowset = HourlyForecastRowSet(
        latitude=params.latitude,
        longitude=params.longitude,
        **{name: tuple(values) for name, values in cols.items()},
    )
    logger.info("Decoded %d hourly forecast rows", rowset.row_count())
    return rowset


def decode_daily_forecast(
    document: dict[str, Any],
    params: QueryParameters,
    policy: MissingValuePolicy = MissingValuePolicy.NULL,
) -> DailyForecastRowSet:
    cols: dict[str, list[Any]] = defaultdict(list)
    for path, item in _elements(_array(document, "daily"), "daily"):
        condition, description, icon = _read_weather(item, path)
        temp = _object(item, "temp", path)
        temp_path = _path(path, "temp")
        feels = _object(item, "feels_like", path)
        feels_path = _path(path, "feels_like")

        cols["forecast_date"].append(_int(item, "dt", path))
        cols["sunrise_time"].append(_int(item, "sunrise", path))
        cols["sunset_time"].append(_int(item, "sunset", path))
        cols["moonrise_time"].append(_int(item, "moonrise", path))
        cols["moonset_time"].append(_int(item, "moonset", path))
        cols["moon_phase_fraction"].append(_float(item, "moon_phase", path))
        cols["temperature_day_temp"].append(_float(temp, "day", temp_path))
        cols["temperature_min_temp"].append(_float(temp, "min", temp_path))
        cols["temperature_max_temp"].append(_float(temp, "max", temp_path))
        cols["temperature_night_temp"].append(_float(temp, "night", temp_path))
        cols["temperature_evening_temp"].append(_float(temp, "eve", temp_path))
        cols["temperature_morning_temp"].append(_float(temp, "morn", temp_path))
        cols["apparent_temperature_day_temp"].append(_float(feels, "day", feels_path))
        cols["apparent_temperature_night_temp"].append(_float(feels, "night", feels_path))
        cols["apparent_temperature_evening_temp"].append(_float(feels, "eve", feels_path))
        cols["apparent_temperature_morning_temp"].append(_float(feels, "morn", feels_path))
        cols["pressure_hpa"].append(_int(item, "pressure", path))
        cols["humidity_pct"].append(_int(item, "humidity", path))
        cols["dew_point_temp"].append(_float(item, "dew_point", path))
        cols["wind_speed_m_s"].append(_float(item, "wind_speed", path))
        cols["wind_direction_deg"].append(_int(item, "wind_deg", path))
        cols["wind_gust_speed_m_s"].append(_optional_float(item, "wind_gust", path))
        cols["cloud_cover_pct"].append(_int(item, "clouds", path))
        cols["precipitation_probability"].append(_float(item, "pop", path))
        # Unlike hourly, daily rain/snow are plain numbers (mm for the day)
        cols["rain_volume_mm"].append(_optional_float(item, "rain", path))
        cols["snow_volume_mm"].append(_optional_float(item, "snow", path))
        cols["uv_index"].append(_float(item, "uvi", path))
        cols["weather_condition"].append(condition)
        cols["weather_description"].append(description)
        cols["weather_icon_code"].append(icon)

    rowset = DailyForecastRowSet(
        latitude=params.latitude,
        longitude=params.longitude,
        **{name: tuple(values) for name, values in cols.items()},
    )
    logger.info("Decoded %d daily forecast rows", rowset.row_count())
    return rowset


def _decode_alert(path: str, item: dict[str, Any]) -> AlertRecord:
    raw_tags = item.get("tags") or []
    if not isinstance(raw_tags, list):
        raise _wrong_type(_path(path, "tags"), "an array", raw_tags)
    tags = []
    for i, tag in enumerate(raw_tags):
        if not isinstance(tag, str):
            raise _wrong_type(f"{path}.tags[{i}]", "a string", tag)
        tags.append(tag)

    return AlertRecord(
        sender_name=_string(item, "sender_name", DEFAULT_ALERT_SENDER, path),
        event=_string(item, "event", DEFAULT_ALERT_EVENT, path),
        start=_optional_int(item, "start", path),
        end=_optional_int(item, "end", path),
        description=_string(item, "description", "", path),
        tags=tuple(tags),
    )


def decode_weather_alerts(
    document: dict[str, Any],
    params: QueryParameters,
    policy: MissingValuePolicy = MissingValuePolicy.NULL,
) -> WeatherAlertsRowSet:
    """The API omits ``alerts`` entirely when none are active: zero rows, not an error."""
    if document.get("alerts") is None:
        logger.info("No weather alerts for this location")
        return WeatherAlertsRowSet(latitude=params.latitude, longitude=params.longitude)

    alerts = tuple(
        _decode_alert(path, item) for path, item in _elements(_array(document, "alerts"), "alerts")
    )
    rowset = WeatherAlertsRowSet(
        latitude=params.latitude,
        longitude=params.longitude,
        alerts=alerts,
    )
    logger.info("Decoded %d weather alerts", rowset.row_count())
    return rowset


# =============================================================================
# /onecall/timemachine
# =============================================================================


def decode_historical_weather(
    document: dict[str, Any],
    params: QueryParameters,
    policy: MissingValuePolicy = MissingValuePolicy.NULL,
) -> HistoricalWeatherRowSet:
    data = _array(document, "data")
    if not data:
        raise MalformedResponse("data array is empty", path="data")
    path = "data[0]"
    first = data[0]
    if not isinstance(first, dict):
        raise _wrong_type(path, "an object", first)

    condition, description, icon = _read_weather(first, path)
    rowset = HistoricalWeatherRowSet(
        latitude=params.latitude,
        longitude=params.longitude,
        observation_time=_int(first, "dt", path),
        temperature_temp=_float(first, "temp", path),
        apparent_temperature_temp=_float(first, "feels_like", path),
        pressure_hpa=_int(first, "pressure", path),
        humidity_pct=_int(first, "humidity", path),
        dew_point_temp=_float(first, "dew_point", path),
        cloud_cover_pct=_int(first, "clouds", path),
        visibility_m=_int(first, "visibility", path),
        wind_speed_m_s=_float(first, "wind_speed", path),
        wind_direction_deg=_int(first, "wind_deg", path),
        weather_condition=condition,
        weather_description=description,
        weather_icon_code=icon,
    )
    if len(data) > 1:
        logger.debug("Ignoring %d extra timemachine data points", len(data) - 1)
    logger.info("Decoded historical weather (1 row)")
    return rowset


# =============================================================================
# /onecall/day_summary
# =============================================================================


def decode_daily_summary(
    document: dict[str, Any],
    params: QueryParameters,
    policy: MissingValuePolicy = MissingValuePolicy.NULL,
) -> DailySummaryRowSet:
    """
    Decode a day summary.

    ``temperature.min``/``max`` and the ``wind.max`` object are required. Every
    other aggregate is optional and resolved through ``policy``.
    """
    temperature = _object(document, "temperature")
    wind = _object(document, "wind")
    wind_max = _object(wind, "max", "wind")

    def afternoon(section: str, key: str = "afternoon") -> float | None:
        parent = _optional_object(document, section)
        return _apply_policy(_optional_float(parent, key, section), policy)

    def optional(obj: dict[str, Any], key: str, parent: str) -> float | None:
        return _apply_policy(_optional_float(obj, key, parent), policy)

    rowset = DailySummaryRowSet(
        latitude=_float(document, "lat"),
        longitude=_float(document, "lon"),
        timezone_offset=_string(document, "tz", DEFAULT_TIMEZONE_OFFSET),
        summary_date=_string(document, "date", ""),
        unit_system=_string(document, "units", DEFAULT_UNIT_SYSTEM),
        temperature_min_temp=_float(temperature, "min", "temperature"),
        temperature_max_temp=_float(temperature, "max", "temperature"),
        temperature_morning_temp=optional(temperature, "morning", "temperature"),
        temperature_afternoon_temp=optional(temperature, "afternoon", "temperature"),
        temperature_evening_temp=optional(temperature, "evening", "temperature"),
        temperature_night_temp=optional(temperature, "night", "temperature"),
        cloud_cover_afternoon_pct=afternoon("cloud_cover"),
        humidity_afternoon_pct=afternoon("humidity"),
        pressure_afternoon_hpa=afternoon("pressure"),
        precipitation_total_mm=afternoon("precipitation", "total"),
        wind_max_speed_m_s=optional(wind_max, "speed", "wind.max"),
        wind_max_direction_deg=optional(wind_max, "direction", "wind.max"),
    )
    logger.info("Decoded daily summary for %s (1 row)", rowset.summary_date or "unknown date")
    return rowset


# =============================================================================
# /onecall/overview
# =============================================================================


def decode_weather_overview(
    document: dict[str, Any],
    params: QueryParameters,
    policy: MissingValuePolicy = MissingValuePolicy.NULL,
) -> WeatherOverviewRowSet:
    rowset = WeatherOverviewRowSet(
        latitude=_float(document, "lat"),
        longitude=_float(document, "lon"),
        timezone_offset=_string(document, "tz", DEFAULT_TIMEZONE_OFFSET),
        overview_date=_string(document, "date", ""),
        unit_system=_string(document, "units", DEFAULT_UNIT_SYSTEM),
        weather_overview=_string(document, "weather_overview", ""),
    )
    logger.info("Decoded weather overview (1 row)")
    return rowset


# =============================================================================
# Dispatch
# =============================================================================

DECODERS: dict[EndpointKind, Callable[..., RowSet]] = {
    EndpointKind.CURRENT_WEATHER: decode_current_weather,
    EndpointKind.MINUTELY_FORECAST: decode_minutely_forecast,
    EndpointKind.HOURLY_FORECAST: decode_hourly_forecast,
    EndpointKind.DAILY_FORECAST: decode_daily_forecast,
    EndpointKind.WEATHER_ALERTS: decode_weather_alerts,
    EndpointKind.HISTORICAL_WEATHER: decode_historical_weather,
    EndpointKind.DAILY_SUMMARY: decode_daily_summary,
    EndpointKind.WEATHER_OVERVIEW: decode_weather_overview,
}


def decode(
    kind: EndpointKind,
    document: dict[str, Any],
    params: QueryParameters,
    policy: MissingValuePolicy = MissingValuePolicy.NULL,
) -> RowSet:
    """Decode ``document`` with the routine for ``kind``."""
    return DECODERS[kind](document, params, policy)
