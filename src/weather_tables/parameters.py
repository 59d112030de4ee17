"""
Query parameter extraction from predicate lists.

The host hands over the final list of predicates for a scan. Only equality
predicates are honored; other operators on the same field are ignored. When
the same field appears in more than one equality predicate the first one wins.

Example::

    from weather_tables.endpoints import resolve
    from weather_tables.parameters import Predicate, extract

    params = extract(
        [Predicate("latitude", "=", 52.52), Predicate("longitude", "=", 13.405)],
        resolve("current_weather"),
    )
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from weather_tables.cells import MICROS_PER_SECOND, Cell, CellKind
from weather_tables.errors import (
    LOCATION_EXAMPLE,
    InvalidParameterRange,
    MissingRequiredParameter,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from weather_tables.endpoints import EndpointDescriptor

logger = logging.getLogger(__name__)

DEFAULT_UNITS = "metric"
DEFAULT_LANGUAGE = "en"
VALID_UNITS = ("standard", "metric", "imperial")

EQUALITY = "="

LATITUDE_RANGE = (-90.0, 90.0)
LONGITUDE_RANGE = (-180.0, 180.0)

HISTORICAL_EXAMPLE = (
    "Example: WHERE latitude = 52.52 AND longitude = 13.405 "
    "AND observation_time = '2024-01-01 00:00:00+00'"
)
SUMMARY_EXAMPLE = (
    "Example: WHERE latitude = 52.52 AND longitude = 13.405 AND summary_date = '2024-01-15'"
)
OVERVIEW_EXAMPLE = (
    "Example: WHERE latitude = 52.52 AND longitude = 13.405 AND overview_date = '2024-01-15'"
)
OFFSET_EXAMPLE = (
    "Example: WHERE latitude = 52.52 AND longitude = 13.405 "
    "AND summary_date = '2024-01-15' AND timezone_offset = '+0100'"
)

_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")
_OFFSET_RE = re.compile(r"([+-])(\d{2}):?(\d{2})")


@dataclass(frozen=True)
class Predicate:
    """A single ``field operator value`` condition from the caller."""

    field: str
    operator: str
    value: Any

    @property
    def is_equality(self) -> bool:
        return self.operator == EQUALITY


@dataclass(frozen=True)
class QueryParameters:
    """Validated per-scan parameters. Immutable once built."""

    latitude: float
    longitude: float
    units: str = DEFAULT_UNITS
    language: str = DEFAULT_LANGUAGE
    observation_time: int | None = None
    summary_date: str | None = None
    overview_date: str | None = None
    timezone_offset: str | None = None


# =============================================================================
# Raw predicate lookup
# =============================================================================


def equality_predicates(values: Mapping[str, Any]) -> list[Predicate]:
    """``{"latitude": 52.52, ...}`` -> equality predicates, skipping ``None`` values."""
    return [Predicate(name, EQUALITY, value) for name, value in values.items() if value is not None]


def find_equality(predicates: Iterable[Predicate], field: str) -> Any | None:
    """Return the value of the first equality predicate on ``field``, or None."""
    for predicate in predicates:
        if predicate.field == field and predicate.is_equality:
            return predicate.value
    return None


def _to_float(value: int | float | Decimal) -> float:
    try:
        return float(value)
    except OverflowError:
        # Integers past float range; keep the sign so the range check rejects them.
        return math.inf if value > 0 else -math.inf


def _as_number(value: Any) -> float | None:
    if isinstance(value, Cell):
        if value.kind in (CellKind.FLOAT64, CellKind.INT64):
            return _to_float(value.value)  # type: ignore[arg-type]
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return _to_float(value)
    return None


def _as_string(value: Any) -> str | None:
    if isinstance(value, Cell):
        return value.value if value.kind is CellKind.STRING else None  # type: ignore[return-value]
    if isinstance(value, str):
        return value
    return None


def _as_epoch_seconds(value: Any) -> int | None:
    """Timestamp-valued predicate -> epoch seconds."""
    if isinstance(value, Cell):
        if value.kind is CellKind.TIMESTAMP:
            return int(value.value) // MICROS_PER_SECOND  # type: ignore[arg-type]
        if value.kind is CellKind.INT64:
            return int(value.value)  # type: ignore[arg-type]
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return int(value.timestamp())
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    return None


def _as_date_string(value: Any) -> str | None:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return _as_string(value)


# =============================================================================
# Validation
# =============================================================================


def _check_range(name: str, value: float, bounds: tuple[float, float], example: str) -> float:
    low, high = bounds
    if math.isnan(value) or not low <= value <= high:
        msg = (
            f"{name} must be between {low:g} and {high:g}, got {value}. "
            f"Example: WHERE {name} = {example}"
        )
        raise InvalidParameterRange(msg, parameter=name, value=value)
    return value


def _check_date(name: str, value: str, example: str) -> str:
    if _DATE_RE.fullmatch(value):
        try:
            date.fromisoformat(value)
        except ValueError:
            pass
        else:
            return value
    msg = f"{name} must be a calendar date in YYYY-MM-DD format, got '{value}'. {example}"
    raise InvalidParameterRange(msg, parameter=name, value=value)


def _check_offset(value: str) -> str:
    match = _OFFSET_RE.fullmatch(value)
    if match:
        sign, hours, minutes = match.groups()
        if int(hours) <= 14 and int(minutes) < 60:
            return f"{sign}{hours}{minutes}"
    msg = f"timezone_offset must look like +HHMM or -HHMM, got '{value}'. {OFFSET_EXAMPLE}"
    raise InvalidParameterRange(msg, parameter="timezone_offset", value=value)


def extract_location(predicates: Iterable[Predicate]) -> tuple[float, float]:
    """
    Extract and range-check latitude and longitude.

    Raises:
        MissingRequiredParameter: If either coordinate has no numeric
            equality predicate.
        InvalidParameterRange: If a coordinate is outside its bounds.
    """
    predicates = list(predicates)
    latitude = _as_number(find_equality(predicates, "latitude"))
    if latitude is None:
        msg = f"WHERE clause must include 'latitude' between -90 and 90. {LOCATION_EXAMPLE}"
        raise MissingRequiredParameter(msg, parameter="latitude")

    longitude = _as_number(find_equality(predicates, "longitude"))
    if longitude is None:
        msg = f"WHERE clause must include 'longitude' between -180 and 180. {LOCATION_EXAMPLE}"
        raise MissingRequiredParameter(msg, parameter="longitude")

    _check_range("latitude", latitude, LATITUDE_RANGE, "52.52")
    _check_range("longitude", longitude, LONGITUDE_RANGE, "13.405")
    return latitude, longitude


def extract(predicates: Iterable[Predicate], descriptor: EndpointDescriptor) -> QueryParameters:
    """
    Build :class:`QueryParameters` for one scan.

    Endpoint-specific extras are only read for the endpoint that accepts them,
    so an ``observation_time`` predicate on ``current_weather`` is ignored.

    Args:
        predicates: Final predicate list from the host.
        descriptor: Endpoint being scanned.

    Returns:
        Validated, immutable parameters.
    """
    predicates = list(predicates)
    latitude, longitude = extract_location(predicates)

    units = _as_string(find_equality(predicates, "units")) or DEFAULT_UNITS
    if units not in VALID_UNITS:
        msg = (
            f"units must be one of {', '.join(VALID_UNITS)}, got '{units}'. "
            "Example: WHERE latitude = 52.52 AND longitude = 13.405 AND units = 'imperial'"
        )
        raise InvalidParameterRange(msg, parameter="units", value=units)

    language = (
        _as_string(find_equality(predicates, "lang"))
        or _as_string(find_equality(predicates, "language"))
        or DEFAULT_LANGUAGE
    )

    observation_time: int | None = None
    summary_date: str | None = None
    overview_date: str | None = None
    timezone_offset: str | None = None

    if descriptor.accepts("observation_time"):
        observation_time = _as_epoch_seconds(find_equality(predicates, "observation_time"))
        if observation_time is None:
            msg = (
                "WHERE clause must include 'observation_time' for "
                f"{descriptor.table_name}. {HISTORICAL_EXAMPLE}"
            )
            raise MissingRequiredParameter(msg, parameter="observation_time")

    if descriptor.accepts("summary_date"):
        raw_date = _as_date_string(find_equality(predicates, "summary_date"))
        if raw_date is None:
            msg = (
                "WHERE clause must include 'summary_date' (YYYY-MM-DD format) for "
                f"{descriptor.table_name}. {SUMMARY_EXAMPLE}"
            )
            raise MissingRequiredParameter(msg, parameter="summary_date")
        summary_date = _check_date("summary_date", raw_date, SUMMARY_EXAMPLE)

    if descriptor.accepts("timezone_offset"):
        raw_offset = _as_string(find_equality(predicates, "timezone_offset"))
        if raw_offset is not None:
            timezone_offset = _check_offset(raw_offset)

    if descriptor.accepts("overview_date"):
        raw_date = _as_date_string(find_equality(predicates, "overview_date"))
        if raw_date is not None:
            overview_date = _check_date("overview_date", raw_date, OVERVIEW_EXAMPLE)

    params = QueryParameters(
        latitude=latitude,
        longitude=longitude,
        units=units,
        language=language,
        observation_time=observation_time,
        summary_date=summary_date,
        overview_date=overview_date,
        timezone_offset=timezone_offset,
    )
    logger.debug("Extracted parameters for %s: %s", descriptor.table_name, params)
    return params
