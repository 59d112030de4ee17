"""
Structured errors for the scan engine.

Every failure carries an :class:`ErrorKind` so callers can branch on the kind
instead of matching message strings. The message itself stays human-readable
and, for parameter errors, includes a worked example clause.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

#: Example clause appended to location errors.
LOCATION_EXAMPLE = "Example: WHERE latitude = 52.52 AND longitude = 13.405"


class ErrorKind(StrEnum):
    """Error taxonomy for every lifecycle call."""

    UNSUPPORTED_ENDPOINT = "unsupported_endpoint"
    MISSING_REQUIRED_PARAMETER = "missing_required_parameter"
    INVALID_PARAMETER_RANGE = "invalid_parameter_range"
    TRANSPORT_ERROR = "transport_error"
    MALFORMED_RESPONSE = "malformed_response"
    UNKNOWN_COLUMN = "unknown_column"
    ROW_INDEX_OUT_OF_BOUNDS = "row_index_out_of_bounds"
    UNSUPPORTED_OPERATION = "unsupported_operation"
    CONFIGURATION = "configuration"


class WeatherTableError(Exception):
    """Base exception for all weather-tables errors."""

    kind: ErrorKind = ErrorKind.CONFIGURATION

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r})"


class UnsupportedEndpoint(WeatherTableError):
    """Table name does not map to a known endpoint."""

    kind = ErrorKind.UNSUPPORTED_ENDPOINT


class MissingRequiredParameter(WeatherTableError):
    """A required equality predicate was not supplied."""

    kind = ErrorKind.MISSING_REQUIRED_PARAMETER


class InvalidParameterRange(WeatherTableError):
    """A predicate value is outside its accepted range or format."""

    kind = ErrorKind.INVALID_PARAMETER_RANGE


class TransportError(WeatherTableError):
    """Non-2xx status or network failure from the HTTP collaborator."""

    kind = ErrorKind.TRANSPORT_ERROR

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
        **context: Any,
    ) -> None:
        super().__init__(message, status_code=status_code, **context)
        self.status_code = status_code
        self.body = body


class MalformedResponse(WeatherTableError):
    """Response body is not valid JSON or lacks a required field."""

    kind = ErrorKind.MALFORMED_RESPONSE

    def __init__(self, message: str, *, path: str | None = None, **context: Any) -> None:
        super().__init__(message, path=path, **context)
        self.path = path


class UnknownColumn(WeatherTableError):
    """Requested column is not part of the endpoint's column set."""

    kind = ErrorKind.UNKNOWN_COLUMN


class RowIndexOutOfBounds(WeatherTableError):
    """Projection asked for a row past the end of the row-set."""

    kind = ErrorKind.ROW_INDEX_OUT_OF_BOUNDS


class UnsupportedOperation(WeatherTableError):
    """Write-path operations are permanently rejected."""

    kind = ErrorKind.UNSUPPORTED_OPERATION


class ConfigurationError(WeatherTableError):
    """Settings are incomplete (e.g. no API key configured)."""

    kind = ErrorKind.CONFIGURATION


__all__ = [
    "LOCATION_EXAMPLE",
    "ConfigurationError",
    "ErrorKind",
    "InvalidParameterRange",
    "MalformedResponse",
    "MissingRequiredParameter",
    "RowIndexOutOfBounds",
    "TransportError",
    "UnknownColumn",
    "UnsupportedEndpoint",
    "UnsupportedOperation",
    "WeatherTableError",
]
