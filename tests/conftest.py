"""Shared fixtures: sample API documents, a recording transport, credentials."""

from __future__ import annotations

import copy
import json
from typing import Any

import pytest

from weather_tables.parameters import Predicate, QueryParameters
from weather_tables.request import Credentials
from weather_tables.services.http import HttpResponse

ONECALL_DOCUMENT: dict[str, Any] = {
    "lat": 52.52,
    "lon": 13.405,
    "timezone": "Europe/Berlin",
    "timezone_offset": 3600,
    "current": {
        "dt": 1700000000,
        "sunrise": 1699943000,
        "sunset": 1699976000,
        "temp": 8.5,
        "feels_like": 6.2,
        "pressure": 1012,
        "humidity": 81,
        "dew_point": 5.4,
        "uvi": 0.4,
        "clouds": 75,
        "visibility": 10000,
        "wind_speed": 4.1,
        "wind_deg": 230,
        "weather": [{"id": 803, "main": "Clouds", "description": "broken clouds", "icon": "04d"}],
    },
    "minutely": [
        {"dt": 1700000040, "precipitation": 0},
        {"dt": 1700000100, "precipitation": 0.25},
        {"dt": 1700000160},
    ],
    "hourly": [
        {
            "dt": 1700000000,
            "temp": 8.5,
            "feels_like": 6.2,
            "pressure": 1012,
            "humidity": 81,
            "dew_point": 5.4,
            "uvi": 0.4,
            "clouds": 75,
            "visibility": 10000,
            "wind_speed": 4.1,
            "wind_deg": 230,
            "wind_gust": 7.9,
            "weather": [
                {"id": 803, "main": "Clouds", "description": "broken clouds", "icon": "04d"}
            ],
            "pop": 0.1,
        },
        {
            "dt": 1700003600,
            "temp": 9.1,
            "feels_like": 7.0,
            "pressure": 1011,
            "humidity": 84,
            "dew_point": 6.5,
            "uvi": 0.2,
            "clouds": 90,
            "visibility": 9000,
            "wind_speed": 4.6,
            "wind_deg": 240,
            "weather": [{"id": 500, "main": "Rain", "description": "light rain", "icon": "10d"}],
            "pop": 0.8,
            "rain": {"1h": 2.5},
        },
    ],
    "daily": [
        {
            "dt": 1699956000,
            "sunrise": 1699943000,
            "sunset": 1699976000,
            "moonrise": 1699950000,
            "moonset": 1699980000,
            "moon_phase": 0.03,
            "summary": "Expect a day of partly cloudy with rain",
            "temp": {"day": 9.3, "min": 4.1, "max": 10.2, "night": 5.0, "eve": 7.7, "morn": 4.5},
            "feels_like": {"day": 7.1, "night": 2.9, "eve": 5.8, "morn": 2.0},
            "pressure": 1010,
            "humidity": 78,
            "dew_point": 5.6,
            "wind_speed": 5.2,
            "wind_deg": 225,
            "wind_gust": 11.3,
            "weather": [{"id": 500, "main": "Rain", "description": "light rain", "icon": "10d"}],
            "clouds": 88,
            "pop": 0.9,
            "rain": 3.4,
            "uvi": 0.6,
        },
    ],
    "alerts": [
        {
            "sender_name": "Deutscher Wetterdienst",
            "event": "Wind gusts",
            "start": 1700010000,
            "end": 1700050000,
            "description": "There is a risk of wind gusts.",
            "tags": ["Wind", "Gust"],
        },
    ],
}

TIMEMACHINE_DOCUMENT: dict[str, Any] = {
    "lat": 52.52,
    "lon": 13.405,
    "timezone": "Europe/Berlin",
    "timezone_offset": 3600,
    "data": [
        {
            "dt": 1704067200,
            "temp": 3.2,
            "feels_like": 0.4,
            "pressure": 1004,
            "humidity": 92,
            "dew_point": 2.0,
            "clouds": 100,
            "visibility": 7000,
            "wind_speed": 3.6,
            "wind_deg": 250,
            "weather": [
                {"id": 804, "main": "Clouds", "description": "overcast clouds", "icon": "04n"}
            ],
        },
    ],
}

DAY_SUMMARY_DOCUMENT: dict[str, Any] = {
    "lat": 52.52,
    "lon": 13.405,
    "tz": "+01:00",
    "date": "2024-01-15",
    "units": "metric",
    "cloud_cover": {"afternoon": 40.0},
    "humidity": {"afternoon": 71.0},
    "precipitation": {"total": 1.2},
    "temperature": {
        "min": -1.5,
        "max": 4.3,
        "afternoon": 3.9,
        "night": -0.8,
        "evening": 1.2,
        "morning": -1.1,
    },
    "pressure": {"afternoon": 1019.0},
    "wind": {"max": {"speed": 6.7, "direction": 270.0}},
}

OVERVIEW_DOCUMENT: dict[str, Any] = {
    "lat": 52.52,
    "lon": 13.405,
    "tz": "+01:00",
    "date": "2024-01-15",
    "units": "metric",
    "weather_overview": "Cloudy with light rain in the afternoon.",
}


def document(source: dict[str, Any]) -> dict[str, Any]:
    """Deep copy of a sample document, safe to mutate in a test."""
    return copy.deepcopy(source)


class RecordingTransport:
    """Transport that replays canned responses and records every call."""

    def __init__(self, *responses: HttpResponse) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, tuple[tuple[str, str], ...]]] = []

    def get(self, url: str, params: Any) -> HttpResponse:
        self.calls.append((url, tuple(params)))
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]


def ok(doc: dict[str, Any]) -> HttpResponse:
    return HttpResponse(status_code=200, body=json.dumps(doc))


@pytest.fixture
def onecall() -> dict[str, Any]:
    return document(ONECALL_DOCUMENT)


@pytest.fixture
def timemachine() -> dict[str, Any]:
    return document(TIMEMACHINE_DOCUMENT)


@pytest.fixture
def day_summary() -> dict[str, Any]:
    return document(DAY_SUMMARY_DOCUMENT)


@pytest.fixture
def overview() -> dict[str, Any]:
    return document(OVERVIEW_DOCUMENT)


@pytest.fixture
def params() -> QueryParameters:
    return QueryParameters(latitude=52.52, longitude=13.405)


@pytest.fixture
def location() -> list[Predicate]:
    return [Predicate("latitude", "=", 52.52), Predicate("longitude", "=", 13.405)]


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(api_key="test-key", base_url="https://api.example.test/data/3.0")
