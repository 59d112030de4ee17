"""Tests for per-endpoint JSON decoding."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from weather_tables.decoders import (
    MissingValuePolicy,
    decode,
    decode_current_weather,
    decode_daily_forecast,
    decode_daily_summary,
    decode_historical_weather,
    decode_hourly_forecast,
    decode_minutely_forecast,
    decode_weather_alerts,
    decode_weather_overview,
    parse_json,
)
from weather_tables.endpoints import EndpointKind
from weather_tables.errors import ErrorKind, MalformedResponse
from weather_tables.parameters import QueryParameters
from weather_tables.rowsets import (
    CurrentWeatherRowSet,
    DailySummaryRowSet,
    HourlyForecastRowSet,
    WeatherAlertsRowSet,
)

Doc = dict[str, Any]


class TestParseJson:
    """Body -> document."""

    def test_object(self) -> None:
        assert parse_json('{"a": 1}') == {"a": 1}

    def test_bytes(self) -> None:
        assert parse_json(b'{"a": 1}') == {"a": 1}

    def test_invalid_json(self) -> None:
        with pytest.raises(MalformedResponse) as exc_info:
            parse_json("{not json")
        assert exc_info.value.kind is ErrorKind.MALFORMED_RESPONSE

    def test_top_level_array(self) -> None:
        with pytest.raises(MalformedResponse):
            parse_json("[1, 2]")


class TestCurrentWeather:
    """/onecall -> current."""

    def test_decodes_scalars(self, onecall: Doc, params: QueryParameters) -> None:
        rowset = decode_current_weather(onecall, params)
        assert rowset.row_count() == 1
        assert rowset.timezone_name == "Europe/Berlin"
        assert rowset.observation_time == 1700000000
        assert rowset.temperature_temp == 8.5
        assert rowset.pressure_hpa == 1012
        assert rowset.visibility_m == 10000
        assert rowset.weather_condition == "Clouds"
        assert rowset.weather_description == "broken clouds"
        assert rowset.weather_icon_code == "04d"

    def test_carries_request_location(self, onecall: Doc) -> None:
        rowset = decode_current_weather(onecall, QueryParameters(latitude=1.0, longitude=2.0))
        assert (rowset.latitude, rowset.longitude) == (1.0, 2.0)

    def test_missing_gust_is_none(self, onecall: Doc, params: QueryParameters) -> None:
        assert decode_current_weather(onecall, params).wind_gust_speed_m_s is None

    def test_timezone_defaults_to_utc(self, onecall: Doc, params: QueryParameters) -> None:
        del onecall["timezone"]
        assert decode_current_weather(onecall, params).timezone_name == "UTC"

    def test_integral_float_accepted_for_int_field(
        self, onecall: Doc, params: QueryParameters
    ) -> None:
        onecall["current"]["pressure"] = 1012.0
        assert decode_current_weather(onecall, params).pressure_hpa == 1012

    def test_int_accepted_for_float_field(self, onecall: Doc, params: QueryParameters) -> None:
        onecall["current"]["temp"] = 9
        rowset = decode_current_weather(onecall, params)
        assert rowset.temperature_temp == 9.0
        assert isinstance(rowset.temperature_temp, float)

    def test_missing_current(self, onecall: Doc, params: QueryParameters) -> None:
        del onecall["current"]
        with pytest.raises(MalformedResponse) as exc_info:
            decode_current_weather(onecall, params)
        assert exc_info.value.path == "current"

    def test_missing_field_names_path(self, onecall: Doc, params: QueryParameters) -> None:
        del onecall["current"]["uvi"]
        with pytest.raises(MalformedResponse) as exc_info:
            decode_current_weather(onecall, params)
        assert exc_info.value.path == "current.uvi"
        assert "current.uvi" in exc_info.value.message

    @pytest.mark.parametrize("value", ["1012", True, 1012.5, None])
    def test_wrong_type(self, onecall: Doc, params: QueryParameters, value: object) -> None:
        onecall["current"]["pressure"] = value
        with pytest.raises(MalformedResponse):
            decode_current_weather(onecall, params)

    def test_integer_beyond_float_range(self, onecall: Doc, params: QueryParameters) -> None:
        onecall["current"]["temp"] = 10**400
        with pytest.raises(MalformedResponse) as exc_info:
            decode_current_weather(onecall, params)
        assert exc_info.value.path == "current.temp"
        assert "a finite number" in exc_info.value.message

    def test_weather_defaults(self, onecall: Doc, params: QueryParameters) -> None:
        onecall["current"]["weather"] = [{"id": 800}]
        rowset = decode_current_weather(onecall, params)
        assert rowset.weather_condition == "Unknown"
        assert rowset.weather_description == "unknown"
        assert rowset.weather_icon_code == "01d"

    def test_empty_weather_array(self, onecall: Doc, params: QueryParameters) -> None:
        onecall["current"]["weather"] = []
        with pytest.raises(MalformedResponse, match="weather array is empty"):
            decode_current_weather(onecall, params)

    def test_missing_weather_array(self, onecall: Doc, params: QueryParameters) -> None:
        del onecall["current"]["weather"]
        with pytest.raises(MalformedResponse):
            decode_current_weather(onecall, params)


class TestMinutelyForecast:
    """/onecall -> minutely[]."""

    def test_rows(self, onecall: Doc, params: QueryParameters) -> None:
        rowset = decode_minutely_forecast(onecall, params)
        assert rowset.row_count() == 3
        assert rowset.forecast_time == (1700000040, 1700000100, 1700000160)
        assert rowset.precipitation_mm == (0.0, 0.25, None)

    def test_zero_policy(self, onecall: Doc, params: QueryParameters) -> None:
        rowset = decode_minutely_forecast(onecall, params, MissingValuePolicy.ZERO)
        assert rowset.precipitation_mm[2] == 0.0

    def test_missing_dt(self, onecall: Doc, params: QueryParameters) -> None:
        del onecall["minutely"][1]["dt"]
        with pytest.raises(MalformedResponse) as exc_info:
            decode_minutely_forecast(onecall, params)
        assert exc_info.value.path == "minutely[1].dt"

    def test_missing_array(self, onecall: Doc, params: QueryParameters) -> None:
        del onecall["minutely"]
        with pytest.raises(MalformedResponse):
            decode_minutely_forecast(onecall, params)


class TestHourlyForecast:
    """/onecall -> hourly[]."""

    def test_row_count_matches_array(self, onecall: Doc, params: QueryParameters) -> None:
        assert decode_hourly_forecast(onecall, params).row_count() == 2

    def test_order_preserved(self, onecall: Doc, params: QueryParameters) -> None:
        rowset = decode_hourly_forecast(onecall, params)
        assert rowset.temperature_temp == (8.5, 9.1)
        assert rowset.forecast_time == (1700000000, 1700003600)
        assert rowset.weather_condition == ("Clouds", "Rain")

    def test_rain_nested_volume(self, onecall: Doc, params: QueryParameters) -> None:
        rowset = decode_hourly_forecast(onecall, params)
        assert rowset.rain_volume_1h_mm == (None, 2.5)
        assert rowset.snow_volume_1h_mm == (None, None)

    def test_rain_without_1h_key(self, onecall: Doc, params: QueryParameters) -> None:
        onecall["hourly"][1]["rain"] = {"3h": 4.0}
        assert decode_hourly_forecast(onecall, params).rain_volume_1h_mm == (None, None)

    def test_optional_gust(self, onecall: Doc, params: QueryParameters) -> None:
        assert decode_hourly_forecast(onecall, params).wind_gust_speed_m_s == (7.9, None)

    def test_element_failure_aborts(self, onecall: Doc, params: QueryParameters) -> None:
        del onecall["hourly"][1]["temp"]
        with pytest.raises(MalformedResponse) as exc_info:
            decode_hourly_forecast(onecall, params)
        assert exc_info.value.path == "hourly[1].temp"

    def test_empty_array(self, onecall: Doc, params: QueryParameters) -> None:
        onecall["hourly"] = []
        assert decode_hourly_forecast(onecall, params).row_count() == 0

    def test_non_object_element(self, onecall: Doc, params: QueryParameters) -> None:
        onecall["hourly"].append(42)
        with pytest.raises(MalformedResponse) as exc_info:
            decode_hourly_forecast(onecall, params)
        assert exc_info.value.path == "hourly[2]"


class TestDailyForecast:
    """/onecall -> daily[]."""

    def test_nested_temperatures(self, onecall: Doc, params: QueryParameters) -> None:
        rowset = decode_daily_forecast(onecall, params)
        assert rowset.row_count() == 1
        assert rowset.temperature_min_temp == (4.1,)
        assert rowset.temperature_evening_temp == (7.7,)
        assert rowset.temperature_morning_temp == (4.5,)
        assert rowset.apparent_temperature_night_temp == (2.9,)

    def test_plain_number_volumes(self, onecall: Doc, params: QueryParameters) -> None:
        rowset = decode_daily_forecast(onecall, params)
        assert rowset.rain_volume_mm == (3.4,)
        assert rowset.snow_volume_mm == (None,)

    def test_astronomy(self, onecall: Doc, params: QueryParameters) -> None:
        rowset = decode_daily_forecast(onecall, params)
        assert rowset.sunrise_time == (1699943000,)
        assert rowset.moon_phase_fraction == (0.03,)

    def test_missing_nested_temp(self, onecall: Doc, params: QueryParameters) -> None:
        del onecall["daily"][0]["temp"]["eve"]
        with pytest.raises(MalformedResponse) as exc_info:
            decode_daily_forecast(onecall, params)
        assert exc_info.value.path == "daily[0].temp.eve"


class TestWeatherAlerts:
    """/onecall -> alerts[]."""

    def test_alert_fields(self, onecall: Doc, params: QueryParameters) -> None:
        rowset = decode_weather_alerts(onecall, params)
        assert rowset.row_count() == 1
        alert = rowset.alerts[0]
        assert alert.sender_name == "Deutscher Wetterdienst"
        assert alert.event == "Wind gusts"
        assert (alert.start, alert.end) == (1700010000, 1700050000)
        assert alert.tags == ("Wind", "Gust")

    def test_absent_alerts_is_zero_rows(self, onecall: Doc, params: QueryParameters) -> None:
        del onecall["alerts"]
        rowset = decode_weather_alerts(onecall, params)
        assert isinstance(rowset, WeatherAlertsRowSet)
        assert rowset.row_count() == 0

    def test_defaults(self, onecall: Doc, params: QueryParameters) -> None:
        onecall["alerts"] = [{}, {"event": "Frost"}]
        rowset = decode_weather_alerts(onecall, params)
        assert rowset.row_count() == 2
        first = rowset.alerts[0]
        assert first.sender_name == "Unknown"
        assert first.event == "Unknown"
        assert first.description == ""
        assert first.start is None
        assert first.tags == ()
        assert rowset.alerts[1].event == "Frost"

    def test_bad_tag(self, onecall: Doc, params: QueryParameters) -> None:
        onecall["alerts"][0]["tags"] = ["Wind", 3]
        with pytest.raises(MalformedResponse) as exc_info:
            decode_weather_alerts(onecall, params)
        assert exc_info.value.path == "alerts[0].tags[1]"


class TestHistoricalWeather:
    """/onecall/timemachine -> data[0]."""

    def test_first_element(self, timemachine: Doc, params: QueryParameters) -> None:
        rowset = decode_historical_weather(timemachine, params)
        assert rowset.row_count() == 1
        assert rowset.observation_time == 1704067200
        assert rowset.temperature_temp == 3.2
        assert rowset.weather_icon_code == "04n"

    def test_only_first_element_used(
        self, timemachine: Doc, params: QueryParameters
    ) -> None:
        second = dict(timemachine["data"][0], dt=1704070800, temp=99.0)
        timemachine["data"].append(second)
        rowset = decode_historical_weather(timemachine, params)
        assert rowset.row_count() == 1
        assert rowset.temperature_temp == 3.2

    def test_empty_data(self, timemachine: Doc, params: QueryParameters) -> None:
        timemachine["data"] = []
        with pytest.raises(MalformedResponse) as exc_info:
            decode_historical_weather(timemachine, params)
        assert exc_info.value.message == "data array is empty"

    def test_missing_data(self, timemachine: Doc, params: QueryParameters) -> None:
        del timemachine["data"]
        with pytest.raises(MalformedResponse) as exc_info:
            decode_historical_weather(timemachine, params)
        assert exc_info.value.path == "data"


class TestDailySummary:
    """/onecall/day_summary."""

    def test_full_document(self, day_summary: Doc, params: QueryParameters) -> None:
        rowset = decode_daily_summary(day_summary, params)
        assert rowset.timezone_offset == "+01:00"
        assert rowset.summary_date == "2024-01-15"
        assert rowset.temperature_min_temp == -1.5
        assert rowset.temperature_afternoon_temp == 3.9
        assert rowset.cloud_cover_afternoon_pct == 40.0
        assert rowset.precipitation_total_mm == 1.2
        assert rowset.wind_max_speed_m_s == 6.7
        assert rowset.wind_max_direction_deg == 270.0

    def test_response_location(self, day_summary: Doc) -> None:
        day_summary["lat"] = 10.0
        rowset = decode_daily_summary(day_summary, QueryParameters(latitude=1.0, longitude=2.0))
        assert rowset.latitude == 10.0
        assert rowset.longitude == 13.405

    def test_defaults(self, day_summary: Doc, params: QueryParameters) -> None:
        for key in ("tz", "date", "units"):
            del day_summary[key]
        rowset = decode_daily_summary(day_summary, params)
        assert rowset.timezone_offset == "+00:00"
        assert rowset.summary_date == ""
        assert rowset.unit_system == "metric"

    def test_absent_optionals_null_by_default(
        self, day_summary: Doc, params: QueryParameters
    ) -> None:
        del day_summary["pressure"]
        del day_summary["temperature"]["night"]
        day_summary["wind"]["max"] = {}
        rowset = decode_daily_summary(day_summary, params)
        assert rowset.pressure_afternoon_hpa is None
        assert rowset.temperature_night_temp is None
        assert rowset.wind_max_speed_m_s is None

    def test_zero_policy(self, day_summary: Doc, params: QueryParameters) -> None:
        del day_summary["precipitation"]
        rowset = decode_daily_summary(day_summary, params, MissingValuePolicy.ZERO)
        assert rowset.precipitation_total_mm == 0.0
        assert rowset.temperature_min_temp == -1.5

    @pytest.mark.parametrize("path", [("temperature", "min"), ("temperature", "max")])
    def test_required_temperatures(
        self, day_summary: Doc, params: QueryParameters, path: tuple[str, str]
    ) -> None:
        del day_summary[path[0]][path[1]]
        with pytest.raises(MalformedResponse) as exc_info:
            decode_daily_summary(day_summary, params)
        assert exc_info.value.path == ".".join(path)

    def test_wind_max_required(self, day_summary: Doc, params: QueryParameters) -> None:
        day_summary["wind"] = {}
        with pytest.raises(MalformedResponse) as exc_info:
            decode_daily_summary(day_summary, params)
        assert exc_info.value.path == "wind.max"

    def test_lat_required(self, day_summary: Doc, params: QueryParameters) -> None:
        del day_summary["lat"]
        with pytest.raises(MalformedResponse):
            decode_daily_summary(day_summary, params)


class TestWeatherOverview:
    """/onecall/overview."""

    def test_fields(self, overview: Doc, params: QueryParameters) -> None:
        rowset = decode_weather_overview(overview, params)
        assert rowset.row_count() == 1
        assert rowset.overview_date == "2024-01-15"
        assert rowset.weather_overview.startswith("Cloudy")

    def test_defaults(self, params: QueryParameters) -> None:
        rowset = decode_weather_overview({"lat": 1, "lon": 2}, params)
        assert rowset.latitude == 1.0
        assert rowset.timezone_offset == "+00:00"
        assert rowset.overview_date == ""
        assert rowset.unit_system == "metric"
        assert rowset.weather_overview == ""


class TestDispatch:
    """decode() routes by endpoint kind."""

    @pytest.mark.parametrize(
        ("kind", "expected"),
        [
            (EndpointKind.CURRENT_WEATHER, CurrentWeatherRowSet),
            (EndpointKind.HOURLY_FORECAST, HourlyForecastRowSet),
            (EndpointKind.WEATHER_ALERTS, WeatherAlertsRowSet),
        ],
    )
    def test_onecall_sections(
        self,
        onecall: Doc,
        params: QueryParameters,
        kind: EndpointKind,
        expected: type,
    ) -> None:
        rowset = decode(kind, onecall, params)
        assert isinstance(rowset, expected)
        assert rowset.kind is kind

    def test_policy_forwarded(self, day_summary: Doc, params: QueryParameters) -> None:
        del day_summary["humidity"]
        rowset = decode(EndpointKind.DAILY_SUMMARY, day_summary, params, MissingValuePolicy.ZERO)
        assert isinstance(rowset, DailySummaryRowSet)
        assert rowset.humidity_afternoon_pct == 0.0

    def test_logs_row_count(
        self,
        onecall: Doc,
        params: QueryParameters,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.INFO, logger="weather_tables.decoders"):
            decode(EndpointKind.HOURLY_FORECAST, onecall, params)
        assert "Decoded 2 hourly forecast rows" in caplog.text
