"""Integration tests for the fails-soft aggregator."""

from __future__ import annotations

from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
import responses
from requests import Session
from requests.exceptions import ConnectionError as RequestsConnectionError

from ecowatch.aggregator import build_summary, collect_summary, run_source
from ecowatch.config import (
    AIR_QUALITY_ENDPOINT,
    BULLETIN_URL,
    SEISMIC_FEED_URL,
    WEATHER_ENDPOINT,
    EcoWatchConfig,
)
from ecowatch.errors import UpstreamError
from ecowatch.models import AlertBulletin, SourceOutcome


def _feed_row(when: datetime, magnitude: str, location: str) -> str:
    return (
        f"<tr><td>{when:%d/%m/%Y}</td><td>{when:%H:%M:%S}</td>"
        f"<td>30.1</td><td>78.9</td><td>{magnitude}</td><td>10</td>"
        f"<td>{location}</td></tr>"
    )


def _register_all_sources(
    weather: dict,
    air_quality: dict,
    bulletin: str,
    feed: str,
) -> None:
    responses.add(responses.GET, WEATHER_ENDPOINT, json=weather, status=200)
    responses.add(responses.GET, AIR_QUALITY_ENDPOINT, json=air_quality, status=200)
    responses.add(responses.GET, BULLETIN_URL, body=bulletin, status=200)
    responses.add(responses.GET, SEISMIC_FEED_URL, body=feed, status=200)


def _fail_all_sources() -> None:
    for url in (WEATHER_ENDPOINT, AIR_QUALITY_ENDPOINT, BULLETIN_URL, SEISMIC_FEED_URL):
        responses.add(responses.GET, url, status=502)


class TestCollectSummary:
    @responses.activate
    @pytest.mark.parametrize("concurrent", [False, True])
    def test_all_sources_succeed(
        self,
        concurrent,
        sample_weather_response,
        sample_air_quality_response,
        bulletin_html,
        seismic_html,
        fixed_now,
    ):
        _register_all_sources(
            sample_weather_response, sample_air_quality_response, bulletin_html, seismic_html,
        )
        config = EcoWatchConfig(openweather_api_key="test-key", concurrent=concurrent)
        summary = collect_summary("dehradun", config, now=fixed_now)

        assert summary.target_location_name == "Dehradun"
        assert summary.generated_at == fixed_now
        assert summary.source_errors == []
        assert summary.weather is not None
        assert summary.weather.temperature_celsius == 22
        assert summary.air_quality is not None
        assert summary.air_quality.category == "Moderate"
        assert summary.alerts is not None
        assert summary.alerts.notices[0] == "Heavy Rain at isolated places"
        assert len(summary.seismic_events) == 3

    @responses.activate
    def test_all_sources_fail(self, fixed_now):
        _fail_all_sources()
        config = EcoWatchConfig(openweather_api_key="test-key", concurrent=False)
        summary = collect_summary("", config, now=fixed_now)

        assert summary.target_location_name == "Dehradun"
        assert summary.weather is None
        assert summary.air_quality is None
        assert summary.alerts == AlertBulletin.unavailable()
        assert summary.alerts.summary_line == "Alerts service unavailable."
        assert summary.seismic_events == []
        assert len(summary.source_errors) == 4
        assert [e.split(":")[0] for e in summary.source_errors] == [
            "Weather",
            "Air Quality",
            "Alerts",
            "Earthquakes",
        ]

    @responses.activate
    def test_missing_key_is_labelled_configuration_error(
        self, bulletin_html, seismic_html, fixed_now,
    ):
        responses.add(responses.GET, BULLETIN_URL, body=bulletin_html, status=200)
        responses.add(responses.GET, SEISMIC_FEED_URL, body=seismic_html, status=200)
        config = EcoWatchConfig(openweather_api_key=None, concurrent=False)
        summary = collect_summary("Dehradun", config, now=fixed_now)

        assert summary.source_errors == [
            "Weather: OPENWEATHER_API_KEY is not configured",
            "Air Quality: OPENWEATHER_API_KEY is not configured",
        ]
        assert summary.alerts is not None
        assert summary.alerts.notices
        # Only the two scraped sources were contacted
        assert len(responses.calls) == 2

    @responses.activate
    def test_weather_failure_uses_fallback_coordinate(
        self, sample_air_quality_response, bulletin_html, seismic_html, fixed_now,
    ):
        responses.add(responses.GET, WEATHER_ENDPOINT, status=401)
        responses.add(
            responses.GET, AIR_QUALITY_ENDPOINT, json=sample_air_quality_response,
        )
        responses.add(responses.GET, BULLETIN_URL, body=bulletin_html)
        responses.add(responses.GET, SEISMIC_FEED_URL, body=seismic_html)
        config = EcoWatchConfig(
            openweather_api_key="test-key",
            fallback_latitude=12.5,
            fallback_longitude=77.25,
            concurrent=False,
        )
        summary = collect_summary("Nowhere", config, now=fixed_now)

        assert summary.source_errors == [
            "Weather: Weather API request failed with status 401"
        ]
        assert summary.air_quality is not None
        aq_call = next(
            c for c in responses.calls if c.request.url.startswith(AIR_QUALITY_ENDPOINT)
        )
        assert aq_call.request.params["lat"] == "12.5"
        assert aq_call.request.params["lon"] == "77.25"

    @responses.activate
    def test_weather_coordinate_feeds_air_quality(
        self,
        sample_weather_response,
        sample_air_quality_response,
        bulletin_html,
        seismic_html,
        fixed_now,
    ):
        sample_weather_response["coord"] = {"lat": 28.61, "lon": 77.21}
        _register_all_sources(
            sample_weather_response, sample_air_quality_response, bulletin_html, seismic_html,
        )
        config = EcoWatchConfig(openweather_api_key="test-key", concurrent=False)
        collect_summary("Delhi", config, now=fixed_now)

        aq_call = next(
            c for c in responses.calls if c.request.url.startswith(AIR_QUALITY_ENDPOINT)
        )
        assert aq_call.request.params["lat"] == "28.61"
        assert aq_call.request.params["lon"] == "77.21"

    @responses.activate
    def test_unexpected_exception_never_escapes(
        self, sample_weather_response, fixed_now,
    ):
        responses.add(responses.GET, WEATHER_ENDPOINT, json=sample_weather_response)
        responses.add(responses.GET, AIR_QUALITY_ENDPOINT, status=502)
        responses.add(responses.GET, BULLETIN_URL, status=502)
        config = EcoWatchConfig(openweather_api_key="test-key", concurrent=False)

        with patch(
            "ecowatch.aggregator.fetch_seismic_events",
            side_effect=RuntimeError("parser exploded"),
        ):
            summary = collect_summary("Dehradun", config, now=fixed_now)

        assert summary.weather is not None
        assert "Earthquakes: parser exploded" in summary.source_errors
        assert len(summary.source_errors) == 3

    @responses.activate
    def test_region_is_configurable(
        self,
        sample_weather_response,
        sample_air_quality_response,
        bulletin_html,
        seismic_html,
        fixed_now,
    ):
        _register_all_sources(
            sample_weather_response, sample_air_quality_response, bulletin_html, seismic_html,
        )
        config = EcoWatchConfig(
            openweather_api_key="test-key", region="Himachal Pradesh", concurrent=False,
        )
        summary = collect_summary("Shimla", config, now=fixed_now)

        assert summary.alerts is not None
        assert summary.alerts.notices == ["Heavy Rain"]
        assert summary.seismic_events == []

    @responses.activate
    def test_end_to_end_partial_failure(
        self, sample_weather_response, fixed_now,
    ):
        sample_weather_response["main"]["temp"] = 21.4
        sample_weather_response["main"]["humidity"] = 54.2
        sample_weather_response.pop("rain", None)
        bulletin = (
            "<table><tr><th>Sub-Division</th><th>Day 1</th><th>Day 2</th></tr>"
            "<tr><td>Uttarakhand</td><td>Heavy Snowfall</td><td>N/A</td></tr></table>"
        )
        feed = "<table>" + "".join([
            _feed_row(fixed_now - timedelta(hours=3), "3.2", "Chamoli, Uttarakhand"),
            _feed_row(fixed_now - timedelta(hours=30), "4.0", "Tehri, Uttarakhand"),
        ]) + "</table>"

        responses.add(responses.GET, WEATHER_ENDPOINT, json=sample_weather_response)
        responses.add(
            responses.GET,
            AIR_QUALITY_ENDPOINT,
            body=RequestsConnectionError("Connection reset by peer"),
        )
        responses.add(responses.GET, BULLETIN_URL, body=bulletin)
        responses.add(responses.GET, SEISMIC_FEED_URL, body=feed)

        config = EcoWatchConfig(openweather_api_key="test-key")
        summary = collect_summary("Dehradun", config, now=fixed_now)

        assert summary.weather is not None
        assert summary.weather.temperature_celsius == 21
        assert summary.weather.humidity_percent == 54
        assert summary.weather.rainfall_mm == 0
        assert summary.air_quality is None
        assert len(summary.source_errors) == 1
        assert summary.source_errors[0].startswith("Air Quality: ")
        assert summary.alerts == AlertBulletin(
            summary_line="Heavy Snowfall", notices=["Heavy Snowfall"],
        )
        assert len(summary.seismic_events) == 1
        assert summary.seismic_events[0].location == "Chamoli, Uttarakhand"
        assert summary.seismic_events[0].magnitude == 3.2

    @responses.activate
    def test_naive_now_is_made_aware(self):
        _fail_all_sources()
        config = EcoWatchConfig(openweather_api_key="test-key", concurrent=False)
        summary = collect_summary("x", config, now=datetime(2024, 3, 15, 12, 0))
        assert summary.generated_at.tzinfo is not None
        assert len(summary.source_errors) == 4

    @responses.activate
    def test_malformed_environment_still_returns_summary(
        self, monkeypatch, bulletin_html, seismic_html, fixed_now,
    ):
        monkeypatch.setenv("ECOWATCH_REQUEST_TIMEOUT", "abc")
        monkeypatch.setenv("OPENWEATHER_API_KEY", "test-key")
        responses.add(responses.GET, BULLETIN_URL, body=bulletin_html)
        responses.add(responses.GET, SEISMIC_FEED_URL, body=seismic_html)

        summary = collect_summary("Dehradun", now=fixed_now)

        assert summary.target_location_name == "Dehradun"
        assert summary.source_errors == [
            "Weather: Invalid configuration: request_timeout",
            "Air Quality: Invalid configuration: request_timeout",
        ]
        assert summary.alerts is not None
        assert summary.alerts.notices[0] == "Heavy Rain at isolated places"
        assert len(summary.seismic_events) == 3
        # Credentialed endpoints were never contacted
        assert len(responses.calls) == 2

    @responses.activate
    def test_own_session_is_closed(self, fixed_now):
        _fail_all_sources()
        config = EcoWatchConfig(openweather_api_key="test-key", concurrent=False)
        with patch.object(Session, "close", autospec=True) as close:
            collect_summary("Dehradun", config, now=fixed_now)
        close.assert_called_once()

    @responses.activate
    def test_caller_session_is_left_open(self, fixed_now):
        _fail_all_sources()
        config = EcoWatchConfig(openweather_api_key="test-key", concurrent=False)
        session = Session()
        with patch.object(Session, "close", autospec=True) as close:
            collect_summary("Dehradun", config, session=session, now=fixed_now)
        close.assert_not_called()


class TestRunSource:
    def test_success(self):
        outcome = run_source("Weather", lambda: 42)
        assert outcome.ok
        assert outcome.value == 42
        assert outcome.describe_error() == ""

    def test_source_error_captured(self):
        def boom():
            raise UpstreamError("Weather API request failed with status 500", 500)

        outcome = run_source("Weather", boom)
        assert not outcome.ok
        assert outcome.value is None
        assert outcome.describe_error() == (
            "Weather: Weather API request failed with status 500"
        )

    def test_generic_exception_without_message(self):
        def boom():
            raise KeyError

        outcome = run_source("Alerts", boom)
        assert outcome.describe_error() == "Alerts: KeyError"


class TestBuildSummary:
    def test_present_field_and_error_are_exclusive(self, fixed_now):
        ok_weather = SourceOutcome("Weather", value=None)
        failed = SourceOutcome("Air Quality", error=UpstreamError("down"))
        alerts = SourceOutcome("Alerts", value=AlertBulletin.no_warnings())
        quakes = SourceOutcome("Earthquakes", error=UpstreamError("down"))
        summary = build_summary("Dehradun", fixed_now, ok_weather, failed, alerts, quakes)

        assert summary.air_quality is None
        assert summary.alerts == AlertBulletin.no_warnings()
        assert summary.seismic_events == []
        assert summary.source_errors == ["Air Quality: down", "Earthquakes: down"]
