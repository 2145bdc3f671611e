"""
Tests for the Open-Meteo weather client.
"""
import httpx
import pytest

from api.services.errors import ExternalServiceError
from api.services.weather import CURRENT_FIELDS, WeatherClient

pytestmark = pytest.mark.unit

FORECAST_URL = "http://weather.test/v1/forecast"
GEOCODING_URL = "http://geo.test/v1/search"

FORECAST_BODY = {
    "latitude": 40.64,
    "longitude": -73.78,
    "timezone": "America/New_York",
    "current": {"temperature_2m": 14.2, "visibility": 24140, "wind_gusts_10m": 31.0},
    "hourly": {"temperature_2m": [1, 2, 3]},
}


def _client(handler):
    return WeatherClient(
        forecast_url=FORECAST_URL,
        geocoding_url=GEOCODING_URL,
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


class TestForecast:

    @pytest.mark.asyncio
    async def test_keeps_only_current_and_location(self):
        seen = {}

        def handler(request):
            seen.update(dict(request.url.params))
            return httpx.Response(200, json=FORECAST_BODY)

        result = await _client(handler).forecast(40.64, -73.78)

        assert result == {
            "current": FORECAST_BODY["current"],
            "latitude": 40.64,
            "longitude": -73.78,
            "timezone": "America/New_York",
        }
        assert seen["current"] == ",".join(CURRENT_FIELDS)
        assert seen["timezone"] == "auto"

    @pytest.mark.asyncio
    async def test_error_status_raises(self):
        with pytest.raises(ExternalServiceError):
            await _client(lambda r: httpx.Response(500)).forecast(0, 0)


class TestGeocode:

    @pytest.mark.asyncio
    async def test_returns_first_match(self):
        def handler(request):
            assert request.url.params["name"] == "Los Angeles International"
            assert request.url.params["count"] == "1"
            return httpx.Response(200, json={"results": [{"latitude": 33.94, "longitude": -118.41}]})

        assert await _client(handler).geocode("Los Angeles International") == (33.94, -118.41)

    @pytest.mark.asyncio
    async def test_no_results_is_none(self):
        assert await _client(lambda r: httpx.Response(200, json={})).geocode("Nowhere") is None

    @pytest.mark.asyncio
    async def test_result_without_coordinates_raises(self):
        handler = lambda r: httpx.Response(200, json={"results": [{"name": "JFK"}]})

        with pytest.raises(ExternalServiceError) as exc_info:
            await _client(handler).geocode("JFK")

        assert "Malformed response body" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_non_list_results_raises(self):
        handler = lambda r: httpx.Response(200, json={"results": {"latitude": 1, "longitude": 2}})

        with pytest.raises(ExternalServiceError):
            await _client(handler).geocode("JFK")

    @pytest.mark.asyncio
    async def test_blank_place_skips_request(self):
        def handler(request):
            raise AssertionError("no request expected")

        assert await _client(handler).geocode("") is None


class TestWeatherForPlace:

    @pytest.mark.asyncio
    async def test_geocodes_then_forecasts(self):
        def handler(request):
            if request.url.host == "geo.test":
                return httpx.Response(200, json={"results": [{"latitude": 40.64, "longitude": -73.78}]})
            assert request.url.params["latitude"] == "40.64"
            return httpx.Response(200, json=FORECAST_BODY)

        result = await _client(handler).weather_for_place("John F Kennedy International")
        assert result["current"]["visibility"] == 24140

    @pytest.mark.asyncio
    async def test_unknown_place_is_none(self):
        def handler(request):
            if request.url.host == "geo.test":
                return httpx.Response(200, json={"results": []})
            raise AssertionError("forecast should not be requested")

        assert await _client(handler).weather_for_place("Atlantis") is None
