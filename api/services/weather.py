"""
Weather snapshots from Open-Meteo.

Airports are geocoded by name, then the current conditions at those
coordinates are fetched. Only the "current" block plus location fields are
kept; hourly data is dropped.
"""
import logging
from typing import Optional

import httpx

from config.settings import settings
from api.services.errors import ExternalServiceError, external_error

logger = logging.getLogger(__name__)

SERVICE_NAME = "Open-Meteo"

# Current-condition variables relevant to a go/no-go decision
CURRENT_FIELDS = [
    "temperature_2m",
    "relative_humidity_2m",
    "apparent_temperature",
    "precipitation",
    "rain",
    "weather_code",
    "cloud_cover",
    "wind_speed_10m",
    "wind_direction_10m",
    "wind_gusts_10m",
    "visibility",
]


class WeatherClient:
    """Client for Open-Meteo geocoding and forecast APIs."""

    def __init__(
        self,
        forecast_url: Optional[str] = None,
        geocoding_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.forecast_url = forecast_url or settings.open_meteo_forecast_url
        self.geocoding_url = geocoding_url or settings.open_meteo_geocoding_url
        self.timeout = timeout or settings.http_timeout
        self._transport = transport

    async def _get_json(self, url: str, params: dict) -> dict:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise external_error(SERVICE_NAME, e) from e
        except ValueError as e:
            raise ExternalServiceError(SERVICE_NAME, "Malformed response body") from e

        if not isinstance(data, dict):
            raise ExternalServiceError(SERVICE_NAME, "Malformed response body")
        return data

    async def geocode(self, place: str) -> Optional[tuple[float, float]]:
        """
        Resolve a city or airport name to coordinates.

        Returns:
            (latitude, longitude), or None if nothing matched
        """
        if not place or not place.strip():
            return None

        data = await self._get_json(
            self.geocoding_url,
            {"name": place, "count": 1, "language": "en", "format": "json"},
        )
        results = data.get("results") or []
        if not isinstance(results, list):
            raise ExternalServiceError(SERVICE_NAME, "Malformed response body")
        if not results:
            logger.warning(f"No geocoding match for {place!r}")
            return None

        first = results[0]
        if not isinstance(first, dict):
            raise ExternalServiceError(SERVICE_NAME, "Malformed response body")
        latitude, longitude = first.get("latitude"), first.get("longitude")
        if not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in (latitude, longitude)):
            raise ExternalServiceError(SERVICE_NAME, "Malformed response body")
        return latitude, longitude

    async def forecast(self, latitude: float, longitude: float) -> dict:
        """
        Fetch current conditions at a location.

        Returns:
            {"current", "latitude", "longitude", "timezone"}
        """
        data = await self._get_json(
            self.forecast_url,
            {
                "latitude": latitude,
                "longitude": longitude,
                "current": ",".join(CURRENT_FIELDS),
                "timezone": "auto",
            },
        )
        return {
            "current": data.get("current"),
            "latitude": data.get("latitude"),
            "longitude": data.get("longitude"),
            "timezone": data.get("timezone"),
        }

    async def weather_for_place(self, place: str) -> Optional[dict]:
        """Geocode a place and return its weather, or None if it can't be located."""
        coords = await self.geocode(place)
        if coords is None:
            return None
        return await self.forecast(*coords)


# Singleton instance
_weather_client: Optional[WeatherClient] = None


def get_weather_client() -> WeatherClient:
    """Get or create the weather client singleton."""
    global _weather_client
    if _weather_client is None:
        _weather_client = WeatherClient()
    return _weather_client


def reset_weather_client() -> None:
    global _weather_client
    _weather_client = None
