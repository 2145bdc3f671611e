"""
Weather API routes for Preflight.
"""
from typing import Optional

from fastapi import APIRouter

from api.services.errors import InvalidInput
from api.services.weather import get_weather_client

router = APIRouter(prefix="/api/weather", tags=["weather"])


@router.get("")
async def get_weather(lat: Optional[float] = None, lon: Optional[float] = None):
    """Get current conditions at a latitude/longitude."""
    if lat is None or lon is None:
        raise InvalidInput("Latitude and longitude required")

    return await get_weather_client().forecast(lat, lon)
