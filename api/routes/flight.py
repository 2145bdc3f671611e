"""
Flight lookup API routes for Preflight.
"""
import logging

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from api.services.errors import InvalidInput
from api.services.flight_lookup import get_flight_lookup
from api.services.flight_search import search_and_record

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/flight", tags=["flight"])


class FlightSearchRequest(BaseModel):
    """Request to look up a flight and record it for a pilot."""
    name: str = Field(..., description="Pilot display name")
    flight: str = Field(..., description="Flight designator, e.g. AA100")


@router.get("")
async def get_flight(flight: str = Query(default="", description="Flight designator")):
    """
    Look up live status for a flight.

    Tries IATA, then ICAO, then the bare flight number.
    """
    if not flight.strip():
        raise InvalidInput("Flight number required")

    result = await get_flight_lookup().lookup(flight)
    return {"data": [result]}


@router.post("/search")
async def search_flight(request: FlightSearchRequest):
    """
    **Search a flight and save it to the pilot's record.**

    Fetches the flight, weather at both airports, and (for new pilots) a
    biography, then appends the flight as the pilot's most recent entry.
    """
    result = await search_and_record(request.name, request.flight)
    return {
        "success": True,
        "flight": result.flight,
        "filePath": str(result.file_path),
    }
