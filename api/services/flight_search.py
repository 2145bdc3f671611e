"""
Flight search pipeline.

Looks up a flight, attaches departure and arrival weather, fetches a
biography for first-time pilots, and appends the result to the pilot's
record.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from api.services.errors import InvalidInput
from api.services.flight_lookup import FlightLookupClient, get_flight_lookup
from api.services.identity import is_blank_name
from api.services.pilot_store import PilotRecordStore, get_pilot_store
from api.services.weather import WeatherClient, get_weather_client
from api.services.web_search import BiographySearch, get_biography_search

logger = logging.getLogger(__name__)


@dataclass
class FlightSearchResult:
    """A recorded flight search."""
    flight: dict  # flight payload with departureWeather / arrivalWeather
    file_path: Path


def _airport(flight: dict, side: str) -> str:
    endpoint = flight.get(side) or {}
    return endpoint.get("airport") or ""


async def search_and_record(
    name: str,
    designator: str,
    store: Optional[PilotRecordStore] = None,
    flights: Optional[FlightLookupClient] = None,
    weather: Optional[WeatherClient] = None,
    biography: Optional[BiographySearch] = None,
) -> FlightSearchResult:
    """
    Run one flight search for a pilot and persist it.

    Steps run sequentially; any collaborator failure aborts the search
    before anything is written.
    """
    if is_blank_name(name):
        raise InvalidInput("Name required")

    store = store or get_pilot_store()
    flights = flights or get_flight_lookup()
    weather = weather or get_weather_client()
    biography = biography or get_biography_search()

    flight = await flights.lookup(designator)

    departure_weather = await weather.weather_for_place(_airport(flight, "departure"))
    arrival_weather = await weather.weather_for_place(_airport(flight, "arrival"))

    person_info = ""
    if not store.exists(name):
        person_info = await biography.search(name)

    payload = {
        **flight,
        "departureWeather": departure_weather,
        "arrivalWeather": arrival_weather,
    }
    path = store.upsert_from_search(name, payload, person_info=person_info)
    logger.info(f"Recorded flight search {designator} for {name}")

    return FlightSearchResult(flight=payload, file_path=path)
