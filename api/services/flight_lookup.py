"""
Flight-status lookup against the AviationStack API.

Designators are tried under progressively looser formats until one
returns a result:
1. IATA flight code (e.g. "AA100")
2. ICAO flight code (e.g. "AAL100")
3. Bare flight number with carrier letters removed (e.g. "100")
"""
import logging
import re
from typing import Optional

import httpx

from config.settings import settings
from api.services.errors import ExternalServiceError, FlightNotFound, InvalidInput, external_error

logger = logging.getLogger(__name__)

SERVICE_NAME = "AviationStack"


def designator_queries(designator: str) -> list[tuple[str, str]]:
    """
    Build the ordered (param, value) lookups for a flight designator.

    Args:
        designator: Flight designator as typed by the pilot

    Returns:
        List of query parameter pairs, most specific first
    """
    code = designator.strip().upper()
    queries = [("flight_iata", code), ("flight_icao", code)]

    number = re.sub(r"[A-Z]+", "", code)
    if number:
        queries.append(("flight_number", number))

    return queries


class FlightLookupClient:
    """Client for AviationStack flight status."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.aviation_api_key
        self.base_url = (base_url or settings.aviation_api_url).rstrip("/")
        self.timeout = timeout or settings.http_timeout
        self._transport = transport

    async def _query(self, client: httpx.AsyncClient, param: str, value: str) -> dict:
        params = {"access_key": self.api_key, param: value, "limit": 1}
        try:
            response = await client.get(f"{self.base_url}/flights", params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise external_error(SERVICE_NAME, e) from e
        except ValueError as e:
            raise ExternalServiceError(SERVICE_NAME, "Malformed response body") from e

        if not isinstance(data, dict):
            raise ExternalServiceError(SERVICE_NAME, "Malformed response body")

        if data.get("error"):
            error = data["error"]
            message = error.get("message", "API error") if isinstance(error, dict) else str(error)
            logger.error(f"AviationStack error: {message}")
            raise ExternalServiceError(SERVICE_NAME, message)

        return data

    async def lookup(self, designator: str) -> dict:
        """
        Find the current flight for a designator.

        Args:
            designator: Flight designator (e.g. "AA100", "SKW3496")

        Returns:
            The first matching flight object, passed through unchanged

        Raises:
            InvalidInput: If the designator is blank
            FlightNotFound: If no format yields a result
            ExternalServiceError: On missing key, bad status, or provider error
        """
        if not designator or not designator.strip():
            raise InvalidInput("Flight number required")

        if not self.api_key:
            raise ExternalServiceError(SERVICE_NAME, "Aviation API key not configured")

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            for param, value in designator_queries(designator):
                logger.info(f"Trying {param} search: {value}")
                data = await self._query(client, param, value)
                flights = data.get("data") or []
                if not isinstance(flights, list):
                    raise ExternalServiceError(SERVICE_NAME, "Malformed response body")
                if flights:
                    if not isinstance(flights[0], dict):
                        raise ExternalServiceError(SERVICE_NAME, "Malformed response body")
                    return flights[0]

        logger.info(f"No flights found for {designator} after all attempts")
        raise FlightNotFound(
            "No flight data found. The flight may not be currently active, "
            "or try a different format (e.g., AA100, DL1234)."
        )


# Singleton instance
_flight_lookup: Optional[FlightLookupClient] = None


def get_flight_lookup() -> FlightLookupClient:
    """Get or create the flight lookup singleton."""
    global _flight_lookup
    if _flight_lookup is None:
        _flight_lookup = FlightLookupClient()
    return _flight_lookup


def reset_flight_lookup() -> None:
    global _flight_lookup
    _flight_lookup = None
