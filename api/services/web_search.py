"""
Biography lookup using the You.com web search API.

Runs once per pilot, when their record is first created, and stores a
plain-text digest of web and news results as personInfo.
"""
import logging
from typing import Optional

import httpx

from config.settings import settings
from api.services.errors import ExternalServiceError, external_error

logger = logging.getLogger(__name__)

SERVICE_NAME = "You.com search"


def format_person_info(name: str, data: dict) -> str:
    """
    Format search results as a biography digest.

    Args:
        name: Pilot display name
        data: Raw search response (expects results.web / results.news)

    Returns:
        Numbered, human-readable text
    """
    results = data.get("results") or {}
    web_results = results.get("web") or []
    news_results = results.get("news") or []

    formatted = f"Information about {name}:\n\n"

    if not web_results and not news_results:
        return formatted + "No information found"

    if web_results:
        formatted += "Web Results:\n"
        for i, result in enumerate(web_results, 1):
            formatted += f"{i}. {result.get('title', '')}\n"
            formatted += f"   {result.get('description', '')}\n"
            snippets = result.get("snippets") or []
            if snippets:
                formatted += f"   {' '.join(snippets)}\n"
            formatted += f"   Source: {result.get('url', '')}\n\n"

    if news_results:
        formatted += "\nRecent News:\n"
        for i, result in enumerate(news_results, 1):
            formatted += f"{i}. {result.get('title', '')}\n"
            formatted += f"   {result.get('description', '')}\n"
            formatted += f"   Source: {result.get('url', '')}\n\n"

    return formatted


class BiographySearch:
    """Looks up public information about a pilot."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_results: int = 5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.you_api_key
        self.base_url = (base_url or settings.you_api_url).rstrip("/")
        self.timeout = timeout or settings.http_timeout
        self.max_results = max_results
        self._transport = transport

    async def search(self, name: str) -> str:
        """
        Search the web for a pilot and return a formatted digest.

        Raises:
            ExternalServiceError: On missing key, bad status, or malformed body
        """
        if not self.api_key:
            raise ExternalServiceError(SERVICE_NAME, "YOU API key not configured")

        query = f"{name} pilot aviation"
        logger.info(f"Searching for new person: {name}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(
                    f"{self.base_url}/search",
                    params={"query": query, "count": self.max_results},
                    headers={"X-API-Key": self.api_key},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise external_error(SERVICE_NAME, e) from e
        except ValueError as e:
            raise ExternalServiceError(SERVICE_NAME, "Malformed response body") from e

        if not isinstance(data, dict):
            raise ExternalServiceError(SERVICE_NAME, "Malformed response body")

        info = format_person_info(name, data)
        logger.info(f"Biography search completed, length: {len(info)}")
        return info


# Singleton instance
_biography_search: Optional[BiographySearch] = None


def get_biography_search() -> BiographySearch:
    """Get or create the biography search singleton."""
    global _biography_search
    if _biography_search is None:
        _biography_search = BiographySearch()
    return _biography_search


def reset_biography_search() -> None:
    global _biography_search
    _biography_search = None
