"""
Tests for the AviationStack flight lookup client.

HTTP is served by httpx.MockTransport; no network access.
"""
import httpx
import pytest

from api.services.errors import ExternalServiceError, FlightNotFound, InvalidInput
from api.services.flight_lookup import FlightLookupClient, designator_queries

pytestmark = pytest.mark.unit


def _client(handler, api_key="test-key"):
    return FlightLookupClient(
        api_key=api_key,
        base_url="http://aviation.test/v1",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


class TestDesignatorQueries:
    """Progressive designator formats."""

    def test_order_is_iata_icao_number(self):
        assert designator_queries("SKW3496") == [
            ("flight_iata", "SKW3496"),
            ("flight_icao", "SKW3496"),
            ("flight_number", "3496"),
        ]

    def test_normalizes_case_and_whitespace(self):
        assert designator_queries("  aa100 ")[0] == ("flight_iata", "AA100")

    def test_letters_only_skips_number_query(self):
        assert [param for param, _ in designator_queries("ABC")] == ["flight_iata", "flight_icao"]


class TestLookup:
    """FlightLookupClient.lookup behavior."""

    @pytest.mark.asyncio
    async def test_returns_first_iata_match(self, sample_flight):
        seen = []

        def handler(request):
            seen.append(dict(request.url.params))
            return httpx.Response(200, json={"data": [sample_flight]})

        flight = await _client(handler).lookup("AA100")

        assert flight == sample_flight
        assert len(seen) == 1
        assert seen[0]["flight_iata"] == "AA100"
        assert seen[0]["access_key"] == "test-key"
        assert seen[0]["limit"] == "1"

    @pytest.mark.asyncio
    async def test_falls_back_to_icao_then_number(self, sample_flight):
        seen = []

        def handler(request):
            params = dict(request.url.params)
            seen.append(params)
            if "flight_number" in params:
                return httpx.Response(200, json={"data": [sample_flight]})
            return httpx.Response(200, json={"data": []})

        flight = await _client(handler).lookup("SKW3496")

        assert flight == sample_flight
        assert [next(k for k in p if k.startswith("flight_")) for p in seen] == [
            "flight_iata", "flight_icao", "flight_number"
        ]
        assert seen[2]["flight_number"] == "3496"

    @pytest.mark.asyncio
    async def test_non_list_data_raises_external_error(self):
        handler = lambda r: httpx.Response(200, json={"data": {"flight": "AA100"}})

        with pytest.raises(ExternalServiceError) as exc_info:
            await _client(handler).lookup("AA100")

        assert "Malformed response body" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_non_object_flight_raises_external_error(self):
        handler = lambda r: httpx.Response(200, json={"data": ["AA100"]})

        with pytest.raises(ExternalServiceError):
            await _client(handler).lookup("AA100")

    @pytest.mark.asyncio
    async def test_no_results_raises_flight_not_found(self):
        def handler(request):
            return httpx.Response(200, json={"data": []})

        with pytest.raises(FlightNotFound):
            await _client(handler).lookup("ZZ999")

    @pytest.mark.asyncio
    async def test_provider_error_body(self):
        def handler(request):
            return httpx.Response(200, json={"error": {"code": "invalid_access_key", "message": "Invalid key"}})

        with pytest.raises(ExternalServiceError) as exc_info:
            await _client(handler).lookup("AA100")
        assert "Invalid key" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        def handler(request):
            return httpx.Response(503, text="unavailable")

        with pytest.raises(ExternalServiceError) as exc_info:
            await _client(handler).lookup("AA100")
        assert "503" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_missing_key_fails_without_request(self):
        def handler(request):
            raise AssertionError("no request expected")

        with pytest.raises(ExternalServiceError):
            await _client(handler, api_key="").lookup("AA100")

    @pytest.mark.asyncio
    async def test_blank_designator_rejected(self):
        with pytest.raises(InvalidInput):
            await _client(lambda r: httpx.Response(200, json={})).lookup("  ")

    @pytest.mark.asyncio
    async def test_timeout_is_external_error(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(ExternalServiceError) as exc_info:
            await _client(handler).lookup("AA100")
        assert "timed out" in exc_info.value.message
