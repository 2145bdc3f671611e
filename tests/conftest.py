"""
Pytest configuration and shared fixtures for Preflight tests.

Test Categories:
- unit: Fast tests with no external dependencies (< 100ms each)
- integration: Tests hitting real third-party APIs (need API keys)

Run categories:
- pytest -m unit              # Fast unit tests only
- pytest -m "not integration" # Skip tests that need network access
- pytest                      # All tests
"""
import pytest


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Fast unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (network + API keys required)")


@pytest.fixture(autouse=True)
def reset_singletons_after_test():
    """Drop cached stores and clients so patches never leak between tests."""
    yield
    from tests.reset_singletons import reset_all_singletons
    reset_all_singletons()


@pytest.fixture
def pilots_dir(tmp_path):
    """Temporary directory for pilot records."""
    path = tmp_path / "pilots"
    return path


@pytest.fixture
def store(pilots_dir):
    """A PilotRecordStore writing to a temp directory."""
    from api.services.pilot_store import PilotRecordStore
    return PilotRecordStore(storage_path=str(pilots_dir))


@pytest.fixture
def installed_store(store, monkeypatch):
    """Install the temp store as the process-wide singleton used by routes."""
    monkeypatch.setattr("api.services.pilot_store._pilot_store", store)
    return store


@pytest.fixture
def sample_flight():
    """A trimmed AviationStack flight object."""
    return {
        "flight_date": "2026-10-19",
        "flight_status": "scheduled",
        "departure": {
            "airport": "John F Kennedy International",
            "timezone": "America/New_York",
            "iata": "JFK",
            "icao": "KJFK",
            "scheduled": "2026-10-19T08:00:00+00:00",
        },
        "arrival": {
            "airport": "Los Angeles International",
            "timezone": "America/Los_Angeles",
            "iata": "LAX",
            "icao": "KLAX",
            "scheduled": "2026-10-19T11:30:00+00:00",
        },
        "airline": {"name": "American Airlines", "iata": "AA", "icao": "AAL"},
        "flight": {"number": "100", "iata": "AA100", "icao": "AAL100"},
    }
