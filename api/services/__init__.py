"""
Preflight Services Package.

This package contains the pilot record store and the clients for the
third-party services it is fed from.

Example:
    from api.services import get_pilot_store, get_synthesizer

Key service modules:
- pilot_store: per-pilot JSON record store
- identity: display name -> storage key
- flight_lookup: AviationStack flight status
- weather: Open-Meteo geocoding and current conditions
- web_search: You.com biography lookup
- synthesizer: Claude readiness scoring and emotion inference
- flight_search: lookup + weather + record pipeline
- errors: error taxonomy shared by all of the above
"""

from api.services.errors import (
    PreflightError,
    InvalidInput,
    RecordNotFound,
    NoFlightFound,
    FlightNotFound,
    ExternalServiceError,
    StorageError,
)

from api.services.identity import resolve_identity_key

from api.services.pilot_store import (
    PilotRecordStore,
    get_pilot_store,
)

from api.services.synthesizer import get_synthesizer


__all__ = [
    # Errors
    "PreflightError",
    "InvalidInput",
    "RecordNotFound",
    "NoFlightFound",
    "FlightNotFound",
    "ExternalServiceError",
    "StorageError",
    # Records
    "resolve_identity_key",
    "PilotRecordStore",
    "get_pilot_store",
    # LLM
    "get_synthesizer",
]
