"""
Error taxonomy for Preflight.

Every failure an operation can report is one of these. Each carries the
HTTP status it maps to; api.main registers a single handler that turns any
PreflightError into {"error": message}.

External calls are single-shot: there is no retry and no fallback value.
"""
import logging

import httpx

logger = logging.getLogger(__name__)


class PreflightError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidInput(PreflightError):
    """A required field (identity, payload) is missing or blank."""

    status_code = 400


class RecordNotFound(PreflightError):
    """No pilot record exists for the identity."""

    status_code = 404


class NoFlightFound(PreflightError):
    """The pilot record has no flight entry to attach data to."""

    status_code = 400


class FlightNotFound(PreflightError):
    """The flight-status provider returned no match for any designator format."""

    status_code = 404


class ExternalServiceError(PreflightError):
    """A collaborator call failed (bad status, bad payload, timeout, missing credential)."""

    status_code = 502

    def __init__(self, service: str, message: str):
        self.service = service
        super().__init__(f"{service}: {message}")


class StorageError(PreflightError):
    """A pilot document could not be read or written."""

    status_code = 500


def describe_http_error(error: Exception) -> str:
    """
    Convert an httpx failure into a short, user-facing message.

    Args:
        error: The exception raised by an httpx call

    Returns:
        Human-readable description
    """
    if isinstance(error, httpx.TimeoutException):
        return "The request timed out"

    if isinstance(error, httpx.ConnectError):
        return "Unable to connect"

    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        if status in (401, 403):
            return f"Authentication failed ({status})"
        if status == 429:
            return "Too many requests (429)"
        return f"API error: {status}"

    return f"{type(error).__name__}: {error}"


def external_error(service: str, error: Exception) -> ExternalServiceError:
    """Log and wrap an httpx/SDK failure as an ExternalServiceError."""
    message = describe_http_error(error)
    logger.error(f"{service} call failed: {message}")
    return ExternalServiceError(service, message)
