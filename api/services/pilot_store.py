"""
Pilot record store for Preflight.

One JSON document per pilot at <pilots_path>/<identity key>.json. Four
independent writers target the same document and the same "current
flight" slot (always flights[-1], the most recently appended entry):

- upsert_from_search: append a flight entry (creates the record if new)
- submit_questionnaire: set-once answers on the current flight
- capture_emotion: overwrite the latest emotion at the root and on the
  current flight (creates the record if new)
- get_or_compute_analysis: set-once readiness analysis on the current
  flight, returned from cache when already present

Each call is a full read-modify-write cycle. There is no lock held across
the read and the write, so two requests racing on the same pilot can lose
an update (the later write wins). Writes themselves are atomic (temp file
then move) so a document is never left half-written.
"""
import copy
import inspect
import json
import logging
import os
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Awaitable, Callable, Optional, Union

from config.settings import settings
from api.services.errors import InvalidInput, NoFlightFound, RecordNotFound, StorageError
from api.services.identity import resolve_identity_key

logger = logging.getLogger(__name__)

ComputeFn = Callable[[dict], Union[dict, Awaitable[dict]]]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class PilotRecordStore:
    """
    File-backed, per-identity document store.

    Records are plain dicts mirroring the on-disk JSON (camelCase keys).
    Flight payloads are opaque and passed through unchanged.
    """

    def __init__(self, storage_path: Optional[str] = None):
        """
        Initialize the store.

        Args:
            storage_path: Directory for pilot documents (default: settings.pilots_path)
        """
        self.storage_path = Path(storage_path) if storage_path else Path(settings.pilots_path)

    # ------------------------------------------------------------------
    # Paths and raw IO
    # ------------------------------------------------------------------

    def path_for(self, name: str) -> Path:
        """Return the document path for a display name."""
        key = resolve_identity_key(name or "")
        if not key:
            raise InvalidInput("Name must contain at least one letter or digit")
        return self.storage_path / f"{key}.json"

    def _read(self, path: Path) -> Optional[dict]:
        """Load a document, or None if it does not exist."""
        if not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"Corrupt pilot document {path}: {e}")
            raise StorageError(f"Pilot record at {path.name} is not valid JSON") from e
        except OSError as e:
            logger.error(f"Failed to read pilot document {path}: {e}")
            raise StorageError(f"Could not read pilot record {path.name}") from e

        if not isinstance(data, dict):
            raise StorageError(f"Pilot record at {path.name} is not a JSON object")
        flights = data.get("flights", [])
        if not isinstance(flights, list) or not all(isinstance(f, dict) for f in flights):
            raise StorageError(f"Pilot record at {path.name} has a malformed flights list")
        data.setdefault("flights", [])
        return data

    def _write(self, path: Path, record: dict) -> None:
        """Persist a document atomically (temp file in the same directory, then move)."""
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            temp_fd, temp_path = tempfile.mkstemp(suffix=".json", dir=path.parent)
        except OSError as e:
            logger.error(f"Failed to prepare pilot document {path}: {e}")
            raise StorageError(f"Could not write pilot record {path.name}") from e

        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                json.dump(record, f, indent=2, default=str)
            shutil.move(temp_path, path)
        except (OSError, TypeError, ValueError) as e:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            logger.error(f"Failed to write pilot document {path}: {e}")
            raise StorageError(f"Could not write pilot record {path.name}") from e

    @staticmethod
    def _new_record(name: str, person_info: str = "") -> dict:
        now = _now()
        return {
            "name": name,
            "personInfo": person_info,
            "flights": [],
            "createdAt": now,
            "lastUpdated": now,
        }

    # ------------------------------------------------------------------
    # Readers
    # ------------------------------------------------------------------

    def exists(self, name: str) -> bool:
        """Check whether a record exists for this identity."""
        return self.path_for(name).exists()

    def get(self, name: str) -> dict:
        """
        Load the full record for a pilot.

        Raises:
            RecordNotFound: If no record exists
        """
        record = self._read(self.path_for(name))
        if record is None:
            raise RecordNotFound(f"No data found for {name}")
        return record

    # ------------------------------------------------------------------
    # Writers
    # ------------------------------------------------------------------

    def upsert_from_search(self, name: str, flight_payload: dict, person_info: str = "") -> Path:
        """
        Append a flight-search result as a new flight entry.

        A new record takes person_info as its biography; an existing record
        keeps its biography, creation time and all earlier entries.

        Returns:
            Path of the pilot document
        """
        if flight_payload is None:
            raise InvalidInput("Flight data required")

        path = self.path_for(name)
        record = self._read(path)

        if record is None:
            logger.info(f"Creating pilot record for {name}")
            record = self._new_record(name, person_info)
        else:
            logger.info(f"Found existing record for {name}")

        entry = copy.deepcopy(flight_payload)
        entry["searchedAt"] = _now()
        record["flights"].append(entry)
        record["lastUpdated"] = _now()

        self._write(path, record)
        logger.info(f"Saved flight #{len(record['flights'])} for {name} to {path}")
        return path

    def ensure_record(self, name: str, person_info: str = "") -> Path:
        """Create an empty record (no flights) if none exists yet."""
        path = self.path_for(name)
        if self._read(path) is None:
            self._write(path, self._new_record(name, person_info))
            logger.info(f"Created pilot record for {name} at {path}")
        return path

    def submit_questionnaire(self, name: str, answers: dict) -> bool:
        """
        Attach questionnaire answers to the current flight.

        First write wins: if the current flight already has answers this is
        a silent no-op.

        Returns:
            True if the answers were saved, False if ignored

        Raises:
            NoFlightFound: If the record is absent or has no flights
        """
        if answers is None:
            raise InvalidInput("Answers required")

        path = self.path_for(name)
        record = self._read(path)

        if not record or not record["flights"]:
            logger.info(f"No flights found for {name} - questionnaire cannot be saved")
            raise NoFlightFound("No flight data found. Please search for a flight first.")

        current = record["flights"][-1]
        if current.get("questionnaire"):
            logger.warning(f"Questionnaire already exists for {name}'s current flight, ignoring")
            return False

        current["questionnaire"] = {**answers, "completedAt": _now()}
        record["lastUpdated"] = _now()

        self._write(path, record)
        logger.info(f"Added questionnaire to flight index {len(record['flights']) - 1} for {name}")
        return True

    def capture_emotion(self, name: str, emotion_result: dict) -> dict:
        """
        Record an emotion reading.

        Always overwrites latestEmotionAnalysis; when the pilot has flights,
        also overwrites the current flight's emotionAnalysis with a copy.
        Creates the record if it does not exist.

        Returns:
            The stored emotion value (with capturedAt)
        """
        if emotion_result is None:
            raise InvalidInput("Emotion result required")

        path = self.path_for(name)
        record = self._read(path)
        if record is None:
            logger.info(f"Creating pilot record for {name} from emotion capture")
            record = self._new_record(name)

        value = {**emotion_result, "capturedAt": _now()}
        record["latestEmotionAnalysis"] = value

        if record["flights"]:
            record["flights"][-1]["emotionAnalysis"] = copy.deepcopy(value)
            logger.info(f"Added emotion to flight index {len(record['flights']) - 1} for {name}")

        record["lastUpdated"] = _now()
        self._write(path, record)
        return copy.deepcopy(value)

    async def get_or_compute_analysis(self, name: str, compute_fn: ComputeFn) -> tuple[dict, bool]:
        """
        Return the readiness analysis for the current flight, computing it once.

        If the current flight already has an analysis it is returned with
        cached=True and compute_fn is not called. Otherwise compute_fn
        receives a snapshot of the full record and must return
        {"score", "explanation"}; the result is stored on the current
        flight. With no flights the result is returned but not persisted.

        Args:
            name: Pilot display name
            compute_fn: Scorer, sync or async

        Returns:
            (analysis, cached)

        Raises:
            RecordNotFound: If no record exists
        """
        path = self.path_for(name)
        record = self._read(path)
        if record is None:
            raise RecordNotFound(f"No data found for {name}")

        flights = record["flights"]
        if flights and flights[-1].get("analysis"):
            logger.info(f"Returning cached analysis for {name}")
            return copy.deepcopy(flights[-1]["analysis"]), True

        result = compute_fn(copy.deepcopy(record))
        if inspect.isawaitable(result):
            result = await result

        analysis = {
            "score": result.get("score"),
            "explanation": result.get("explanation"),
            "analyzedAt": _now(),
        }

        if flights:
            flights[-1]["analysis"] = analysis
            record["lastUpdated"] = _now()
            self._write(path, record)
            logger.info(f"Analysis saved to {path}")
        else:
            logger.warning(f"{name} has no flights; analysis not persisted")

        return copy.deepcopy(analysis), False


# Singleton instance
_pilot_store: Optional[PilotRecordStore] = None


def get_pilot_store() -> PilotRecordStore:
    """Get or create the singleton PilotRecordStore."""
    global _pilot_store
    if _pilot_store is None:
        _pilot_store = PilotRecordStore()
    return _pilot_store


def reset_pilot_store() -> None:
    """Reset the singleton (used by tests)."""
    global _pilot_store
    _pilot_store = None
