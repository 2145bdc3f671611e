"""
Pilot record API routes for Preflight.

Provides endpoints that write to (and read) the per-pilot JSON record:
person/flight upsert, questionnaire, emotion capture, readiness analysis.
Records are stored under settings.pilots_path, one file per pilot.
"""
import logging
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

from api.services.errors import InvalidInput
from api.services.identity import is_blank_name, resolve_identity_key
from api.services.pilot_store import get_pilot_store
from api.services.synthesizer import get_synthesizer
from api.services.web_search import get_biography_search

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["pilots"])


class PersonRequest(BaseModel):
    """Request to save a pilot, optionally with a flight search result."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., description="Pilot display name")
    flight_data: Optional[dict] = Field(
        default=None,
        alias="flightData",
        description="Flight payload (with departureWeather/arrivalWeather) to append"
    )


class QuestionnaireRequest(BaseModel):
    """Request to attach questionnaire answers to the current flight."""
    name: str
    flight: Optional[str] = Field(default=None, description="Flight designator (informational)")
    answers: dict = Field(..., description="Question id -> answer")


class EmotionRequest(BaseModel):
    """Request to analyze a face image."""
    name: str
    image: str = Field(..., description="Image as a data URL or base64 JPEG")


class AnalyzeRequest(BaseModel):
    """Request a readiness score for the current flight."""
    name: str


def _require_name(name: str) -> str:
    if is_blank_name(name):
        raise InvalidInput("Name required")
    if not resolve_identity_key(name):
        raise InvalidInput("Name must contain at least one letter or digit")
    return name.strip()


@router.post("/person")
async def save_person(request: PersonRequest):
    """
    **Save a pilot and their latest flight search.**

    New pilots get a one-time biography lookup. When flightData is given it
    is appended as the pilot's newest flight; earlier flights are kept.
    """
    name = _require_name(request.name)
    store = get_pilot_store()

    person_info = ""
    if not store.exists(name):
        person_info = await get_biography_search().search(name)

    if request.flight_data is not None:
        path = store.upsert_from_search(name, request.flight_data, person_info=person_info)
    else:
        path = store.ensure_record(name, person_info=person_info)

    return {
        "success": True,
        "message": "Data saved successfully",
        "filePath": str(path),
    }


@router.post("/questionnaire")
async def submit_questionnaire(request: QuestionnaireRequest):
    """
    Attach questionnaire answers to the pilot's most recent flight.

    A second submission for the same flight succeeds without changing the
    stored answers (saved=false).
    """
    name = _require_name(request.name)
    store = get_pilot_store()

    saved = store.submit_questionnaire(name, request.answers)

    return {
        "success": True,
        "message": "Questionnaire saved successfully" if saved else "Questionnaire already completed for this flight",
        "saved": saved,
        "filePath": str(store.path_for(name)),
    }


@router.post("/emotion")
async def capture_emotion(request: EmotionRequest):
    """
    Analyze a face image and record the pilot's emotional state.

    Creates the pilot record if it does not exist yet.
    """
    name = _require_name(request.name)
    if not request.image or not request.image.strip():
        raise InvalidInput("Name and image required")

    logger.info(f"Analyzing emotion for: {name}")
    emotion = await get_synthesizer().infer_emotion(request.image)
    get_pilot_store().capture_emotion(name, emotion)

    return {"success": True, "emotion": emotion}


@router.post("/analyze")
async def analyze(request: AnalyzeRequest):
    """
    **Get the flight-readiness score** for the pilot's most recent flight.

    Computed once per flight; later calls return the stored result with
    cached=true.
    """
    name = _require_name(request.name)

    analysis, cached = await get_pilot_store().get_or_compute_analysis(
        name, get_synthesizer().score_readiness
    )

    return {"success": True, "analysis": analysis, "cached": cached}


@router.get("/pilots/{name}")
async def get_pilot(name: str):
    """Get the full stored record for a pilot."""
    return get_pilot_store().get(_require_name(name))
