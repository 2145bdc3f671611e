"""
Synthesizer service for Preflight.

Handles Claude API calls for:
- Readiness scoring: a 0-100 flight-readiness score over a pilot's record
- Emotion inference: emotional state and stress level from a face image

NOTE: anthropic library is imported lazily to speed up test collection.
"""
import asyncio
import json
import logging
import re
from typing import Optional, Any, TYPE_CHECKING

from config.settings import settings
from api.services.errors import ExternalServiceError

if TYPE_CHECKING:
    import anthropic

logger = logging.getLogger(__name__)

SERVICE_NAME = "Claude"

READINESS_SYSTEM_PROMPT = (
    "You are an aviation safety analyst. Analyze the pilot's questionnaire responses, "
    "flight data, and weather conditions to assess their readiness to fly. Provide a "
    "safety score from 0-100 and a brief 3-sentence explanation."
)

READINESS_PROMPT = """Analyze this pilot's data and provide a flight readiness score (0-100) and 3-sentence explanation:

{record}

Consider: sleep quality, mental state, visibility conditions, planning quality, weather conditions, and overall preparedness. Respond with ONLY a JSON object with "score" (number) and "explanation" (string) fields."""

EMOTION_SYSTEM_PROMPT = (
    "You are an expert psychologist and emotion analyst. Analyze the person's facial "
    "expression and body language to determine their emotional state, stress level, "
    "and mental readiness. Be detailed and professional."
)

EMOTION_PROMPT = (
    "Analyze this person's emotional state. Provide: 1) Primary emotion (e.g., calm, "
    "anxious, stressed, tired, alert, etc.), 2) Stress level (1-10), 3) Brief analysis "
    "(2-3 sentences) of their facial expression, body language, and overall demeanor. "
    "Respond with ONLY a JSON object with fields: emotion, stressLevel, analysis."
)

_DATA_URL = re.compile(r"^data:(?P<media>[\w/+.-]+);base64,(?P<data>.+)$", re.DOTALL)


def parse_image(image: str) -> tuple[str, str]:
    """
    Split an image into (media_type, base64 data).

    Accepts a data URL ("data:image/png;base64,...") or bare base64, which
    is assumed to be JPEG.
    """
    match = _DATA_URL.match(image.strip())
    if match:
        return match.group("media"), match.group("data")
    return "image/jpeg", image.strip()


def extract_json(text: str) -> dict:
    """
    Pull the first JSON object out of a model response.

    Tolerates ```json fences and prose around the object.

    Raises:
        ValueError: If no JSON object can be parsed
    """
    cleaned = text.strip()
    fence = re.search(r"```(?:json)?\s*(.*?)```", cleaned, re.DOTALL)
    if fence:
        cleaned = fence.group(1).strip()

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        start = cleaned.find("{")
        end = cleaned.rfind("}")
        if start == -1 or end <= start:
            raise ValueError("No JSON object in response")
        data = json.loads(cleaned[start:end + 1])

    if not isinstance(data, dict):
        raise ValueError("Response JSON is not an object")
    return data


def clamp_score(value: Any) -> int:
    """Coerce a model-supplied score to an int in 0-100."""
    score = int(round(float(value)))
    return max(0, min(100, score))


class Synthesizer:
    """Service for scoring readiness and inferring emotion using Claude."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        """
        Initialize synthesizer.

        Args:
            api_key: Anthropic API key (defaults to settings)
            model: Claude model name (defaults to settings)
        """
        # Use provided key, but only fall back to settings if not explicitly passed
        self.api_key = api_key if api_key is not None else settings.anthropic_api_key
        self.model = model or settings.claude_model
        self._client: Any = None

    def _validate_api_key(self):
        """Validate that API key is configured."""
        if not self.api_key or not self.api_key.strip():
            raise ExternalServiceError(
                SERVICE_NAME,
                "Anthropic API key not configured. Please set ANTHROPIC_API_KEY in your .env file."
            )

    @property
    def client(self) -> "anthropic.Anthropic":
        """Lazy-load the Anthropic client."""
        if self._client is None:
            import anthropic
            self._client = anthropic.Anthropic(api_key=self.api_key, timeout=settings.http_timeout)
        return self._client

    def complete(self, system: str, content: str | list, max_tokens: int = 1024) -> str:
        """
        Send a single-turn request and return the response text.

        Raises:
            ExternalServiceError: If the key is missing or the API call fails
        """
        self._validate_api_key()
        logger.debug(f"Using model: {self.model}")

        import anthropic

        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                system=system,
                messages=[
                    {"role": "user", "content": content}
                ]
            )
        except anthropic.APIError as e:
            logger.error(f"Claude API error: {e}")
            raise ExternalServiceError(SERVICE_NAME, str(e)) from e

        return "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )

    def _complete_json(self, system: str, content: str | list, max_tokens: int) -> dict:
        text = self.complete(system, content, max_tokens=max_tokens)
        try:
            return extract_json(text)
        except ValueError as e:
            logger.error(f"Unparseable model response: {text[:200]!r}")
            raise ExternalServiceError(SERVICE_NAME, "Model returned malformed JSON") from e

    async def score_readiness(self, record: dict) -> dict:
        """
        Score a pilot's flight readiness.

        Args:
            record: Full pilot record snapshot

        Returns:
            {"score": int 0-100, "explanation": str}
        """
        logger.info("Analyzing pilot data with Claude...")
        prompt = READINESS_PROMPT.format(record=json.dumps(record, indent=2, default=str))
        data = await asyncio.to_thread(self._complete_json, READINESS_SYSTEM_PROMPT, prompt, 1024)

        try:
            score = clamp_score(data.get("score"))
        except (TypeError, ValueError) as e:
            raise ExternalServiceError(SERVICE_NAME, "Model returned no numeric score") from e

        return {"score": score, "explanation": str(data.get("explanation", "")).strip()}

    async def infer_emotion(self, image: str) -> dict:
        """
        Infer emotional state from a face image.

        Args:
            image: Data URL or bare base64 JPEG

        Returns:
            {"emotion": str, "stressLevel": number, "analysis": str}
        """
        media_type, data = parse_image(image)
        content = [
            {
                "type": "image",
                "source": {"type": "base64", "media_type": media_type, "data": data},
            },
            {"type": "text", "text": EMOTION_PROMPT},
        ]
        result = await asyncio.to_thread(self._complete_json, EMOTION_SYSTEM_PROMPT, content, 500)

        logger.info(f"Emotion analysis result: {result}")
        return {
            "emotion": result.get("emotion"),
            "stressLevel": result.get("stressLevel"),
            "analysis": result.get("analysis"),
        }


# Singleton instance
_synthesizer: Synthesizer | None = None


def get_synthesizer() -> Synthesizer:
    """Get or create synthesizer singleton."""
    global _synthesizer
    if _synthesizer is None:
        _synthesizer = Synthesizer()
    return _synthesizer


def reset_synthesizer() -> None:
    global _synthesizer
    _synthesizer = None
