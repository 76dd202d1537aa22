"""Calorie estimation service using LLMs."""

import base64
import json
import logging
from dataclasses import dataclass
from typing import Protocol

import pydantic

from getfit.domain.errors import InvalidInputError, ParseError, RemoteServiceError
from getfit.domain.estimation import ExerciseEstimate, FoodEstimate

EXERCISE_KCAL_PER_MINUTE = 5

FOOD_PROMPT = """Analyze this food item.
Identify the food item and estimate the total calories.
If the food is packaged or looks like a specific brand/restaurant item, use the \
search tool to find accurate nutritional information.

Return the response as a RAW JSON object (no markdown formatting, no code blocks) \
with the following keys:
- "foodName": A short descriptive name of the food.
- "calories": A number representing the estimated total calories (Kcal).
- "macros": An object with "protein", "carbs" and "fat" in grams.
- "confidence": "high", "medium", or "low".
- "servingSize": A string describing the estimated portion (e.g., "1 bowl", \
"2 slices").
"""

EXERCISE_PROMPT = """Estimate the calories burned by an average adult doing \
"{activity}" for {minutes:g} minutes.
Return the response as a RAW JSON object (no markdown formatting, no code blocks) \
with a single key "calories" holding a number of Kcal.
"""

_logger = logging.getLogger(__name__)


class EstimationClient(Protocol):
    """Interface for the generative model behind estimates."""

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        image_data_url: str | None,
        web_search: bool,
    ) -> str:
        """Return the model's raw text answer."""


@dataclass
class EstimationService:
    """Builds estimation prompts and turns answers into typed estimates.

    ``client`` is None when no API key is configured.
    """

    client: EstimationClient | None
    model: str
    reasoning_effort: str | None
    store: bool

    async def estimate_food(
        self, image_bytes: bytes | None = None, description: str | None = None
    ) -> FoodEstimate:
        """Estimate a food's calories from a photo and/or a description.

        An answer that cannot be parsed yields a low-confidence placeholder.
        Request failures raise ``RemoteServiceError`` so the caller can retry.
        """
        description = (description or "").strip() or None
        if not image_bytes and not description:
            raise InvalidInputError("Please provide an image or a description.")
        if self.client is None:
            raise RemoteServiceError("Estimation API key is missing.")

        prompt = FOOD_PROMPT
        if description:
            prompt += (
                f'\nThe user provided this description: "{description}". '
                "Use this to refine your search and estimation."
            )
        try:
            text = await self.client.generate(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                prompt=prompt,
                image_data_url=_to_data_url(image_bytes) if image_bytes else None,
                web_search=True,
            )
        except Exception as exc:
            _logger.exception("Food estimation request failed")
            raise RemoteServiceError(
                "Failed to analyze food. Please try again."
            ) from exc

        try:
            return FoodEstimate.model_validate(parse_json_payload(text))
        except (ParseError, pydantic.ValidationError):
            _logger.warning("Failed to parse food estimate: %r", text)
            return FoodEstimate(
                food_name=description or "Unknown Food",
                calories=0,
                confidence="low",
                serving_size="Unknown",
            )

    async def estimate_exercise(
        self, activity: str, duration_minutes: float
    ) -> ExerciseEstimate:
        """Estimate calories burned, falling back to a per-minute heuristic."""
        activity = activity.strip()
        if not activity or duration_minutes <= 0:
            raise InvalidInputError("Please provide an activity and a duration.")
        fallback = ExerciseEstimate(
            calories=heuristic_exercise_calories(duration_minutes)
        )
        if self.client is None:
            return fallback

        try:
            text = await self.client.generate(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                prompt=EXERCISE_PROMPT.format(
                    activity=activity, minutes=duration_minutes
                ),
                image_data_url=None,
                web_search=False,
            )
        except Exception:
            _logger.warning(
                "Exercise estimation failed, using heuristic", exc_info=True
            )
            return fallback

        try:
            return ExerciseEstimate.model_validate(parse_json_payload(text))
        except (ParseError, pydantic.ValidationError):
            _logger.warning("Failed to parse exercise estimate: %r", text)
            return fallback


def heuristic_exercise_calories(duration_minutes: float) -> float:
    return duration_minutes * EXERCISE_KCAL_PER_MINUTE


def parse_json_payload(text: str) -> dict[str, object]:
    """Parse a JSON object answer, stripping markdown code fences."""
    cleaned = text.replace("```json", "").replace("```", "").strip()
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ParseError("Response is not valid JSON") from exc
    if not isinstance(data, dict):
        raise ParseError("Response is not a JSON object")
    return data


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
