"""Nutrition estimation for described or photographed meals."""

import base64
from dataclasses import dataclass
from typing import Protocol

from macro_tracker.domain.estimates import NutritionEstimate

_NUMBER = {"type": "number", "minimum": 0.0}

ESTIMATE_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "calories": _NUMBER,
        "protein": _NUMBER,
        "carbs": _NUMBER,
        "fat": _NUMBER,
        "fiber": _NUMBER,
        "sugar": _NUMBER,
        "sodium": _NUMBER,
        "description": {"type": "string"},
    },
    "required": [
        "name",
        "calories",
        "protein",
        "carbs",
        "fat",
        "fiber",
        "sugar",
        "sodium",
        "description",
    ],
    "additionalProperties": False,
}

PHOTO_PROMPT = (
    "Identify the meal in the image and estimate its nutrition for the whole "
    "visible portion. Return a short meal name, calories (kcal), protein, carbs, "
    "fat, fiber and sugar in grams, sodium in milligrams, and a one-sentence "
    "description of what you see."
)

TEXT_PROMPT = (
    "Estimate the nutrition of the meal described below. Return a short meal "
    "name, calories (kcal), protein, carbs, fat, fiber and sugar in grams, "
    "sodium in milligrams, and a one-sentence rationale.\n\nMeal: {description}"
)


class EstimateClient(Protocol):
    """Interface for the external nutrition estimator."""

    async def estimate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema: dict[str, object],
        image_data_url: str | None = None,
    ) -> dict[str, object]:
        """Return a structured nutrition estimate."""


@dataclass
class EstimateService:
    """Service that prepares estimate prompts and validates results."""

    client: EstimateClient
    model: str
    reasoning_effort: str | None
    store: bool

    async def estimate_photo(self, image_bytes: bytes) -> NutritionEstimate:
        """Estimate nutrition for a meal photo."""
        raw = await self.client.estimate(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            prompt=PHOTO_PROMPT,
            schema=ESTIMATE_SCHEMA,
            image_data_url=image_data_url(image_bytes),
        )
        return NutritionEstimate.model_validate(raw)

    async def estimate_text(self, description: str) -> NutritionEstimate:
        """Estimate nutrition for a free-text meal description."""
        raw = await self.client.estimate(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            prompt=TEXT_PROMPT.format(description=description.strip()),
            schema=ESTIMATE_SCHEMA,
        )
        return NutritionEstimate.model_validate(raw)


# (offset, magic) pairs; WebP needs both the RIFF container and its form type.
_IMAGE_SIGNATURES: tuple[tuple[str, tuple[tuple[int, bytes], ...]], ...] = (
    ("image/jpeg", ((0, b"\xff\xd8\xff"),)),
    ("image/png", ((0, b"\x89PNG\r\n\x1a\n"),)),
    ("image/gif", ((0, b"GIF8"),)),
    ("image/webp", ((0, b"RIFF"), (8, b"WEBP"))),
)

DEFAULT_IMAGE_TYPE = "image/jpeg"


def image_mime_type(image_bytes: bytes) -> str:
    """Sniff the image type from magic bytes; unknown data is sent as JPEG."""
    for mime_type, markers in _IMAGE_SIGNATURES:
        if all(
            image_bytes[offset : offset + len(magic)] == magic
            for offset, magic in markers
        ):
            return mime_type
    return DEFAULT_IMAGE_TYPE


def image_data_url(image_bytes: bytes) -> str:
    """Return the photo as a base64 ``data:`` URL for multimodal input."""
    payload = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{image_mime_type(image_bytes)};base64,{payload}"
