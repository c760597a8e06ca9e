"""Canned nutrition estimates for local use without an LLM."""

from dataclasses import dataclass, field

from macro_tracker.services.estimates import EstimateClient


def _photo_payload() -> dict[str, object]:
    return {
        "name": "Grilled Chicken Salad",
        "calories": 350,
        "protein": 35,
        "carbs": 12,
        "fat": 18,
        "fiber": 8,
        "sugar": 6,
        "sodium": 420,
        "description": "Grilled chicken breast over mixed greens with vinaigrette.",
    }


def _text_payload() -> dict[str, object]:
    return {
        "name": "Turkey Sandwich",
        "calories": 280,
        "protein": 22,
        "carbs": 25,
        "fat": 12,
        "fiber": 5,
        "sugar": 8,
        "sodium": 350,
        "description": "Estimated from the meal description.",
    }


@dataclass
class MockEstimateClient(EstimateClient):
    """Estimate client returning fixed payloads for photos and text."""

    photo_payload: dict[str, object] = field(default_factory=_photo_payload)
    text_payload: dict[str, object] = field(default_factory=_text_payload)
    requests: list[str] = field(default_factory=list)

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
        """Return the canned payload for the request kind."""
        self.requests.append(prompt)
        if image_data_url:
            return dict(self.photo_payload)
        return dict(self.text_payload)
