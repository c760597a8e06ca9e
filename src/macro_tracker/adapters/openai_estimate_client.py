"""OpenAI Responses API client for nutrition estimates."""

import json
import logging
from dataclasses import dataclass

from openai import AsyncOpenAI

from macro_tracker.services.estimates import EstimateClient

_SCHEMA_NAME = "nutrition_estimate"

_logger = logging.getLogger(__name__)


def _user_message(prompt: str, image_data_url: str | None) -> dict[str, object]:
    parts: list[dict[str, object]] = [{"type": "input_text", "text": prompt}]
    if image_data_url:
        parts.append({"type": "input_image", "image_url": image_data_url})
    return {"role": "user", "content": parts}


def _structured_output(schema: dict[str, object]) -> dict[str, object]:
    return {
        "format": {
            "type": "json_schema",
            "name": _SCHEMA_NAME,
            "strict": True,
            "schema": schema,
        }
    }


@dataclass
class OpenAIEstimateClient(EstimateClient):
    """Estimate client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIEstimateClient":
        """Create an OpenAI estimate client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

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
        """Request a schema-constrained estimate and decode the JSON reply.

        Raises:
            RuntimeError: If the reply is empty or is not a JSON object.
        """
        options: dict[str, object] = {}
        if reasoning_effort:
            options["reasoning"] = {"effort": reasoning_effort}
        response = await self.client.responses.create(
            model=model,
            input=[_user_message(prompt, image_data_url)],
            text=_structured_output(schema),
            store=store,
            **options,
        )
        if not response.output_text:
            raise RuntimeError("OpenAI returned an empty response")
        try:
            decoded = json.loads(response.output_text)
        except json.JSONDecodeError as exc:
            _logger.warning("Unparseable estimate reply from %s", model)
            raise RuntimeError("OpenAI returned invalid JSON") from exc
        if not isinstance(decoded, dict):
            raise RuntimeError("OpenAI returned a non-object estimate")
        return decoded

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.close()
