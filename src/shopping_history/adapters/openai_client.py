"""OpenAI Responses API client for extraction and analysis."""

import base64
import json
from dataclasses import dataclass

from openai import AsyncOpenAI

from shopping_history.services.inference import InferenceClient


@dataclass
class OpenAIInferenceClient(InferenceClient):
    """Inference client backed by OpenAI Responses API."""

    client: AsyncOpenAI
    model: str
    reasoning_effort: str | None = None
    store: bool = False

    @classmethod
    def create(
        cls,
        api_key: str,
        model: str,
        reasoning_effort: str | None = None,
        store: bool = False,
    ) -> "OpenAIInferenceClient":
        """Create an OpenAI inference client."""
        return cls(
            client=AsyncOpenAI(api_key=api_key),
            model=model,
            reasoning_effort=reasoning_effort,
            store=store,
        )

    async def extract_json(
        self,
        *,
        image_bytes: bytes,
        mime_type: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Call the Responses API with an image and a strict JSON schema."""
        encoded = base64.b64encode(image_bytes).decode("utf-8")
        payload = self._base_payload()
        payload["input"] = [
            {
                "role": "user",
                "content": [
                    {"type": "input_text", "text": prompt},
                    {
                        "type": "input_image",
                        "image_url": f"data:{mime_type};base64,{encoded}",
                    },
                ],
            }
        ]
        payload["text"] = {
            "format": {
                "type": "json_schema",
                "name": "product_extract",
                "strict": True,
                "schema": schema,
            }
        }
        response = await self.client.responses.create(**payload)
        output_text = response.output_text
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return json.loads(output_text)

    async def generate_text(self, *, prompt: str) -> str:
        """Call the Responses API with a plain text prompt."""
        payload = self._base_payload()
        payload["input"] = prompt
        response = await self.client.responses.create(**payload)
        if not response.output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return response.output_text

    def _base_payload(self) -> dict[str, object]:
        payload: dict[str, object] = {"model": self.model, "store": self.store}
        if self.reasoning_effort:
            payload["reasoning"] = {"effort": self.reasoning_effort}
        return payload
