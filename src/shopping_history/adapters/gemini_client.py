"""Google Gemini REST client for extraction and analysis."""

import base64
import json
from dataclasses import dataclass

import httpx

from shopping_history.services.inference import InferenceClient


@dataclass
class HttpxGeminiClient(InferenceClient):
    """Inference client calling Gemini's generateContent endpoint with httpx."""

    api_key: str
    model: str
    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, api_key: str, model: str, base_url: str) -> "HttpxGeminiClient":
        """Create a Gemini client with a managed httpx session."""
        return cls(
            api_key=api_key,
            model=model,
            base_url=base_url,
            http_client=httpx.AsyncClient(),
        )

    async def extract_json(
        self,
        *,
        image_bytes: bytes,
        mime_type: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Send an inline image and ask for JSON matching the schema."""
        body = {
            "contents": [
                {
                    "parts": [
                        {
                            "inline_data": {
                                "mime_type": mime_type,
                                "data": base64.b64encode(image_bytes).decode("utf-8"),
                            }
                        },
                        {"text": prompt},
                    ]
                }
            ],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": to_gemini_schema(schema),
            },
        }
        text = await self._generate(body)
        return json.loads(_strip_fences(text))

    async def generate_text(self, *, prompt: str) -> str:
        """Send a text prompt and return the first candidate's text."""
        body = {"contents": [{"parts": [{"text": prompt}]}]}
        return await self._generate(body)

    async def _generate(self, body: dict[str, object]) -> str:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        response = await self.http_client.post(
            url,
            headers={"x-goog-api-key": self.api_key},
            json=body,
            timeout=60,
        )
        response.raise_for_status()
        payload = response.json()
        candidates = payload.get("candidates") or []
        if not candidates:
            raise RuntimeError("Gemini returned no candidates")
        parts = candidates[0].get("content", {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts)
        if not text:
            raise RuntimeError("Gemini returned an empty response")
        return text

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def to_gemini_schema(schema: dict[str, object]) -> dict[str, object]:
    """Convert a JSON schema into Gemini's OpenAPI subset."""
    converted: dict[str, object] = {}
    for key, value in schema.items():
        if key == "additionalProperties":
            continue
        if key == "type" and isinstance(value, str):
            converted[key] = value.upper()
        elif key == "properties" and isinstance(value, dict):
            converted[key] = {
                name: to_gemini_schema(sub) for name, sub in value.items()
            }
        elif key == "items" and isinstance(value, dict):
            converted[key] = to_gemini_schema(value)
        else:
            converted[key] = value
    return converted


def _strip_fences(text: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")[1:]
        cleaned = "\n".join(
            line for line in lines if not line.strip().startswith("```")
        )
    return cleaned
