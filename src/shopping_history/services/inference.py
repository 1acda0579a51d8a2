"""Interface to the external multimodal inference service."""

from typing import Protocol


class InferenceError(RuntimeError):
    """A failed inference call, carrying a message fit to show the user."""


class InferenceClient(Protocol):
    """Interface for LLM extraction and free-text answers."""

    async def extract_json(
        self,
        *,
        image_bytes: bytes,
        mime_type: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Return structured data read from an image."""

    async def generate_text(self, *, prompt: str) -> str:
        """Return a free-text completion for a prompt."""
