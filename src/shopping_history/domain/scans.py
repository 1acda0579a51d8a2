"""Models for image scans awaiting confirmation."""

import base64
from dataclasses import dataclass

from shopping_history.domain.records import OcrResult


@dataclass(frozen=True)
class PreprocessedImage:
    """A downscaled, re-encoded image ready to send for extraction."""

    data: bytes
    mime_type: str
    width: int
    height: int

    @property
    def data_url(self) -> str:
        """Return the image as an embeddable data URL."""
        encoded = base64.b64encode(self.data).decode("utf-8")
        return f"data:{self.mime_type};base64,{encoded}"


@dataclass(frozen=True)
class ScanDraft:
    """An OCR result and its preview image, pending user confirmation."""

    id: str
    image_url: str
    ocr: OcrResult
