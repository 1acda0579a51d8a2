"""Product name and price extraction from receipt photos."""

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from shopping_history.domain.records import OcrResult
from shopping_history.domain.scans import PreprocessedImage
from shopping_history.services.inference import InferenceClient, InferenceError

logger = logging.getLogger(__name__)

EXTRACTION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "productName": {"type": "string"},
        "price": {"type": "number"},
    },
    "required": ["productName", "price"],
    "additionalProperties": False,
}

EXTRACTION_PROMPT = (
    "This image shows a shopping receipt or a price tag. "
    "Identify the main product and its price. "
    "Return the product name as printed (expand obvious abbreviations) "
    "and the price as a plain number without a currency symbol. "
    "If several items are listed, pick the most prominent one."
)


@dataclass
class ExtractionService:
    """Turns a preprocessed image into a proposed name and price."""

    client: InferenceClient

    async def extract(self, image: PreprocessedImage) -> OcrResult:
        """Call the inference service once and validate its answer."""
        try:
            raw = await self.client.extract_json(
                image_bytes=image.data,
                mime_type=image.mime_type,
                schema=EXTRACTION_SCHEMA,
                prompt=EXTRACTION_PROMPT,
            )
        except Exception as exc:
            logger.exception("Extraction call failed")
            raise InferenceError(
                "Could not read the product from that image. Please try again."
            ) from exc
        try:
            return OcrResult.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Extraction returned an invalid payload: %s", raw)
            raise InferenceError(
                "The product details in that image could not be understood."
            ) from exc
