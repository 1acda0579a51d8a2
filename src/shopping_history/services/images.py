"""Image downscaling before extraction."""

import asyncio
import io
import logging
from dataclasses import dataclass

from PIL import Image, ImageOps, UnidentifiedImageError

from shopping_history.domain.scans import PreprocessedImage

logger = logging.getLogger(__name__)


class ImageDecodeError(ValueError):
    """Raised when uploaded bytes cannot be decoded as an image."""


@dataclass
class ImagePreprocessor:
    """Shrink images to fit a square box and re-encode them as JPEG."""

    max_dimension: int = 400
    quality: int = 80

    async def preprocess(self, image_bytes: bytes) -> PreprocessedImage:
        """Downscale and re-encode an image in a worker thread."""
        return await asyncio.to_thread(self.preprocess_sync, image_bytes)

    def preprocess_sync(self, image_bytes: bytes) -> PreprocessedImage:
        """Downscale and re-encode an image."""
        try:
            with Image.open(io.BytesIO(image_bytes)) as opened:
                opened.load()
                image = ImageOps.exif_transpose(opened)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
            raise ImageDecodeError(
                "The selected file is not a readable image."
            ) from exc

        width, height = image.size
        target = fit_within(width, height, self.max_dimension)
        if target != (width, height):
            image = image.resize(target, Image.Resampling.LANCZOS)
        image = _flatten(image)

        buffer = io.BytesIO()
        image.save(buffer, format="JPEG", quality=self.quality)
        logger.info(
            "Preprocessed image",
            extra={"source_size": (width, height), "output_size": image.size},
        )
        return PreprocessedImage(
            data=buffer.getvalue(),
            mime_type="image/jpeg",
            width=image.size[0],
            height=image.size[1],
        )


def fit_within(width: int, height: int, max_dimension: int) -> tuple[int, int]:
    """Return dimensions scaled so the longer side is at most max_dimension."""
    longest = max(width, height)
    if longest <= max_dimension:
        return width, height
    scale = max_dimension / longest
    return (
        min(max_dimension, max(1, round(width * scale))),
        min(max_dimension, max(1, round(height * scale))),
    )


def _flatten(image: Image.Image) -> Image.Image:
    """Convert to RGB, compositing any transparency onto white."""
    if image.mode == "RGB":
        return image
    if image.mode in {"RGBA", "LA", "P"}:
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background
    return image.convert("RGB")
