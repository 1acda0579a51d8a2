"""Scan-and-confirm flow for adding records from photos."""

import logging
from dataclasses import dataclass
from uuid import uuid4

from shopping_history.domain.records import GeolocationPosition, ProductRecord
from shopping_history.domain.scans import ScanDraft
from shopping_history.services.cache import Cache
from shopping_history.services.extraction import ExtractionService
from shopping_history.services.images import ImagePreprocessor
from shopping_history.services.records import RecordStore, new_record

logger = logging.getLogger(__name__)


class DraftNotFoundError(LookupError):
    """Raised when a draft id is unknown or has expired."""


@dataclass
class ScanService:
    """Turns uploads into drafts and confirmed drafts into records."""

    preprocessor: ImagePreprocessor
    extraction_service: ExtractionService
    record_store: RecordStore
    drafts: Cache
    draft_ttl_seconds: int = 900

    async def scan(self, image_bytes: bytes) -> ScanDraft:
        """Shrink the image, ask for name and price, and keep the draft."""
        image = await self.preprocessor.preprocess(image_bytes)
        ocr = await self.extraction_service.extract(image)
        draft = ScanDraft(id=uuid4().hex, image_url=image.data_url, ocr=ocr)
        self.drafts.set(draft.id, draft, self.draft_ttl_seconds)
        logger.info("Created scan draft", extra={"draft_id": draft.id})
        return draft

    def get_draft(self, draft_id: str) -> ScanDraft:
        """Return a pending draft or raise DraftNotFoundError."""
        draft = self.drafts.get(draft_id)
        if not isinstance(draft, ScanDraft):
            raise DraftNotFoundError(draft_id)
        return draft

    def confirm(
        self,
        draft_id: str,
        *,
        name: str,
        price: float,
        location: GeolocationPosition | None = None,
    ) -> tuple[ProductRecord, bool]:
        """Store a record built from the user's edits.

        Returns the record and whether it was persisted.
        """
        draft = self.get_draft(draft_id)
        record = new_record(
            name=name, price=price, image_url=draft.image_url, location=location
        )
        saved = self.record_store.add(record)
        self.drafts.pop(draft_id)
        return record, saved

    def cancel(self, draft_id: str) -> bool:
        """Discard a pending draft; return whether it existed."""
        return self.drafts.pop(draft_id) is not None
