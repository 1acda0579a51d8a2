"""Pydantic models for the HTTP API payloads."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from shopping_history.domain.records import GeolocationPosition, ProductRecord
from shopping_history.domain.scans import ScanDraft


class ApiModel(BaseModel):
    """Base model accepting and emitting camelCase field names."""

    model_config = ConfigDict(populate_by_name=True)


class ScanDraftResponse(ApiModel):
    """Proposed record returned after scanning an image."""

    id: str
    product_name: str = Field(alias="productName")
    price: float
    image_url: str = Field(alias="imageUrl")

    @classmethod
    def from_draft(cls, draft: ScanDraft) -> "ScanDraftResponse":
        """Build the response from a stored draft."""
        return cls(
            id=draft.id,
            product_name=draft.ocr.product_name,
            price=draft.ocr.price,
            image_url=draft.image_url,
        )


class RecordCreateRequest(ApiModel):
    """User-confirmed name and price for a scanned draft."""

    draft_id: str = Field(alias="draftId")
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    price: float = Field(ge=0.0, allow_inf_nan=False)
    location: GeolocationPosition | None = None


class RecordResponse(ApiModel):
    """A created record and any storage warning."""

    record: ProductRecord
    warning: str | None = None


class RecordListResponse(ApiModel):
    """Filtered history view."""

    records: list[ProductRecord]
    total: int


class RecordDeleteResponse(ApiModel):
    """Outcome of deleting a record."""

    removed: bool
    warning: str | None = None


class AnalysisRequest(ApiModel):
    """A free-text question about the history."""

    query: str = ""


class AnalysisResponse(ApiModel):
    """Answer text; null when the question was blank."""

    answer: str | None
