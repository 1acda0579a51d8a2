"""Domain models for purchase records."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class GeolocationPosition(BaseModel):
    """Where a purchase was recorded."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)


class ProductRecord(BaseModel):
    """A confirmed purchase entry.

    Serialized with camelCase keys so stored histories keep their original
    shape (``imageUrl``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    image_url: str = Field(alias="imageUrl")
    name: str
    price: float = Field(ge=0.0, allow_inf_nan=False)
    date: datetime
    location: GeolocationPosition | None = None

    @field_validator("date")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class OcrResult(BaseModel):
    """Name and price proposed by the extraction call."""

    product_name: str = Field(alias="productName")
    price: float = Field(ge=0.0, allow_inf_nan=False)

    model_config = ConfigDict(populate_by_name=True)


RECORD_LIST = TypeAdapter(list[ProductRecord])
