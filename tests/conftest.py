"""Shared test fixtures."""

import io
from dataclasses import dataclass, field
from datetime import datetime

import pytest
from PIL import Image

from shopping_history.config import Settings
from shopping_history.containers import AppContainer, assemble_container
from shopping_history.domain.records import GeolocationPosition, ProductRecord
from shopping_history.services.inference import InferenceClient
from shopping_history.services.records import RecordStore, StorageSlot


@dataclass
class InMemoryStorageSlot(StorageSlot):
    """In-memory storage slot for tests."""

    value: str | None = None
    writes: int = 0

    def read(self) -> str | None:
        return self.value

    def write(self, value: str) -> None:
        self.value = value
        self.writes += 1


@dataclass
class FailingStorageSlot(StorageSlot):
    """Slot whose reads or writes raise, like a full or corrupt store."""

    value: str | None = None
    fail_reads: bool = False
    fail_writes: bool = True

    def read(self) -> str | None:
        if self.fail_reads:
            raise OSError("storage unavailable")
        return self.value

    def write(self, value: str) -> None:
        if self.fail_writes:
            raise OSError("quota exceeded")
        self.value = value


@dataclass
class FakeInferenceClient(InferenceClient):
    """Fake inference client that records calls and returns fixed payloads."""

    payload: dict[str, object] = field(
        default_factory=lambda: {"productName": "Oat Milk", "price": 2.49}
    )
    answer: str = "You spent 5.50 in total."
    error: Exception | None = None
    extract_calls: list[dict[str, object]] = field(default_factory=list)
    prompts: list[str] = field(default_factory=list)

    async def extract_json(
        self,
        *,
        image_bytes: bytes,
        mime_type: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        self.extract_calls.append(
            {"image_bytes": image_bytes, "mime_type": mime_type, "schema": schema}
        )
        if self.error is not None:
            raise self.error
        return self.payload

    async def generate_text(self, *, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.answer


def make_image_bytes(
    width: int, height: int, mode: str = "RGB", image_format: str = "PNG"
) -> bytes:
    """Render a solid image of the given size and encode it."""
    color = (200, 30, 30, 128) if mode == "RGBA" else (200, 30, 30)
    image = Image.new(mode, (width, height), color[: len(mode)])
    buffer = io.BytesIO()
    image.save(buffer, format=image_format)
    return buffer.getvalue()


def make_record(
    name: str,
    price: float,
    date: str,
    record_id: str | None = None,
    location: GeolocationPosition | None = None,
) -> ProductRecord:
    """Build a record with a tiny placeholder image."""
    return ProductRecord(
        id=record_id or f"{name.lower()}-{date}",
        image_url="data:image/jpeg;base64,AAAA",
        name=name,
        price=price,
        date=datetime.fromisoformat(date),
        location=location,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment="test",
        openai_api_key="openai-key",
    )


@pytest.fixture
def storage_slot() -> InMemoryStorageSlot:
    return InMemoryStorageSlot()


@pytest.fixture
def inference_client() -> FakeInferenceClient:
    return FakeInferenceClient()


@pytest.fixture
def container(
    settings: Settings,
    storage_slot: InMemoryStorageSlot,
    inference_client: FakeInferenceClient,
) -> AppContainer:
    record_store = RecordStore(storage_slot)
    record_store.load()

    async def close_resources() -> None:
        return None

    return assemble_container(
        settings,
        record_store=record_store,
        inference_client=inference_client,
        close_resources=close_resources,
    )
