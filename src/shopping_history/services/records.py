"""Persisted collection of purchase records."""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4

from shopping_history.domain.records import (
    RECORD_LIST,
    GeolocationPosition,
    ProductRecord,
)

logger = logging.getLogger(__name__)

SAVE_FAILED_WARNING = "Could not save new records. Storage might be full."


class StorageSlot(Protocol):
    """A single durable key-value entry holding serialized text."""

    def read(self) -> str | None:
        """Return the stored text, or None when the slot is empty."""

    def write(self, value: str) -> None:
        """Overwrite the slot with new text."""


class DuplicateRecordError(ValueError):
    """Raised when adding a record whose id is already stored."""


@dataclass
class RecordStore:
    """In-memory record list mirrored to a storage slot after every change.

    The in-memory list is authoritative: a failed write leaves it intact and
    sets ``warning`` so callers can tell the user.
    """

    slot: StorageSlot
    _records: list[ProductRecord] = field(default_factory=list)
    warning: str | None = None

    @property
    def records(self) -> tuple[ProductRecord, ...]:
        """Return the current records, most recently added first."""
        return tuple(self._records)

    def get(self, record_id: str) -> ProductRecord | None:
        """Return a record by id, if present."""
        return next((r for r in self._records if r.id == record_id), None)

    def load(self) -> list[ProductRecord]:
        """Replace the in-memory list with the persisted collection.

        Unreadable or malformed data is logged and treated as empty. Repeated
        ids keep their first occurrence.
        """
        try:
            raw = self.slot.read()
            loaded = RECORD_LIST.validate_json(raw) if raw else []
            self._records = _drop_repeated_ids(loaded)
        except Exception:
            logger.exception("Failed to load records from storage")
            self._records = []
        logger.info("Loaded records", extra={"record_count": len(self._records)})
        return list(self._records)

    def save(self) -> bool:
        """Write the full collection to the slot; return False on failure."""
        try:
            payload = RECORD_LIST.dump_json(self._records, by_alias=True)
            self.slot.write(payload.decode("utf-8"))
        except Exception:
            logger.exception(
                "Failed to save records to storage",
                extra={"record_count": len(self._records)},
            )
            self.warning = SAVE_FAILED_WARNING
            return False
        self.warning = None
        return True

    def add(self, record: ProductRecord) -> bool:
        """Prepend a record and persist; return whether the save succeeded."""
        if self.get(record.id) is not None:
            raise DuplicateRecordError(f"Record {record.id} already exists")
        self._records.insert(0, record)
        return self.save()

    def remove(self, record_id: str) -> bool:
        """Drop a record by id and persist; return whether one was removed."""
        remaining = [r for r in self._records if r.id != record_id]
        if len(remaining) == len(self._records):
            return False
        self._records = remaining
        self.save()
        return True


def _drop_repeated_ids(records: list[ProductRecord]) -> list[ProductRecord]:
    seen: set[str] = set()
    unique: list[ProductRecord] = []
    for record in records:
        if record.id in seen:
            logger.warning(
                "Dropped stored record with repeated id",
                extra={"record_id": record.id},
            )
            continue
        seen.add(record.id)
        unique.append(record)
    return unique


def new_record(
    *,
    name: str,
    price: float,
    image_url: str,
    location: GeolocationPosition | None = None,
    now: datetime | None = None,
) -> ProductRecord:
    """Build a record with a fresh id stamped with the current UTC time."""
    return ProductRecord(
        id=str(uuid4()),
        image_url=image_url,
        name=name,
        price=price,
        date=now or datetime.now(tz=UTC),
        location=location,
    )
