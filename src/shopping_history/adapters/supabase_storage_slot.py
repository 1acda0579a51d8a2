"""Supabase-backed storage slot."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from shopping_history.services.records import StorageSlot


@dataclass
class SupabaseStorageSlot(StorageSlot):
    """Keeps one named entry as a row of a key/value table."""

    client: Client
    key: str
    table: str = "kv_store"

    def read(self) -> str | None:
        """Return the stored value for the key, if any."""
        response = (
            self.client.table(self.table)
            .select("value")
            .eq("key", self.key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get("value")

    def write(self, value: str) -> None:
        """Insert or overwrite the row for the key."""
        self.client.table(self.table).upsert(
            {
                "key": self.key,
                "value": value,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="key",
        ).execute()
