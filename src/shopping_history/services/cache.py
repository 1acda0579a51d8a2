"""Expiring in-memory storage for short-lived values."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Cache(Protocol):
    """Cache interface for simple key-value data."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a cached value with a TTL in seconds."""

    def pop(self, key: str) -> object | None:
        """Remove and return a cached value if present and not expired."""


@dataclass
class _CacheEntry:
    value: object
    expires_at: datetime


class InMemoryCache(Cache):
    """Process-local cache; expired entries are dropped on access and on write."""

    def __init__(self) -> None:
        self._entries: dict[str, _CacheEntry] = {}

    def __len__(self) -> int:
        self._prune()
        return len(self._entries)

    def get(self, key: str) -> object | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if _now() >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        self._prune()
        expires_at = _now() + timedelta(seconds=ttl_seconds)
        self._entries[key] = _CacheEntry(value=value, expires_at=expires_at)

    def pop(self, key: str) -> object | None:
        value = self.get(key)
        self._entries.pop(key, None)
        return value

    def _prune(self) -> None:
        now = _now()
        expired = [key for key, e in self._entries.items() if now >= e.expires_at]
        for key in expired:
            del self._entries[key]


def _now() -> datetime:
    return datetime.now(tz=UTC)
