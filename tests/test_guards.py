"""Tests for in-flight guards and the draft cache."""

from datetime import timedelta

import pytest

from shopping_history.services import cache as cache_module
from shopping_history.services.cache import InMemoryCache
from shopping_history.services.guards import InFlightGuard, OperationInProgressError


def test_guard_rejects_reentry() -> None:
    guard = InFlightGuard("scan")

    with guard.hold():
        assert guard.busy
        with pytest.raises(OperationInProgressError), guard.hold():
            pass

    assert not guard.busy


def test_guard_releases_after_failure() -> None:
    guard = InFlightGuard("analysis")

    with pytest.raises(ValueError), guard.hold():
        raise ValueError("failed")

    with guard.hold():
        assert guard.busy


def test_cache_entries_expire(monkeypatch) -> None:
    cache = InMemoryCache()
    cache.set("draft", "value", ttl_seconds=60)
    assert cache.get("draft") == "value"

    start = cache_module._now()
    monkeypatch.setattr(cache_module, "_now", lambda: start + timedelta(seconds=61))

    assert cache.get("draft") is None
    assert len(cache) == 0


def test_cache_pop_removes_entry() -> None:
    cache = InMemoryCache()
    cache.set("draft", "value", ttl_seconds=60)

    assert cache.pop("draft") == "value"
    assert cache.pop("draft") is None
