"""Unit tests for the grant cache."""

from datetime import UTC, datetime, timedelta

import pytest

from authzcore.domain.value_objects import AccessLevel, PrincipalType
from authzcore.infrastructure.cache import CachingGrantStore, GrantCache

from tests.conftest import FakeGrantStore, allow, make_policy

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


class FakeClock:
    def __init__(self) -> None:
        self.value = 0.0

    def __call__(self) -> float:
        return self.value


def test_ttl_clamped_below_earliest_future_expiry() -> None:
    cache = GrantCache(ttl_seconds=60, now=lambda: NOW)

    assert cache.ttl_for([None, NOW + timedelta(seconds=10), NOW + timedelta(hours=1)]) == 10
    assert cache.ttl_for([NOW - timedelta(seconds=5)]) == 60
    assert cache.ttl_for([]) == 60


def test_entries_expire() -> None:
    clock = FakeClock()
    cache = GrantCache(ttl_seconds=30, clock=clock, now=lambda: NOW)
    cache.put("key", "value")

    assert cache.get("key") == (True, "value")
    clock.value = 30
    assert cache.get("key") == (False, None)
    assert len(cache) == 0


def test_zero_ttl_disables_caching() -> None:
    cache = GrantCache(ttl_seconds=0)
    cache.put("key", "value")

    assert len(cache) == 0


@pytest.mark.asyncio
async def test_caching_store_serves_repeat_reads(store: FakeGrantStore) -> None:
    store.grant(make_policy(allow("resource:Read", "*")))
    cache = GrantCache(ttl_seconds=60, now=lambda: NOW)
    cached = CachingGrantStore(store, cache)

    first = await cached.list_role_assignments("user-1", PrincipalType.USER)
    second = await CachingGrantStore(store, cache).list_role_assignments("user-1", PrincipalType.USER)

    assert first == second
    assert store.calls["list_role_assignments"] == 1


@pytest.mark.asyncio
async def test_rows_expiring_soon_shorten_entry_life(store: FakeGrantStore) -> None:
    clock = FakeClock()
    store.grant(make_policy(allow("resource:Read", "*")), expires_at=NOW + timedelta(seconds=5))
    cached = CachingGrantStore(store, GrantCache(ttl_seconds=60, clock=clock, now=lambda: NOW))

    await cached.list_role_assignments("user-1", PrincipalType.USER)
    clock.value = 6
    await cached.list_role_assignments("user-1", PrincipalType.USER)

    assert store.calls["list_role_assignments"] == 2


@pytest.mark.asyncio
async def test_content_lookups_not_cached(store: FakeGrantStore) -> None:
    cached = CachingGrantStore(store, GrantCache(ttl_seconds=60))

    await cached.get_content_owner("42")
    await cached.get_content_owner("42")

    assert store.calls["get_content_owner"] == 2


def test_expired_entries_purged_on_write() -> None:
    clock = FakeClock()
    cache = GrantCache(ttl_seconds=30, clock=clock, now=lambda: NOW)
    for i in range(1000):
        cache.put(("role", i), i)
    assert len(cache) == 1000

    clock.value = 31
    cache.put("fresh", "value")

    assert len(cache) == 1
    assert cache.get("fresh") == (True, "value")


def test_full_cache_evicts_least_recently_used() -> None:
    cache = GrantCache(ttl_seconds=60, max_entries=2, now=lambda: NOW)
    cache.put("a", 1)
    cache.put("b", 2)
    cache.get("a")

    cache.put("c", 3)

    assert len(cache) == 2
    assert cache.get("b") == (False, None)
    assert cache.get("a") == (True, 1)
    assert cache.get("c") == (True, 3)


@pytest.mark.asyncio
async def test_principal_share_listing_cached_until_share_expires(store: FakeGrantStore) -> None:
    clock = FakeClock()
    store.add_share("resource/123", AccessLevel.READ, expires_at=NOW + timedelta(seconds=5))
    cached = CachingGrantStore(store, GrantCache(ttl_seconds=60, clock=clock, now=lambda: NOW))

    await cached.list_principal_resource_shares("user-1", PrincipalType.USER)
    await cached.list_principal_resource_shares("user-1", PrincipalType.USER)
    clock.value = 6
    await cached.list_principal_resource_shares("user-1", PrincipalType.USER)

    assert store.calls["list_principal_resource_shares"] == 2
