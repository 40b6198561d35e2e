"""Process-local cache for grant store lookups.

An entry lives for the configured TTL, clamped so that it never outlives the
earliest future ``expires_at`` among the rows it holds. The store holds at
most ``max_entries``; expired entries are purged on each write and the least
recently used entry is evicted when it is full. Content collaboration
lookups are not cached.
"""

import logging
import time
from collections import OrderedDict
from collections.abc import Awaitable, Callable, Hashable, Iterable
from datetime import UTC, datetime
from typing import Any, TypeVar
from uuid import UUID

from authzcore.application.ports import GrantStoreReader
from authzcore.domain.entities import (
    GroupMembership,
    Policy,
    ResourcePermission,
    ResourceShare,
    Role,
    RoleAssignment,
)
from authzcore.domain.value_objects import CollaboratorRole, PrincipalType

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GrantCache:
    """TTL and LRU bounded store shared by the per-call CachingGrantStore wrappers."""

    def __init__(
        self,
        ttl_seconds: float,
        max_entries: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._now = now
        self._entries: OrderedDict[Hashable, tuple[float, Any]] = OrderedDict()

    def get(self, key: Hashable) -> tuple[bool, Any]:
        entry = self._entries.get(key)
        if entry is None:
            return False, None
        deadline, value = entry
        if deadline <= self._clock():
            del self._entries[key]
            return False, None
        self._entries.move_to_end(key)
        return True, value

    def ttl_for(self, expiries: Iterable[datetime | None]) -> float:
        """Configured TTL, clamped below the earliest future expiry."""
        now = self._now()
        upcoming = [e for e in expiries if e is not None and e > now]
        if not upcoming:
            return self._ttl
        return min(self._ttl, (min(upcoming) - now).total_seconds())

    def put(self, key: Hashable, value: Any, expiries: Iterable[datetime | None] = ()) -> None:
        ttl = self.ttl_for(expiries)
        if ttl <= 0 or self._max_entries <= 0:
            return
        now = self._clock()
        self._purge(now)
        self._entries.pop(key, None)
        while len(self._entries) >= self._max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Grant cache full; evicted %s", evicted)
        self._entries[key] = (now + ttl, value)

    def _purge(self, now: float) -> None:
        expired = [k for k, (deadline, _) in self._entries.items() if deadline <= now]
        for key in expired:
            del self._entries[key]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class CachingGrantStore:
    """GrantStoreReader decorator backed by a GrantCache."""

    def __init__(self, inner: GrantStoreReader, cache: GrantCache) -> None:
        self._inner = inner
        self._cache = cache

    async def _cached(
        self,
        key: Hashable,
        load: Callable[[], Awaitable[T]],
        expiries: Callable[[T], Iterable[datetime | None]] = lambda _: (),
    ) -> T:
        hit, value = self._cache.get(key)
        if hit:
            return value
        value = await load()
        self._cache.put(key, value, expiries(value))
        logger.debug("Grant cache miss: %s", key)
        return value

    async def list_role_assignments(
        self, principal_id: str, principal_type: PrincipalType
    ) -> list[RoleAssignment]:
        return await self._cached(
            ("role_assignments", principal_id, principal_type),
            lambda: self._inner.list_role_assignments(principal_id, principal_type),
            lambda rows: (r.expires_at for r in rows),
        )

    async def list_group_memberships(
        self, principal_id: str, principal_type: PrincipalType
    ) -> list[GroupMembership]:
        return await self._cached(
            ("group_memberships", principal_id, principal_type),
            lambda: self._inner.list_group_memberships(principal_id, principal_type),
            lambda rows: (r.expires_at for r in rows),
        )

    async def get_role(self, role_id: UUID) -> Role | None:
        return await self._cached(("role", role_id), lambda: self._inner.get_role(role_id))

    async def list_role_policies(self, role_id: UUID) -> list[Policy]:
        return await self._cached(
            ("role_policies", role_id), lambda: self._inner.list_role_policies(role_id)
        )

    async def list_resource_permissions(self, resource_id: str) -> list[ResourcePermission]:
        return await self._cached(
            ("resource_permissions", resource_id),
            lambda: self._inner.list_resource_permissions(resource_id),
        )

    async def list_resource_shares(self, resource_id: str) -> list[ResourceShare]:
        return await self._cached(
            ("resource_shares", resource_id),
            lambda: self._inner.list_resource_shares(resource_id),
            lambda rows: (r.expires_at for r in rows),
        )

    async def list_principal_resource_permissions(
        self, principal_id: str, principal_type: PrincipalType
    ) -> list[ResourcePermission]:
        return await self._cached(
            ("principal_resource_permissions", principal_id, principal_type),
            lambda: self._inner.list_principal_resource_permissions(principal_id, principal_type),
        )

    async def list_principal_resource_shares(
        self, principal_id: str, principal_type: PrincipalType
    ) -> list[ResourceShare]:
        return await self._cached(
            ("principal_resource_shares", principal_id, principal_type),
            lambda: self._inner.list_principal_resource_shares(principal_id, principal_type),
            lambda rows: (r.expires_at for r in rows),
        )

    async def get_content_collaborator_role(
        self, content_id: str, user_id: str
    ) -> CollaboratorRole | None:
        return await self._inner.get_content_collaborator_role(content_id, user_id)

    async def get_content_owner(self, content_id: str) -> str | None:
        return await self._inner.get_content_owner(content_id)
