"""PostgreSQL Unit of Work implementation."""

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from psycopg_pool import AsyncConnectionPool

from authzcore.application.ports import GrantStoreReader
from authzcore.infrastructure.persistence.postgres.grant_store import PostgresGrantStore
from authzcore.infrastructure.persistence.postgres.policy_repository import (
    PostgresPolicyRepository,
)


class PostgresUnitOfWork:
    """PostgreSQL Unit of Work - one connection, one transaction."""

    def __init__(
        self,
        pool: AsyncConnectionPool,
        wrap_grants: Callable[[GrantStoreReader], GrantStoreReader] | None = None,
    ) -> None:
        self._pool = pool
        self._wrap_grants = wrap_grants
        self._conn: object | None = None
        self._conn_cm: object | None = None

    async def __aenter__(self) -> "PostgresUnitOfWork":
        self._conn_cm = self._pool.connection()
        self._conn = await self._conn_cm.__aenter__()
        grants: GrantStoreReader = PostgresGrantStore(self._conn)
        if self._wrap_grants is not None:
            grants = self._wrap_grants(grants)
        self._grants = grants
        self._policies = PostgresPolicyRepository(self._conn)
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        if exc_type and self._conn:
            await self._conn.rollback()
        if self._conn_cm:
            await self._conn_cm.__aexit__(exc_type, exc_val, exc_tb)

    @property
    def grants(self) -> GrantStoreReader:
        return self._grants

    @property
    def policies(self) -> PostgresPolicyRepository:
        return self._policies

    async def commit(self) -> None:
        if self._conn:
            await self._conn.commit()

    async def rollback(self) -> None:
        if self._conn:
            await self._conn.rollback()


def create_uow_factory(
    pool: AsyncConnectionPool,
    wrap_grants: Callable[[GrantStoreReader], GrantStoreReader] | None = None,
) -> object:
    """Create UnitOfWork factory (async context manager).

    ``wrap_grants`` decorates each unit's grant store, e.g. with the grant cache.
    """

    @asynccontextmanager
    async def factory() -> AsyncIterator[PostgresUnitOfWork]:
        uow = PostgresUnitOfWork(pool, wrap_grants)
        async with uow:
            try:
                yield uow
                await uow.commit()
            except BaseException:
                await uow.rollback()
                raise

    return factory
