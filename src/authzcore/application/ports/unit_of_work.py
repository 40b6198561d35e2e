"""Unit of Work port - one connection per call."""

from collections.abc import AsyncIterator
from typing import Protocol

from authzcore.application.ports.repositories.grant_store import GrantStoreReader
from authzcore.application.ports.repositories.policy_repository import PolicyRepository


class UnitOfWork(Protocol):
    """Unit of Work - manages transaction and repository access."""

    @property
    def grants(self) -> GrantStoreReader: ...

    @property
    def policies(self) -> PolicyRepository: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


class UnitOfWorkFactory(Protocol):
    """Factory for creating UnitOfWork instances."""

    async def __call__(self) -> AsyncIterator[UnitOfWork]: ...
