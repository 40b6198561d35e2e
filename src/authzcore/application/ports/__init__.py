"""Application ports - interfaces for external adapters."""

from authzcore.application.ports.repositories import GrantStoreReader, PolicyRepository
from authzcore.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory

__all__ = [
    "GrantStoreReader",
    "PolicyRepository",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
