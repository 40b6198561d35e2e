"""Repository ports."""

from authzcore.application.ports.repositories.grant_store import GrantStoreReader
from authzcore.application.ports.repositories.policy_repository import PolicyRepository

__all__ = [
    "GrantStoreReader",
    "PolicyRepository",
]
