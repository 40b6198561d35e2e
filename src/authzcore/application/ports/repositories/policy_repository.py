"""Policy repository port - the writes guarded by policy administration."""

from typing import Any, Protocol
from uuid import UUID

from authzcore.domain.entities import Policy


class PolicyRepository(Protocol):
    """Port for policy persistence."""

    async def get_by_id(self, policy_id: UUID) -> Policy | None: ...

    async def update_document(
        self, policy_id: UUID, document: dict[str, Any], version: str
    ) -> None: ...

    async def attach_to_role(self, role_id: UUID, policy_id: UUID, attached_by: str | None) -> None: ...

    async def detach_from_role(self, role_id: UUID, policy_id: UUID) -> bool: ...

    async def delete(self, policy_id: UUID) -> None: ...
