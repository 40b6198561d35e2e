"""Grant store port - read side of every grant source."""

from typing import Protocol
from uuid import UUID

from authzcore.domain.entities import (
    GroupMembership,
    Policy,
    ResourcePermission,
    ResourceShare,
    Role,
    RoleAssignment,
)
from authzcore.domain.value_objects import CollaboratorRole, PrincipalType


class GrantStoreReader(Protocol):
    """Port for reading grants. Expired rows may be returned; callers filter."""

    async def list_role_assignments(
        self, principal_id: str, principal_type: PrincipalType
    ) -> list[RoleAssignment]: ...

    async def list_group_memberships(
        self, principal_id: str, principal_type: PrincipalType
    ) -> list[GroupMembership]: ...

    async def get_role(self, role_id: UUID) -> Role | None: ...

    async def list_role_policies(self, role_id: UUID) -> list[Policy]: ...

    async def list_resource_permissions(self, resource_id: str) -> list[ResourcePermission]: ...

    async def list_resource_shares(self, resource_id: str) -> list[ResourceShare]: ...

    async def list_principal_resource_permissions(
        self, principal_id: str, principal_type: PrincipalType
    ) -> list[ResourcePermission]:
        """Resource permissions addressed to a principal, on any resource."""
        ...

    async def list_principal_resource_shares(
        self, principal_id: str, principal_type: PrincipalType
    ) -> list[ResourceShare]: ...

    async def get_content_collaborator_role(
        self, content_id: str, user_id: str
    ) -> CollaboratorRole | None: ...

    async def get_content_owner(self, content_id: str) -> str | None: ...
