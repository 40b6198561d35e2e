"""PostgreSQL grant store implementation."""

from uuid import UUID

from psycopg import AsyncConnection

from authzcore.domain.entities import (
    GroupMembership,
    Policy,
    ResourcePermission,
    ResourceShare,
    Role,
    RoleAssignment,
)
from authzcore.domain.value_objects import (
    AccessLevel,
    CollaboratorRole,
    Effect,
    PolicyStatus,
    PrincipalType,
)

_ROLE_ASSIGNMENT_COLUMNS = (
    "id, role_id, principal_id, principal_type, assigned_by, assigned_at, expires_at, conditions"
)


def _role_assignment(r: tuple) -> RoleAssignment:
    return RoleAssignment(
        id=r[0],
        role_id=r[1],
        principal_id=r[2],
        principal_type=PrincipalType(r[3]),
        assigned_by=r[4],
        assigned_at=r[5],
        expires_at=r[6],
        conditions=r[7] or {},
    )


_RESOURCE_PERMISSION_COLUMNS = (
    "id, resource_id, organization_id, principal_id, principal_type, permission, effect, created_by"
)

_RESOURCE_SHARE_COLUMNS = (
    "id, resource_id, organization_id, principal_id, principal_type, access_level, expires_at, shared_by"
)


def _resource_permission(r: tuple) -> ResourcePermission:
    return ResourcePermission(
        id=r[0],
        resource_id=r[1],
        organization_id=r[2],
        principal_id=r[3],
        principal_type=PrincipalType(r[4]),
        permission=r[5],
        effect=Effect(r[6]),
        created_by=r[7],
    )


def _resource_share(r: tuple) -> ResourceShare:
    return ResourceShare(
        id=r[0],
        resource_id=r[1],
        organization_id=r[2],
        principal_id=r[3],
        principal_type=PrincipalType(r[4]),
        access_level=AccessLevel(r[5]),
        expires_at=r[6],
        shared_by=r[7],
    )


class PostgresGrantStore:
    """Grant store reads. Expired rows are returned; the aggregator filters them."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def list_role_assignments(
        self, principal_id: str, principal_type: PrincipalType
    ) -> list[RoleAssignment]:
        """List role assignments held by principal."""
        cur = await self._conn.execute(
            f"SELECT {_ROLE_ASSIGNMENT_COLUMNS} FROM role_assignments "
            "WHERE principal_id = %s AND principal_type = %s ORDER BY assigned_at, id",
            (principal_id, principal_type.value),
        )
        rows = await cur.fetchall()
        return [_role_assignment(r) for r in rows]

    async def list_group_memberships(
        self, principal_id: str, principal_type: PrincipalType
    ) -> list[GroupMembership]:
        """List group memberships of principal."""
        cur = await self._conn.execute(
            "SELECT id, group_id, principal_id, principal_type, role_in_group, joined_at, expires_at "
            "FROM group_memberships WHERE principal_id = %s AND principal_type = %s "
            "ORDER BY joined_at, id",
            (principal_id, principal_type.value),
        )
        rows = await cur.fetchall()
        return [
            GroupMembership(
                id=r[0],
                group_id=r[1],
                principal_id=r[2],
                principal_type=PrincipalType(r[3]),
                role_in_group=r[4],
                joined_at=r[5],
                expires_at=r[6],
            )
            for r in rows
        ]

    async def get_role(self, role_id: UUID) -> Role | None:
        """Get role by id."""
        cur = await self._conn.execute(
            "SELECT id, organization_id, name, assumable_by, description FROM roles WHERE id = %s",
            (role_id,),
        )
        r = await cur.fetchone()
        if not r:
            return None
        return Role(
            id=r[0],
            organization_id=r[1],
            name=r[2],
            assumable_by=frozenset(PrincipalType(t) for t in r[3] or ()),
            description=r[4],
        )

    async def list_role_policies(self, role_id: UUID) -> list[Policy]:
        """List policies attached to role, in attachment order."""
        cur = await self._conn.execute(
            "SELECT p.id, p.organization_id, p.name, p.version, p.document, p.status, "
            "p.is_system_policy, p.description, p.created_at "
            "FROM role_policies rp JOIN policies p ON p.id = rp.policy_id "
            "WHERE rp.role_id = %s AND p.deleted_at IS NULL "
            "ORDER BY rp.attached_at, p.id",
            (role_id,),
        )
        rows = await cur.fetchall()
        return [
            Policy(
                id=r[0],
                organization_id=r[1],
                name=r[2],
                version=r[3],
                document=r[4],
                status=PolicyStatus(r[5]),
                is_system_policy=r[6],
                description=r[7],
                created_at=r[8],
            )
            for r in rows
        ]

    async def list_resource_permissions(self, resource_id: str) -> list[ResourcePermission]:
        """List direct permissions on resource."""
        cur = await self._conn.execute(
            f"SELECT {_RESOURCE_PERMISSION_COLUMNS} FROM resource_permissions "
            "WHERE resource_id = %s ORDER BY created_at, id",
            (resource_id,),
        )
        rows = await cur.fetchall()
        return [_resource_permission(r) for r in rows]

    async def list_resource_shares(self, resource_id: str) -> list[ResourceShare]:
        """List shares of resource."""
        cur = await self._conn.execute(
            f"SELECT {_RESOURCE_SHARE_COLUMNS} FROM resource_shares "
            "WHERE resource_id = %s ORDER BY created_at, id",
            (resource_id,),
        )
        rows = await cur.fetchall()
        return [_resource_share(r) for r in rows]

    async def list_principal_resource_permissions(
        self, principal_id: str, principal_type: PrincipalType
    ) -> list[ResourcePermission]:
        """List direct permissions addressed to principal, on any resource."""
        cur = await self._conn.execute(
            f"SELECT {_RESOURCE_PERMISSION_COLUMNS} FROM resource_permissions "
            "WHERE principal_id = %s AND principal_type = %s ORDER BY created_at, id",
            (principal_id, principal_type.value),
        )
        rows = await cur.fetchall()
        return [_resource_permission(r) for r in rows]

    async def list_principal_resource_shares(
        self, principal_id: str, principal_type: PrincipalType
    ) -> list[ResourceShare]:
        cur = await self._conn.execute(
            f"SELECT {_RESOURCE_SHARE_COLUMNS} FROM resource_shares "
            "WHERE principal_id = %s AND principal_type = %s ORDER BY created_at, id",
            (principal_id, principal_type.value),
        )
        rows = await cur.fetchall()
        return [_resource_share(r) for r in rows]

    async def get_content_collaborator_role(
        self, content_id: str, user_id: str
    ) -> CollaboratorRole | None:
        """Get user's collaborator role on content item."""
        cur = await self._conn.execute(
            "SELECT role FROM content_collaborators WHERE content_id = %s AND user_id = %s",
            (content_id, user_id),
        )
        r = await cur.fetchone()
        if not r:
            return None
        return CollaboratorRole(r[0])

    async def get_content_owner(self, content_id: str) -> str | None:
        """Get owner id of content item."""
        cur = await self._conn.execute(
            "SELECT owner_id FROM content WHERE id = %s",
            (content_id,),
        )
        r = await cur.fetchone()
        return r[0] if r else None
