"""PostgreSQL policy repository implementation."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from psycopg import AsyncConnection
from psycopg.types.json import Jsonb

from authzcore.domain.entities import Policy
from authzcore.domain.value_objects import PolicyStatus


class PostgresPolicyRepository:
    """Policy repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, policy_id: UUID) -> Policy | None:
        """Get policy by id."""
        cur = await self._conn.execute(
            "SELECT id, organization_id, name, version, document, status, is_system_policy, "
            "description, created_at FROM policies WHERE id = %s AND deleted_at IS NULL",
            (policy_id,),
        )
        r = await cur.fetchone()
        if not r:
            return None
        return Policy(
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

    async def update_document(
        self, policy_id: UUID, document: dict[str, Any], version: str
    ) -> None:
        """Store new document version and keep the version history."""
        now = datetime.now(UTC)
        await self._conn.execute(
            "INSERT INTO policy_versions (id, policy_id, version, document, created_at) "
            "VALUES (%s, %s, %s, %s, %s)",
            (uuid4(), policy_id, version, Jsonb(document), now),
        )
        await self._conn.execute(
            "UPDATE policies SET document = %s, version = %s, updated_at = %s WHERE id = %s",
            (Jsonb(document), version, now, policy_id),
        )

    async def attach_to_role(self, role_id: UUID, policy_id: UUID, attached_by: str | None) -> None:
        """Attach policy to role (idempotent)."""
        await self._conn.execute(
            "INSERT INTO role_policies (role_id, policy_id, attached_by, attached_at) "
            "VALUES (%s, %s, %s, %s) ON CONFLICT (role_id, policy_id) DO NOTHING",
            (role_id, policy_id, attached_by, datetime.now(UTC)),
        )

    async def detach_from_role(self, role_id: UUID, policy_id: UUID) -> bool:
        """Detach policy from role. Returns False when it was not attached."""
        cur = await self._conn.execute(
            "DELETE FROM role_policies WHERE role_id = %s AND policy_id = %s",
            (role_id, policy_id),
        )
        return cur.rowcount > 0

    async def delete(self, policy_id: UUID) -> None:
        """Soft delete policy and drop its role attachments."""
        await self._conn.execute(
            "DELETE FROM role_policies WHERE policy_id = %s",
            (policy_id,),
        )
        await self._conn.execute(
            "UPDATE policies SET deleted_at = %s WHERE id = %s",
            (datetime.now(UTC), policy_id),
        )
