"""Group membership entity."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from authzcore.domain.value_objects import PrincipalType


@dataclass
class GroupMembership:
    """Membership of a principal in a group."""

    id: UUID
    group_id: UUID
    principal_id: str
    principal_type: PrincipalType
    role_in_group: str = "member"
    joined_at: datetime | None = None
    expires_at: datetime | None = None

    def is_active(self, now: datetime) -> bool:
        return self.expires_at is None or self.expires_at > now
