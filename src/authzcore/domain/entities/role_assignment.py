"""Role assignment entity."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from authzcore.domain.value_objects import PrincipalType


@dataclass
class RoleAssignment:
    """Role granted to a principal, optionally time bounded.

    When ``principal_type`` is ``group`` the assignment attaches the role to
    every active member of that group.
    """

    id: UUID
    role_id: UUID
    principal_id: str
    principal_type: PrincipalType
    assigned_by: str | None = None
    assigned_at: datetime | None = None
    expires_at: datetime | None = None
    conditions: dict[str, Any] = field(default_factory=dict)
