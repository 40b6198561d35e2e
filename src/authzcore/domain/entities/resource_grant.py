"""Resource-scoped grant entities: direct permissions and shares."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from authzcore.domain.value_objects import AccessLevel, Effect, PrincipalType


@dataclass
class ResourcePermission:
    """Single permission string granted or denied on one resource.

    ``organization_id`` is the owning organization of the resource; short
    resource ids such as ``resource/123`` are only unique within it.
    """

    id: UUID
    resource_id: str
    organization_id: str
    principal_id: str
    principal_type: PrincipalType
    permission: str
    effect: Effect = Effect.ALLOW
    created_by: str | None = None


@dataclass
class ResourceShare:
    """Resource shared with a principal at an access level."""

    id: UUID
    resource_id: str
    organization_id: str
    principal_id: str
    principal_type: PrincipalType
    access_level: AccessLevel
    expires_at: datetime | None = None
    shared_by: str | None = None
