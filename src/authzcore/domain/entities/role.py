"""Role entity."""

from dataclasses import dataclass, field
from uuid import UUID

from authzcore.domain.value_objects import PrincipalType


@dataclass
class Role:
    """Named bundle of policies assumable by some principal types."""

    id: UUID
    organization_id: str
    name: str
    assumable_by: frozenset[PrincipalType] = field(
        default_factory=lambda: frozenset(
            {PrincipalType.USER, PrincipalType.SERVICE_ACCOUNT}
        )
    )
    description: str | None = None

    def can_be_assumed_by(self, principal_type: PrincipalType) -> bool:
        return principal_type in self.assumable_by
