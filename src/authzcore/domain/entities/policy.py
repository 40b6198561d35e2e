"""Policy entity."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from authzcore.domain.value_objects import PolicyStatus


@dataclass
class Policy:
    """Versioned policy with its raw JSON document.

    The document is kept raw; it is parsed when statements are aggregated so
    that a malformed document can be dropped instead of failing the call.
    """

    id: UUID
    organization_id: str
    name: str
    version: str
    document: str | dict[str, Any]
    status: PolicyStatus = PolicyStatus.ACTIVE
    is_system_policy: bool = False
    description: str | None = None
    created_at: datetime | None = field(default=None, compare=False)

    @property
    def is_active(self) -> bool:
        return self.status == PolicyStatus.ACTIVE
