"""Content collaborator entity."""

from dataclasses import dataclass
from datetime import datetime

from authzcore.domain.value_objects import CollaboratorRole


@dataclass
class ContentCollaborator:
    """User's role on a content item. Exactly one owner per item."""

    content_id: str
    user_id: str
    role: CollaboratorRole
    invited_by: str | None = None
    created_at: datetime | None = None
