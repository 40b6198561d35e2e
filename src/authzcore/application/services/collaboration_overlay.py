"""Per-item collaboration overlay for content resources."""

import logging

from authzcore.application.dto.decision_dto import Decision
from authzcore.application.ports import GrantStoreReader
from authzcore.domain.exceptions import PermissionDenied
from authzcore.domain.value_objects import CollaboratorRole, Effect

logger = logging.getLogger(__name__)

CONTENT_ACTION_PREFIX = "content:"

CO_AUTHOR_ACTIONS = frozenset(
    {
        "content:Read",
        "content:List",
        "content:Update",
        "content:UpdateStatus",
        "content:ListCollaborators",
    }
)


def decide(role: CollaboratorRole, action: str) -> Decision:
    """Decision for a resolved collaborator role. Final for content resources."""
    if not action.startswith(CONTENT_ACTION_PREFIX):
        return Decision(
            effect=Effect.DENY,
            reason=f"{action} is not a content action",
            collaborator_role=role,
        )
    if role == CollaboratorRole.OWNER:
        return Decision(effect=Effect.ALLOW, reason="content owner", collaborator_role=role)
    if action in CO_AUTHOR_ACTIONS:
        return Decision(effect=Effect.ALLOW, reason="content co-author", collaborator_role=role)
    return Decision(
        effect=Effect.DENY,
        reason=f"co-author cannot perform {action}",
        collaborator_role=role,
    )


def allowed_actions(role: CollaboratorRole) -> frozenset[str]:
    """Actions a role allows, as patterns."""
    if role == CollaboratorRole.OWNER:
        return frozenset({f"{CONTENT_ACTION_PREFIX}*"})
    return CO_AUTHOR_ACTIONS


class CollaborationOverlay:
    """Resolves a user's role on a content item."""

    def __init__(self, store: GrantStoreReader) -> None:
        self._store = store

    async def resolve_role(self, content_id: str, user_id: str) -> CollaboratorRole | None:
        """Collaborator row first; the item's owner_id covers a missing or stale row."""
        role = await self._store.get_content_collaborator_role(content_id, user_id)
        if role == CollaboratorRole.OWNER:
            return role
        owner_id = await self._store.get_content_owner(content_id)
        if owner_id is not None and owner_id == user_id:
            return CollaboratorRole.OWNER
        return role

    async def require_owner(self, content_id: str, user_id: str) -> None:
        """Delete and collaborator management are owner only."""
        role = await self.resolve_role(content_id, user_id)
        if role != CollaboratorRole.OWNER:
            logger.info("User %s is not the owner of content %s", user_id, content_id)
            raise PermissionDenied("Only the content owner can perform this action")

    async def require_collaborator(self, content_id: str, user_id: str) -> CollaboratorRole:
        role = await self.resolve_role(content_id, user_id)
        if role is None:
            raise PermissionDenied("You don't have access to this content")
        return role
