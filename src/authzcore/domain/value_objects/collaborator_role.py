"""Content collaborator roles."""

from enum import StrEnum


class CollaboratorRole(StrEnum):
    """Role a user holds on a content item."""

    OWNER = "owner"
    CO_AUTHOR = "co-author"
