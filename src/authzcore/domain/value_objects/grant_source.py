"""Grant source tags."""

from enum import StrEnum


class GrantSource(StrEnum):
    """Where a set of statements was discovered, in discovery order."""

    ROLE = "role"
    GROUP = "group"
    RESOURCE_PERMISSION = "resource_permission"
    RESOURCE_SHARE = "resource_share"
