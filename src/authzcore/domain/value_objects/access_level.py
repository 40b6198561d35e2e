"""Resource share access levels."""

from enum import StrEnum


class AccessLevel(StrEnum):
    """Access tier carried by a resource share."""

    READ = "read"
    WRITE = "write"
    ADMIN = "admin"

    @property
    def actions(self) -> tuple[str, ...]:
        """Action patterns a share at this level allows."""
        return _SHARE_ACTIONS[self]


_SHARE_ACTIONS: dict[AccessLevel, tuple[str, ...]] = {
    AccessLevel.READ: ("*:Read", "*:List"),
    AccessLevel.WRITE: ("*:Read", "*:List", "*:Write"),
    AccessLevel.ADMIN: ("*",),
}
