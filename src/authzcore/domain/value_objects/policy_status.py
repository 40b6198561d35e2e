"""Policy lifecycle status."""

from enum import StrEnum


class PolicyStatus(StrEnum):
    """Only active policies contribute statements."""

    ACTIVE = "active"
    SUSPENDED = "suspended"
