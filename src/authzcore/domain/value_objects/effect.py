"""Statement and decision effects."""

from enum import StrEnum


class Effect(StrEnum):
    """Effect of a policy statement or of a final decision."""

    ALLOW = "Allow"
    DENY = "Deny"
