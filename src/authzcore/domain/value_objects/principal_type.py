"""Principal types."""

from enum import StrEnum


class PrincipalType(StrEnum):
    """Kinds of identity that can hold grants."""

    USER = "user"
    SERVICE_ACCOUNT = "service_account"
    GROUP = "group"
