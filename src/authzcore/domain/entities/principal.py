"""Principal entity."""

from dataclasses import dataclass

from authzcore.domain.value_objects import PrincipalType


@dataclass(frozen=True)
class Principal:
    """A user, service account or group that can receive permissions.

    Group memberships and role assignments are not carried here; they are
    read from the grant store at evaluation time so that expiry is judged
    against request time.
    """

    id: str
    type: PrincipalType
    organization_id: str
