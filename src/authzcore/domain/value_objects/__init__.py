"""Domain value objects."""

from authzcore.domain.value_objects.access_level import AccessLevel
from authzcore.domain.value_objects.arn import Arn
from authzcore.domain.value_objects.collaborator_role import CollaboratorRole
from authzcore.domain.value_objects.effect import Effect
from authzcore.domain.value_objects.grant_source import GrantSource
from authzcore.domain.value_objects.policy_status import PolicyStatus
from authzcore.domain.value_objects.principal_type import PrincipalType

__all__ = [
    "AccessLevel",
    "Arn",
    "CollaboratorRole",
    "Effect",
    "GrantSource",
    "PolicyStatus",
    "PrincipalType",
]
