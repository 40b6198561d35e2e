"""Domain entities."""

from authzcore.domain.entities.content_collaborator import ContentCollaborator
from authzcore.domain.entities.group import GroupMembership
from authzcore.domain.entities.policy import Policy
from authzcore.domain.entities.principal import Principal
from authzcore.domain.entities.resource_grant import ResourcePermission, ResourceShare
from authzcore.domain.entities.role import Role
from authzcore.domain.entities.role_assignment import RoleAssignment

__all__ = [
    "ContentCollaborator",
    "GroupMembership",
    "Policy",
    "Principal",
    "ResourcePermission",
    "ResourceShare",
    "Role",
    "RoleAssignment",
]
