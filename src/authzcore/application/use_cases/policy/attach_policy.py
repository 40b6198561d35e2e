"""Attach policy use case."""

import logging
from uuid import UUID

from authzcore.domain.exceptions import NotFound, ValidationError
from authzcore.domain.policy import parse_policy_document

logger = logging.getLogger(__name__)


class AttachPolicyUseCase:
    """Attach a policy to a role after validating its document."""

    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def execute(self, role_id: UUID, policy_id: UUID, attached_by: str | None = None) -> None:
        async with self._uow_factory() as uow:
            role = await uow.grants.get_role(role_id)
            if not role:
                raise NotFound("Role", str(role_id))
            policy = await uow.policies.get_by_id(policy_id)
            if not policy:
                raise NotFound("Policy", str(policy_id))
            if policy.organization_id != role.organization_id:
                raise ValidationError("Policy and role belong to different organizations")

            parse_policy_document(policy.document)
            await uow.policies.attach_to_role(role_id, policy_id, attached_by)
            logger.info("Attached policy %s to role %s", policy_id, role_id)
