"""Detach policy use case."""

import logging
from uuid import UUID

from authzcore.domain.exceptions import NotFound, SystemPolicyError

logger = logging.getLogger(__name__)


class DetachPolicyUseCase:
    """Detach a policy from a role. System policies stay attached."""

    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def execute(self, role_id: UUID, policy_id: UUID) -> None:
        async with self._uow_factory() as uow:
            policy = await uow.policies.get_by_id(policy_id)
            if not policy:
                raise NotFound("Policy", str(policy_id))
            if policy.is_system_policy:
                raise SystemPolicyError(f"Cannot detach system policy {policy.name}")
            if not await uow.policies.detach_from_role(role_id, policy_id):
                raise NotFound("Role policy", f"{role_id}/{policy_id}")
            logger.info("Detached policy %s from role %s", policy_id, role_id)
