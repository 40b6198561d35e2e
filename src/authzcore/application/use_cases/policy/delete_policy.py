"""Delete policy use case."""

import logging
from uuid import UUID

from authzcore.domain.exceptions import NotFound, SystemPolicyError

logger = logging.getLogger(__name__)


class DeletePolicyUseCase:
    """Delete a policy. System policies cannot be deleted."""

    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def execute(self, policy_id: UUID) -> None:
        async with self._uow_factory() as uow:
            policy = await uow.policies.get_by_id(policy_id)
            if not policy:
                raise NotFound("Policy", str(policy_id))
            if policy.is_system_policy:
                raise SystemPolicyError(f"Cannot delete system policy {policy.name}")
            await uow.policies.delete(policy_id)
            logger.info("Deleted policy %s (%s)", policy_id, policy.name)
