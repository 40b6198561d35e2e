"""Evaluate access use case - the per-request authorization hook."""

import logging
from collections.abc import Mapping
from typing import Any

from authzcore.application.dto.decision_dto import REASON_EVALUATION_ERROR, Decision
from authzcore.application.services.decision_engine import DecisionEngine
from authzcore.application.use_cases.access._request import require_action_and_resource
from authzcore.domain.entities import Principal

logger = logging.getLogger(__name__)


class EvaluateAccessUseCase:
    """Decide whether a principal may perform an action on a resource."""

    def __init__(
        self,
        unit_of_work_factory: type,
        content_resource_type: str = "content",
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._content_resource_type = content_resource_type

    async def execute(
        self,
        principal: Principal,
        action: str,
        resource_id: str,
        context: Mapping[str, Any] | None = None,
        organization_id: str | None = None,
    ) -> Decision:
        """Evaluate one request. Store failures degrade to Deny."""
        require_action_and_resource(action, resource_id)
        try:
            async with self._uow_factory() as uow:
                engine = DecisionEngine(uow.grants, self._content_resource_type)
                return await engine.evaluate(
                    principal, action, resource_id, context, organization_id
                )
        except Exception:
            logger.exception(
                "Access evaluation failed for %s %s on %s", principal.id, action, resource_id
            )
            return Decision.deny(REASON_EVALUATION_ERROR)
