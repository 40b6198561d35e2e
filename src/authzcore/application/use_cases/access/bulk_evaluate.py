"""Bulk evaluation use case."""

import logging
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from authzcore.application.dto.decision_dto import (
    REASON_EVALUATION_ERROR,
    Decision,
    ScopedStatement,
)
from authzcore.application.services import collaboration_overlay
from authzcore.application.services.decision_engine import DecisionEngine, decide
from authzcore.application.services.grant_aggregator import PrincipalGrants, resolve_organization
from authzcore.application.use_cases.access._request import require_action_and_resource
from authzcore.domain.entities import Principal
from authzcore.domain.value_objects import CollaboratorRole

logger = logging.getLogger(__name__)


class BulkEvaluateUseCase:
    """Evaluate many (action, resource) pairs for one principal.

    Principal grants are read once per organization and resource grants once
    per resource; each pair sees only its own resource's grants, so results
    equal one evaluation per pair.
    """

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
        pairs: Sequence[tuple[str, str]],
        context: Mapping[str, Any] | None = None,
        organization_id: str | None = None,
    ) -> list[Decision]:
        """Decisions in the order of ``pairs``."""
        for action, resource_id in pairs:
            require_action_and_resource(action, resource_id)
        if not pairs:
            return []
        context = context or {}
        now = datetime.now(UTC)
        try:
            async with self._uow_factory() as uow:
                engine = DecisionEngine(uow.grants, self._content_resource_type)
                principal_grants: dict[str, PrincipalGrants] = {}
                resource_grants: dict[tuple[str, str], list[ScopedStatement]] = {}
                roles: dict[tuple[str, str], CollaboratorRole | None] = {}
                decisions = []
                for action, resource_id in pairs:
                    org = resolve_organization(principal, resource_id, organization_id)

                    resource_key = (org, resource_id)
                    if resource_key not in roles:
                        roles[resource_key] = await engine.overlay_role(principal, resource_id, org)
                    role = roles[resource_key]
                    if role is not None:
                        decisions.append(collaboration_overlay.decide(role, action))
                        continue

                    if org not in principal_grants:
                        principal_grants[org] = await engine.aggregator.collect_principal_grants(
                            principal, org, now
                        )
                    grants = principal_grants[org]
                    if resource_key not in resource_grants:
                        resource_grants[resource_key] = await engine.aggregator.collect_resource_grants(
                            principal, resource_id, org, grants.group_ids, now
                        )
                    statements = [*grants.statements, *resource_grants[resource_key]]
                    decision, _ = decide(action, resource_id, statements, context)
                    decisions.append(decision)
        except Exception:
            logger.exception("Bulk evaluation failed for %s (%d pairs)", principal.id, len(pairs))
            return [Decision.deny(REASON_EVALUATION_ERROR) for _ in pairs]
        return decisions
