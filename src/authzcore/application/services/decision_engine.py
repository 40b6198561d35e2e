"""Decision engine: deny overrides allow, default deny."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from authzcore.application.dto.decision_dto import (
    REASON_ALLOWED,
    REASON_DEFAULT_DENY,
    REASON_EXPLICIT_DENY,
    Decision,
    EvaluationPath,
    ScopedStatement,
    StatementTrace,
    TraceOutcome,
)
from authzcore.application.ports import GrantStoreReader
from authzcore.application.services import collaboration_overlay
from authzcore.application.services.collaboration_overlay import CollaborationOverlay
from authzcore.application.services.grant_aggregator import (
    GrantAggregator,
    resolve_organization,
    try_parse_arn,
)
from authzcore.domain.entities import Principal
from authzcore.domain.value_objects import CollaboratorRole, Effect, PrincipalType

logger = logging.getLogger(__name__)


def decide(
    action: str,
    resource_id: str,
    statements: Iterable[ScopedStatement],
    context: Mapping[str, Any],
) -> tuple[Decision, tuple[StatementTrace, ...]]:
    """Combine statements into one decision and a trace of every statement considered."""
    trace: list[StatementTrace] = []
    allows: list[ScopedStatement] = []
    denies: list[ScopedStatement] = []
    for scoped in statements:
        statement = scoped.statement
        action_matched = statement.matches_action(action)
        resource_matched = statement.matches_resource(resource_id)
        if not (action_matched and resource_matched):
            trace.append(
                StatementTrace(scoped, action_matched, resource_matched, None, TraceOutcome.NOT_APPLICABLE)
            )
            continue
        if not statement.conditions_met(context):
            trace.append(StatementTrace(scoped, True, True, False, TraceOutcome.CONDITION_NOT_MET))
            continue
        trace.append(StatementTrace(scoped, True, True, True, TraceOutcome.MATCHED))
        (denies if statement.is_deny else allows).append(scoped)

    if denies:
        decision = Decision(effect=Effect.DENY, reason=REASON_EXPLICIT_DENY, matched=tuple(denies))
    elif allows:
        decision = Decision(effect=Effect.ALLOW, reason=REASON_ALLOWED, matched=tuple(allows))
    else:
        decision = Decision.deny(REASON_DEFAULT_DENY)
    return decision, tuple(trace)


@dataclass(frozen=True)
class Explanation:
    decision: Decision
    trace: tuple[StatementTrace, ...]
    path: EvaluationPath
    organization_id: str


class DecisionEngine:
    """Evaluates one (principal, action, resource) request against a grant store."""

    def __init__(self, store: GrantStoreReader, content_resource_type: str = "content") -> None:
        self.aggregator = GrantAggregator(store)
        self.overlay = CollaborationOverlay(store)
        self._content_resource_type = content_resource_type

    def content_id(self, resource_id: str) -> str | None:
        """Content item id when the resource is a content resource."""
        arn = try_parse_arn(resource_id)
        if arn is None or arn.resource_type != self._content_resource_type:
            return None
        return arn.resource_id

    async def overlay_role(
        self,
        principal: Principal,
        resource_id: str,
        organization_id: str,
    ) -> CollaboratorRole | None:
        """Collaborator role on a content resource, or None when the overlay does not apply."""
        content_id = self.content_id(resource_id)
        if content_id is None or principal.type != PrincipalType.USER:
            return None
        if principal.organization_id != organization_id:
            return None
        return await self.overlay.resolve_role(content_id, principal.id)

    async def explain(
        self,
        principal: Principal,
        action: str,
        resource_id: str,
        context: Mapping[str, Any] | None = None,
        organization_id: str | None = None,
        now: datetime | None = None,
    ) -> Explanation:
        """Decision plus the trace that produced it."""
        now = now or datetime.now(UTC)
        organization_id = resolve_organization(principal, resource_id, organization_id)
        role = await self.overlay_role(principal, resource_id, organization_id)
        if role is not None:
            decision = collaboration_overlay.decide(role, action)
            return Explanation(decision, (), EvaluationPath.CONTENT_OVERLAY, organization_id)

        statements = await self.aggregator.collect(principal, resource_id, organization_id, now)
        decision, trace = decide(action, resource_id, statements, context or {})
        logger.debug(
            "%s %s on %s: %s (%s)",
            principal.id,
            action,
            resource_id,
            decision.effect,
            decision.reason,
        )
        return Explanation(decision, trace, EvaluationPath.POLICY, organization_id)

    async def evaluate(
        self,
        principal: Principal,
        action: str,
        resource_id: str,
        context: Mapping[str, Any] | None = None,
        organization_id: str | None = None,
        now: datetime | None = None,
    ) -> Decision:
        explanation = await self.explain(principal, action, resource_id, context, organization_id, now)
        return explanation.decision
