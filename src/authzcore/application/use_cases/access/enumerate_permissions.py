"""Effective-permission enumeration use case."""

import logging
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from authzcore.application.dto.decision_dto import EffectivePermission, ScopedStatement
from authzcore.application.services.collaboration_overlay import allowed_actions
from authzcore.application.services.decision_engine import DecisionEngine
from authzcore.application.services.grant_aggregator import resolve_organization
from authzcore.domain.entities import Principal
from authzcore.domain.exceptions import ValidationError
from authzcore.domain.policy import match_any, pattern_covers, patterns_overlap
from authzcore.domain.policy.matcher import WILDCARD, has_wildcard

logger = logging.getLogger(__name__)


def permitted_actions(
    resource_scope: str,
    statements: Iterable[ScopedStatement],
    context: Mapping[str, Any],
    action_catalog: Iterable[str] = (),
) -> frozenset[str]:
    """Actions allowed on every resource inside ``resource_scope``.

    An Allow counts only when one of its resource patterns covers the whole
    scope. A Deny counts when one of its resource patterns reaches any
    resource inside the scope, so a Deny on ``resource/123`` removes its
    actions from the ``resource/*`` listing. For a concrete scope this is
    the same as evaluating each candidate action.

    Concrete candidates (the catalogue plus actions named by the counted
    statements) are kept when a counted Allow matches them and no counted
    Deny does. A wildcard Allow pattern is kept only when no counted Deny
    pattern overlaps it.
    """
    allows: list[str] = []
    denies: list[str] = []
    for scoped in statements:
        statement = scoped.statement
        if not statement.conditions_met(context):
            continue
        if statement.is_deny:
            if any(patterns_overlap(r, resource_scope) for r in statement.resources):
                denies.extend(statement.actions)
        elif any(pattern_covers(r, resource_scope) for r in statement.resources):
            allows.extend(statement.actions)
    if not allows:
        return frozenset()

    candidates = {a for a in action_catalog if a}
    candidates.update(p for p in (*allows, *denies) if not has_wildcard(p))

    result = {
        action
        for action in candidates
        if match_any(allows, action) and not (denies and match_any(denies, action))
    }
    result.update(
        pattern
        for pattern in allows
        if has_wildcard(pattern) and not any(patterns_overlap(pattern, d) for d in denies)
    )
    return frozenset(result)


class EnumeratePermissionsUseCase:
    """List what a principal may do, within a scope or across all its grants."""

    def __init__(
        self,
        unit_of_work_factory: type,
        action_catalog: Iterable[str] = (),
        content_resource_type: str = "content",
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._action_catalog = tuple(action_catalog)
        self._content_resource_type = content_resource_type

    async def execute(
        self,
        principal: Principal,
        resource_scope: str,
        context: Mapping[str, Any] | None = None,
        organization_id: str | None = None,
    ) -> frozenset[str]:
        """Allowed actions within ``resource_scope``. Store failures yield the empty set."""
        if not resource_scope:
            raise ValidationError("resource is required")
        context = context or {}
        now = datetime.now(UTC)
        organization_id = resolve_organization(principal, resource_scope, organization_id)
        try:
            async with self._uow_factory() as uow:
                engine = DecisionEngine(uow.grants, self._content_resource_type)
                role = await engine.overlay_role(principal, resource_scope, organization_id)
                if role is not None:
                    return allowed_actions(role)
                principal_grants = await engine.aggregator.collect_principal_grants(
                    principal, organization_id, now
                )
                scope_statements = await engine.aggregator.collect_scope_grants(
                    principal, resource_scope, organization_id, principal_grants.group_ids, now
                )
                statements = [*principal_grants.statements, *scope_statements]
        except Exception:
            logger.exception("Permission enumeration failed for %s on %s", principal.id, resource_scope)
            return frozenset()
        return permitted_actions(resource_scope, statements, context, self._action_catalog)

    async def effective_permissions(
        self,
        principal: Principal,
        context: Mapping[str, Any] | None = None,
        organization_id: str | None = None,
    ) -> list[EffectivePermission]:
        """Allowed actions grouped by the resource patterns of the principal's Allow statements.

        Scopes come from role policies and from the resources named by
        permissions and shares; each scope is listed with the same rules as
        ``execute``.
        """
        context = context or {}
        now = datetime.now(UTC)
        organization_id = organization_id or principal.organization_id
        try:
            async with self._uow_factory() as uow:
                engine = DecisionEngine(uow.grants, self._content_resource_type)
                principal_grants = await engine.aggregator.collect_principal_grants(
                    principal, organization_id, now
                )
                resource_statements = await engine.aggregator.collect_scope_grants(
                    principal, WILDCARD, organization_id, principal_grants.group_ids, now
                )
        except Exception:
            logger.exception("Effective permission listing failed for %s", principal.id)
            return []

        statements = [*principal_grants.statements, *resource_statements]
        scopes: dict[str, set[str]] = {}
        for scoped in statements:
            statement = scoped.statement
            if statement.is_deny or not statement.conditions_met(context):
                continue
            for resource in statement.resources:
                sources = scopes.setdefault(resource, set())
                sources.add(scoped.provenance.policy_name or str(scoped.provenance.source))

        permissions = []
        for scope, sources in scopes.items():
            if resolve_organization(principal, scope, organization_id) != organization_id:
                continue
            actions = permitted_actions(scope, statements, context, self._action_catalog)
            if actions:
                permissions.append(
                    EffectivePermission(
                        resource=scope,
                        actions=tuple(sorted(actions)),
                        sources=tuple(sorted(sources)),
                    )
                )
        return permissions
