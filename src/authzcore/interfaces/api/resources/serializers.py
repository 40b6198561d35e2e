"""JSON shapes for decisions, traces and dry-run reports."""

from typing import Any
from uuid import UUID

from authzcore.application.dto.decision_dto import (
    Decision,
    DocumentSimulationResult,
    EffectivePermission,
    ScopedStatement,
    SimulationResult,
    StatementTrace,
)
from authzcore.domain.entities import Principal
from authzcore.domain.exceptions import ValidationError
from authzcore.domain.value_objects import PrincipalType


def _str_or_none(value: UUID | None) -> str | None:
    return str(value) if value is not None else None


def read_principal(data: Any, organization_id: str | None) -> Principal:
    """Build a Principal from ``{"id", "type", "organization_id"}``."""
    if not isinstance(data, dict):
        raise ValidationError("principal must be an object")
    principal_id = data.get("id")
    if not principal_id or not isinstance(principal_id, str):
        raise ValidationError("principal.id is required")
    try:
        principal_type = PrincipalType(data.get("type", PrincipalType.USER.value))
    except ValueError:
        raise ValidationError(f"Unknown principal type: {data.get('type')}") from None
    principal_org = data.get("organization_id") or organization_id
    if not principal_org:
        raise ValidationError("organization_id is required")
    return Principal(id=principal_id, type=principal_type, organization_id=principal_org)


def read_context(data: Any) -> dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("context must be an object")
    return data


def scoped_statement_media(scoped: ScopedStatement) -> dict[str, Any]:
    statement = scoped.statement
    provenance = scoped.provenance
    return {
        "source": provenance.source,
        "policy_id": _str_or_none(provenance.policy_id),
        "policy_name": provenance.policy_name,
        "statement_index": provenance.statement_index,
        "role_id": _str_or_none(provenance.role_id),
        "group_id": _str_or_none(provenance.group_id),
        "grant_id": _str_or_none(provenance.grant_id),
        "sid": statement.sid,
        "effect": statement.effect,
        "actions": list(statement.actions),
        "resources": list(statement.resources),
        "conditions": [c.to_dict() for c in statement.conditions],
    }


def decision_media(decision: Decision) -> dict[str, Any]:
    return {
        "allowed": decision.allowed,
        "effect": decision.effect,
        "reason": decision.reason,
        "matched": [scoped_statement_media(s) for s in decision.matched],
        "collaborator_role": decision.collaborator_role,
    }


def trace_media(entry: StatementTrace) -> dict[str, Any]:
    return {
        "statement": scoped_statement_media(entry.scoped),
        "action_matched": entry.action_matched,
        "resource_matched": entry.resource_matched,
        "condition_met": entry.condition_met,
        "outcome": entry.outcome,
    }


def simulation_media(result: SimulationResult) -> dict[str, Any]:
    return {
        "decision": decision_media(result.decision),
        "path": result.path,
        "organization_id": result.organization_id,
        "evaluated_at": result.evaluated_at.isoformat(),
        "trace": [trace_media(t) for t in result.trace],
    }


def document_simulation_media(result: DocumentSimulationResult) -> dict[str, Any]:
    return {
        "valid": result.valid,
        "errors": list(result.errors),
        "results": [
            {
                "name": r.test_case.name,
                "action": r.test_case.action,
                "resource": r.test_case.resource,
                "expected": r.test_case.expected,
                "actual": r.decision.effect,
                "passed": r.passed,
                "message": r.message,
            }
            for r in result.results
        ],
    }


def effective_permission_media(permission: EffectivePermission) -> dict[str, Any]:
    return {
        "resource": permission.resource,
        "actions": list(permission.actions),
        "sources": list(permission.sources),
    }
