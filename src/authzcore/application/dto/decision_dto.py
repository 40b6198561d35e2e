"""Decision, provenance and trace DTOs."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any
from uuid import UUID

from authzcore.domain.policy import Statement
from authzcore.domain.value_objects import CollaboratorRole, Effect, GrantSource

REASON_EXPLICIT_DENY = "explicit deny"
REASON_ALLOWED = "allowed by policy"
REASON_DEFAULT_DENY = "no matching allow, default deny"
REASON_EVALUATION_ERROR = "evaluation error, default deny"


@dataclass(frozen=True)
class Provenance:
    """Where a statement came from.

    ``source`` is None only for draft documents evaluated by a dry run.
    """

    source: GrantSource | None
    statement_index: int
    policy_id: UUID | None = None
    policy_name: str | None = None
    role_id: UUID | None = None
    group_id: UUID | None = None
    grant_id: UUID | None = None
    expires_at: datetime | None = None


@dataclass(frozen=True)
class ScopedStatement:
    """Statement together with its provenance."""

    statement: Statement
    provenance: Provenance


@dataclass(frozen=True)
class Decision:
    """Outcome of one authorization check."""

    effect: Effect
    reason: str
    matched: tuple[ScopedStatement, ...] = ()
    collaborator_role: CollaboratorRole | None = None

    @property
    def allowed(self) -> bool:
        return self.effect == Effect.ALLOW

    @classmethod
    def deny(cls, reason: str = REASON_DEFAULT_DENY) -> "Decision":
        return cls(effect=Effect.DENY, reason=reason)


class TraceOutcome(StrEnum):
    """Per-statement result in a simulation trace."""

    NOT_APPLICABLE = "not applicable"
    CONDITION_NOT_MET = "condition not met"
    MATCHED = "matched"


@dataclass(frozen=True)
class StatementTrace:
    """How one considered statement fared."""

    scoped: ScopedStatement
    action_matched: bool
    resource_matched: bool
    condition_met: bool | None
    outcome: TraceOutcome


class EvaluationPath(StrEnum):
    CONTENT_OVERLAY = "content_overlay"
    POLICY = "policy"


@dataclass(frozen=True)
class SimulationResult:
    """Decision plus the full ordered trace that produced it."""

    decision: Decision
    trace: tuple[StatementTrace, ...]
    path: EvaluationPath
    organization_id: str | None
    evaluated_at: datetime


@dataclass(frozen=True)
class EffectivePermission:
    """Allowed actions on one resource pattern and the policies granting them."""

    resource: str
    actions: tuple[str, ...]
    sources: tuple[str, ...] = ()


@dataclass(frozen=True)
class DocumentTestCase:
    """Named expectation for a draft policy document."""

    name: str
    action: str
    resource: str
    expected: Effect
    context: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DocumentTestResult:
    test_case: DocumentTestCase
    decision: Decision
    passed: bool
    message: str


@dataclass(frozen=True)
class DocumentSimulationResult:
    """Dry-run report for a draft policy document."""

    valid: bool
    errors: tuple[str, ...] = ()
    results: tuple[DocumentTestResult, ...] = ()
