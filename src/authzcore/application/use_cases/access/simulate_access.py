"""Simulation use cases: traced evaluation and draft-document dry runs."""

import logging
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from authzcore.application.dto.decision_dto import (
    DocumentSimulationResult,
    DocumentTestCase,
    DocumentTestResult,
    Provenance,
    ScopedStatement,
    SimulationResult,
)
from authzcore.application.services.decision_engine import DecisionEngine, decide
from authzcore.application.use_cases.access._request import require_action_and_resource
from authzcore.domain.entities import Principal
from authzcore.domain.exceptions import ConfigurationError
from authzcore.domain.policy import parse_policy_document

logger = logging.getLogger(__name__)

DRAFT_POLICY_NAME = "draft"


class SimulateAccessUseCase:
    """Evaluate a request and report every statement considered."""

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
    ) -> SimulationResult:
        require_action_and_resource(action, resource_id)
        now = datetime.now(UTC)
        async with self._uow_factory() as uow:
            engine = DecisionEngine(uow.grants, self._content_resource_type)
            explanation = await engine.explain(
                principal, action, resource_id, context, organization_id, now
            )
        return SimulationResult(
            decision=explanation.decision,
            trace=explanation.trace,
            path=explanation.path,
            organization_id=explanation.organization_id,
            evaluated_at=now,
        )


class SimulateDocumentUseCase:
    """Dry-run a draft policy document against named test cases."""

    async def execute(
        self,
        raw_document: str | bytes | Mapping[str, Any],
        test_cases: Sequence[DocumentTestCase] = (),
    ) -> DocumentSimulationResult:
        try:
            document = parse_policy_document(raw_document)
        except ConfigurationError as e:
            return DocumentSimulationResult(valid=False, errors=(str(e),))

        statements = [
            ScopedStatement(
                statement=s,
                provenance=Provenance(
                    source=None, statement_index=s.index, policy_name=DRAFT_POLICY_NAME
                ),
            )
            for s in document.statements
        ]
        results = []
        for case in test_cases:
            decision, _ = decide(case.action, case.resource, statements, case.context)
            passed = decision.effect == case.expected
            if passed:
                message = f"expected {case.expected}, got {decision.effect}"
            else:
                message = f"expected {case.expected}, got {decision.effect} ({decision.reason})"
            results.append(
                DocumentTestResult(test_case=case, decision=decision, passed=passed, message=message)
            )
        logger.debug(
            "Dry run: %d/%d cases passed", sum(r.passed for r in results), len(results)
        )
        return DocumentSimulationResult(valid=True, results=tuple(results))
