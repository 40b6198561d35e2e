"""Fixtures for API tests."""

import pytest
from falcon.testing import TestClient

from authzcore.application.use_cases.access import (
    BulkEvaluateUseCase,
    EnumeratePermissionsUseCase,
    EvaluateAccessUseCase,
    SimulateAccessUseCase,
    SimulateDocumentUseCase,
)
from authzcore.application.use_cases.policy import (
    AttachPolicyUseCase,
    DeletePolicyUseCase,
    DetachPolicyUseCase,
    UpdatePolicyDocumentUseCase,
    ValidatePolicyUseCase,
)
from authzcore.interfaces.api.app import Resources, create_app
from authzcore.interfaces.api.resources.authz import (
    BulkCheckResource,
    CheckResource,
    EffectivePermissionsResource,
    SimulateDocumentResource,
    SimulateResource,
)
from authzcore.interfaces.api.resources.health import HealthResource
from authzcore.interfaces.api.resources.policies import (
    PolicyResource,
    PolicyValidateResource,
    RolePolicyResource,
)

CATALOG = ("resource:Read", "resource:Write", "resource:Delete")


@pytest.fixture
def app(uow_factory):
    """Falcon ASGI app wired to the in-memory grant store."""
    resources = Resources(
        health=HealthResource(),
        check=CheckResource(EvaluateAccessUseCase(uow_factory)),
        simulate=SimulateResource(SimulateAccessUseCase(uow_factory)),
        simulate_document=SimulateDocumentResource(SimulateDocumentUseCase()),
        bulk_check=BulkCheckResource(BulkEvaluateUseCase(uow_factory), max_items=5),
        effective_permissions=EffectivePermissionsResource(
            EnumeratePermissionsUseCase(uow_factory, action_catalog=CATALOG)
        ),
        policy_validate=PolicyValidateResource(ValidatePolicyUseCase()),
        policy=PolicyResource(
            UpdatePolicyDocumentUseCase(uow_factory),
            DeletePolicyUseCase(uow_factory),
        ),
        role_policy=RolePolicyResource(
            AttachPolicyUseCase(uow_factory),
            DetachPolicyUseCase(uow_factory),
        ),
    )
    return create_app(resources)


@pytest.fixture
def client(app) -> TestClient:
    """Falcon ASGI test client."""
    return TestClient(app)
