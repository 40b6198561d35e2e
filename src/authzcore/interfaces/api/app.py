"""Falcon ASGI application."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import falcon.asgi
from falcon.asgi import App

from authzcore.domain.exceptions import (
    AuthzError,
    ConfigurationError,
    NotFound,
    PermissionDenied,
    SystemPolicyError,
    ValidationError,
)
from authzcore.interfaces.api.middleware.organization import OrganizationMiddleware
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

logger = logging.getLogger(__name__)

_ERROR_STATUS = (
    (ValidationError, falcon.HTTP_400),
    (ConfigurationError, falcon.HTTP_400),
    (NotFound, falcon.HTTP_404),
    (PermissionDenied, falcon.HTTP_403),
    (SystemPolicyError, falcon.HTTP_409),
)


@dataclass
class Resources:
    """Resources served by the API."""

    health: HealthResource
    check: CheckResource
    simulate: SimulateResource
    simulate_document: SimulateDocumentResource
    bulk_check: BulkCheckResource
    effective_permissions: EffectivePermissionsResource
    policy_validate: PolicyValidateResource
    policy: PolicyResource
    role_policy: RolePolicyResource


async def handle_domain_error(
    req: falcon.asgi.Request, resp: falcon.asgi.Response, ex: Exception, params: dict[str, Any]
) -> None:
    """Map domain exceptions that escaped a resource to HTTP statuses."""
    for exc_type, status in _ERROR_STATUS:
        if isinstance(ex, exc_type):
            resp.status = status
            resp.media = {"error": str(ex)}
            return
    resp.status = falcon.HTTP_500
    resp.media = {"error": "Internal server error"}


async def handle_unexpected_error(
    req: falcon.asgi.Request, resp: falcon.asgi.Response, ex: Exception, params: dict[str, Any]
) -> None:
    logger.exception("Unhandled error on %s %s", req.method, req.path, exc_info=ex)
    resp.status = falcon.HTTP_500
    resp.media = {"title": "500 Internal Server Error"}


def create_app(resources: Resources, middleware: Sequence[object] = ()) -> App:
    """Create Falcon ASGI app with routes."""
    app = falcon.asgi.App(middleware=[*middleware, OrganizationMiddleware()])
    app.add_error_handler(Exception, handle_unexpected_error)
    app.add_error_handler(AuthzError, handle_domain_error)

    app.add_route("/v1/health", resources.health)
    app.add_route("/v1/health/ready", resources.health, suffix="ready")
    app.add_route("/v1/authz/check", resources.check)
    app.add_route("/v1/authz/simulate", resources.simulate)
    app.add_route("/v1/authz/simulate-document", resources.simulate_document)
    app.add_route("/v1/authz/bulk-check", resources.bulk_check)
    app.add_route(
        "/v1/principals/{principal_type}/{principal_id}/effective-permissions",
        resources.effective_permissions,
    )
    app.add_route("/v1/policies/validate", resources.policy_validate)
    app.add_route("/v1/policies/{policy_id}", resources.policy)
    app.add_route("/v1/policies/{policy_id}/document", resources.policy, suffix="document")
    app.add_route("/v1/roles/{role_id}/policies/{policy_id}", resources.role_policy)
    return app
