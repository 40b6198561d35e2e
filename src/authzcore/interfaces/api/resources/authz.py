"""Authorization API resources."""

from typing import Any

import falcon.asgi

from authzcore.application.dto.decision_dto import DocumentTestCase
from authzcore.application.use_cases.access import (
    BulkEvaluateUseCase,
    EnumeratePermissionsUseCase,
    EvaluateAccessUseCase,
    SimulateAccessUseCase,
    SimulateDocumentUseCase,
)
from authzcore.domain.entities import Principal
from authzcore.domain.exceptions import ConfigurationError, ValidationError
from authzcore.domain.value_objects import Effect, PrincipalType
from authzcore.interfaces.api.resources.serializers import (
    decision_media,
    document_simulation_media,
    effective_permission_media,
    read_context,
    read_principal,
    simulation_media,
)


async def _read_body(req: falcon.asgi.Request) -> dict[str, Any]:
    body = await req.get_media()
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def _organization(req: falcon.asgi.Request, body: dict[str, Any] | None = None) -> str | None:
    if body and body.get("organization_id"):
        return str(body["organization_id"])
    return getattr(req.context, "organization_id", None)


def _required_string(body: dict[str, Any], field: str) -> str:
    value = body.get(field)
    if not value or not isinstance(value, str):
        raise ValidationError(f"Missing required field: {field}")
    return value


def _bad_request(resp: falcon.asgi.Response, error: Exception) -> None:
    resp.status = falcon.HTTP_400
    resp.media = {"error": str(error)}


class CheckResource:
    """POST /v1/authz/check - evaluate one request."""

    def __init__(self, evaluate_access: EvaluateAccessUseCase) -> None:
        self._evaluate = evaluate_access

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        try:
            body = await _read_body(req)
            organization_id = _organization(req, body)
            principal = read_principal(body.get("principal"), organization_id)
            decision = await self._evaluate.execute(
                principal,
                _required_string(body, "action"),
                _required_string(body, "resource"),
                read_context(body.get("context")),
                organization_id,
            )
        except (ValidationError, ConfigurationError) as e:
            _bad_request(resp, e)
            return
        resp.media = decision_media(decision)
        resp.status = falcon.HTTP_200


class SimulateResource:
    """POST /v1/authz/simulate - evaluate with a full statement trace."""

    def __init__(self, simulate_access: SimulateAccessUseCase) -> None:
        self._simulate = simulate_access

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        try:
            body = await _read_body(req)
            organization_id = _organization(req, body)
            principal = read_principal(body.get("principal"), organization_id)
            result = await self._simulate.execute(
                principal,
                _required_string(body, "action"),
                _required_string(body, "resource"),
                read_context(body.get("context")),
                organization_id,
            )
        except (ValidationError, ConfigurationError) as e:
            _bad_request(resp, e)
            return
        resp.media = simulation_media(result)
        resp.status = falcon.HTTP_200


def _read_test_case(index: int, raw: Any) -> DocumentTestCase:
    if not isinstance(raw, dict):
        raise ValidationError(f"test_cases[{index}] must be an object")
    expected = str(raw.get("expected", "")).lower()
    if expected not in ("allow", "deny"):
        raise ValidationError(f"test_cases[{index}].expected must be allow or deny")
    return DocumentTestCase(
        name=str(raw.get("name") or f"case {index + 1}"),
        action=_required_string(raw, "action"),
        resource=_required_string(raw, "resource"),
        expected=Effect.ALLOW if expected == "allow" else Effect.DENY,
        context=read_context(raw.get("context")),
    )


class SimulateDocumentResource:
    """POST /v1/authz/simulate-document - dry-run a draft policy document."""

    def __init__(self, simulate_document: SimulateDocumentUseCase) -> None:
        self._simulate = simulate_document

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        try:
            body = await _read_body(req)
            if "document" not in body:
                raise ValidationError("Missing required field: document")
            raw_cases = body.get("test_cases") or []
            if not isinstance(raw_cases, list):
                raise ValidationError("test_cases must be an array")
            test_cases = [_read_test_case(i, c) for i, c in enumerate(raw_cases)]
        except ValidationError as e:
            _bad_request(resp, e)
            return
        result = await self._simulate.execute(body["document"], test_cases)
        resp.media = document_simulation_media(result)
        resp.status = falcon.HTTP_200


class BulkCheckResource:
    """POST /v1/authz/bulk-check - evaluate many (action, resource) pairs."""

    def __init__(self, bulk_evaluate: BulkEvaluateUseCase, max_items: int = 1000) -> None:
        self._bulk = bulk_evaluate
        self._max_items = max_items

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        try:
            body = await _read_body(req)
            organization_id = _organization(req, body)
            principal = read_principal(body.get("principal"), organization_id)
            checks = body.get("checks")
            if not isinstance(checks, list):
                raise ValidationError("checks must be an array")
            if len(checks) > self._max_items:
                raise ValidationError(f"At most {self._max_items} checks per request")
            pairs = []
            for check in checks:
                if not isinstance(check, dict):
                    raise ValidationError("Each check must be an object")
                pairs.append((_required_string(check, "action"), _required_string(check, "resource")))
            decisions = await self._bulk.execute(
                principal, pairs, read_context(body.get("context")), organization_id
            )
        except (ValidationError, ConfigurationError) as e:
            _bad_request(resp, e)
            return
        resp.media = {
            "results": [
                {"action": action, "resource": resource, **decision_media(decision)}
                for (action, resource), decision in zip(pairs, decisions, strict=True)
            ]
        }
        resp.status = falcon.HTTP_200


class EffectivePermissionsResource:
    """GET /v1/principals/{principal_type}/{principal_id}/effective-permissions."""

    def __init__(self, enumerate_permissions: EnumeratePermissionsUseCase) -> None:
        self._enumerate = enumerate_permissions

    async def on_get(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        principal_type: str,
        principal_id: str,
    ) -> None:
        """List allowed actions, within ``?resource=`` or grouped by resource pattern."""
        organization_id = req.get_param("organization_id") or _organization(req)
        if not organization_id:
            _bad_request(resp, ValidationError("organization_id is required"))
            return
        try:
            principal = Principal(
                id=principal_id,
                type=PrincipalType(principal_type),
                organization_id=organization_id,
            )
        except ValueError:
            _bad_request(resp, ValidationError(f"Unknown principal type: {principal_type}"))
            return

        resource = req.get_param("resource")
        if resource:
            actions = await self._enumerate.execute(principal, resource, None, organization_id)
            resp.media = {"resource": resource, "actions": sorted(actions)}
        else:
            permissions = await self._enumerate.effective_permissions(
                principal, None, organization_id
            )
            resp.media = {"items": [effective_permission_media(p) for p in permissions]}
        resp.status = falcon.HTTP_200
