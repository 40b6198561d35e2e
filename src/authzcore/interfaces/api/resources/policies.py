"""Policy administration API resources."""

from uuid import UUID

import falcon.asgi

from authzcore.application.use_cases.policy import (
    AttachPolicyUseCase,
    DeletePolicyUseCase,
    DetachPolicyUseCase,
    UpdatePolicyDocumentUseCase,
    ValidatePolicyUseCase,
)
from authzcore.domain.exceptions import (
    ConfigurationError,
    NotFound,
    SystemPolicyError,
    ValidationError,
)


def _parse_uuid(value: str, name: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise ValidationError(f"Invalid {name}") from None


class PolicyValidateResource:
    """POST /v1/policies/validate - check a policy document without storing it."""

    def __init__(self, validate_policy: ValidatePolicyUseCase) -> None:
        self._validate = validate_policy

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        body = await req.get_media()
        document = body.get("document") if isinstance(body, dict) else None
        if document is None:
            resp.status = falcon.HTTP_400
            resp.media = {"error": "Missing required field: document"}
            return
        try:
            parsed = self._validate.execute(document)
        except ConfigurationError as e:
            resp.status = falcon.HTTP_400
            resp.media = {"valid": False, "error": str(e)}
            return
        resp.media = {"valid": True, "version": parsed.version, "statements": len(parsed.statements)}
        resp.status = falcon.HTTP_200


class PolicyResource:
    """DELETE /v1/policies/{policy_id}; PUT /v1/policies/{policy_id}/document."""

    def __init__(
        self,
        update_policy: UpdatePolicyDocumentUseCase,
        delete_policy: DeletePolicyUseCase,
    ) -> None:
        self._update = update_policy
        self._delete = delete_policy

    async def on_put_document(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, policy_id: str
    ) -> None:
        """Replace the policy document; the version is bumped when it changes."""
        try:
            body = await req.get_media()
            if not isinstance(body, dict) or "document" not in body:
                raise ValidationError("Missing required field: document")
            version = await self._update.execute(_parse_uuid(policy_id, "policy ID"), body["document"])
        except (ValidationError, ConfigurationError) as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": str(e)}
            return
        except NotFound as e:
            resp.status = falcon.HTTP_404
            resp.media = {"error": str(e)}
            return
        resp.media = {"id": policy_id, "version": version}
        resp.status = falcon.HTTP_200

    async def on_delete(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, policy_id: str
    ) -> None:
        try:
            await self._delete.execute(_parse_uuid(policy_id, "policy ID"))
            resp.status = falcon.HTTP_204
        except ValidationError as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": str(e)}
        except NotFound as e:
            resp.status = falcon.HTTP_404
            resp.media = {"error": str(e)}
        except SystemPolicyError as e:
            resp.status = falcon.HTTP_409
            resp.media = {"error": str(e)}


class RolePolicyResource:
    """PUT/DELETE /v1/roles/{role_id}/policies/{policy_id} - attach and detach."""

    def __init__(
        self,
        attach_policy: AttachPolicyUseCase,
        detach_policy: DetachPolicyUseCase,
    ) -> None:
        self._attach = attach_policy
        self._detach = detach_policy

    async def on_put(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        role_id: str,
        policy_id: str,
    ) -> None:
        body = await req.get_media(default_when_empty=None)
        attached_by = body.get("attached_by") if isinstance(body, dict) else None
        try:
            await self._attach.execute(
                _parse_uuid(role_id, "role ID"),
                _parse_uuid(policy_id, "policy ID"),
                attached_by,
            )
            resp.status = falcon.HTTP_204
        except (ValidationError, ConfigurationError) as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": str(e)}
        except NotFound as e:
            resp.status = falcon.HTTP_404
            resp.media = {"error": str(e)}

    async def on_delete(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        role_id: str,
        policy_id: str,
    ) -> None:
        try:
            await self._detach.execute(
                _parse_uuid(role_id, "role ID"),
                _parse_uuid(policy_id, "policy ID"),
            )
            resp.status = falcon.HTTP_204
        except ValidationError as e:
            resp.status = falcon.HTTP_400
            resp.media = {"error": str(e)}
        except NotFound as e:
            resp.status = falcon.HTTP_404
            resp.media = {"error": str(e)}
        except SystemPolicyError as e:
            resp.status = falcon.HTTP_409
            resp.media = {"error": str(e)}
