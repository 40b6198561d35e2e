"""Update policy document use case."""

import json
import logging
from collections.abc import Mapping
from typing import Any
from uuid import UUID

from authzcore.domain.exceptions import NotFound
from authzcore.domain.policy import parse_policy_document

logger = logging.getLogger(__name__)

INITIAL_VERSION = "1.0.0"


def next_version(current: str) -> str:
    """Bump the patch component of a ``major.minor.patch`` version."""
    parts = current.split(".")
    if len(parts) != 3:
        return "1.0.1"
    numbers = []
    for part, default in zip(parts, (1, 0, 0), strict=True):
        numbers.append(int(part) if part.isdigit() else default)
    major, minor, patch = numbers
    return f"{major}.{minor}.{patch + 1}"


def _decoded(document: str | dict[str, Any]) -> Any:
    if not isinstance(document, str):
        return document
    try:
        return json.loads(document)
    except json.JSONDecodeError:
        return None


class UpdatePolicyDocumentUseCase:
    """Replace a policy's document, validating it and bumping the version."""

    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def execute(self, policy_id: UUID, document: str | Mapping[str, Any]) -> str:
        """Store the new document and return the resulting version."""
        parse_policy_document(document)
        data = json.loads(document) if isinstance(document, str) else dict(document)

        async with self._uow_factory() as uow:
            policy = await uow.policies.get_by_id(policy_id)
            if not policy:
                raise NotFound("Policy", str(policy_id))
            if _decoded(policy.document) == data:
                return policy.version

            version = next_version(policy.version or INITIAL_VERSION)
            await uow.policies.update_document(policy_id, data, version)
            logger.info("Policy %s updated to version %s", policy_id, version)
            return version
