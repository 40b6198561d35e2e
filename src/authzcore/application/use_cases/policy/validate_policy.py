"""Validate policy use case."""

from collections.abc import Mapping
from typing import Any

from authzcore.domain.policy import PolicyDocument, parse_policy_document


class ValidatePolicyUseCase:
    """Parse and validate a policy document before it is stored or attached."""

    def execute(self, raw: str | bytes | Mapping[str, Any]) -> PolicyDocument:
        """Return the parsed document. Raises InvalidDocument."""
        return parse_policy_document(raw)
