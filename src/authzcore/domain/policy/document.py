"""Policy document model.

Wire format::

    {"Version": "2024-01-01",
     "Statement": [{"Effect": "Allow", "Action": "resource:Read",
                    "Resource": ["arn:monkeys:iam:org1:resource/*"],
                    "Condition": {"IpAddress": {"source_ip": "10.0.0.0/8"}}}]}

``Action`` and ``Resource`` accept a string or a list of strings.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from authzcore.domain.exceptions import ConfigurationError, InvalidDocument
from authzcore.domain.policy.conditions import (
    ConditionClause,
    evaluate_conditions,
    merge_conditions,
    parse_condition_block,
)
from authzcore.domain.policy.matcher import match_any, validate_patterns
from authzcore.domain.value_objects import Effect


@dataclass(frozen=True)
class Statement:
    """One Allow/Deny rule; ``index`` is its position in the source document."""

    index: int
    effect: Effect
    actions: tuple[str, ...]
    resources: tuple[str, ...]
    conditions: tuple[ConditionClause, ...] = ()
    sid: str | None = None

    @property
    def is_deny(self) -> bool:
        return self.effect == Effect.DENY

    def matches_action(self, action: str) -> bool:
        return match_any(self.actions, action)

    def matches_resource(self, resource_id: str) -> bool:
        return match_any(self.resources, resource_id)

    def conditions_met(self, context: Mapping[str, Any]) -> bool:
        return evaluate_conditions(self.conditions, context)

    def with_condition_overrides(self, overrides: tuple[ConditionClause, ...]) -> "Statement":
        if not overrides:
            return self
        return replace(self, conditions=merge_conditions(self.conditions, overrides))


@dataclass(frozen=True)
class PolicyDocument:
    """Parsed, immutable policy document."""

    version: str
    statements: tuple[Statement, ...]


def parse_policy_document(raw: str | bytes | Mapping[str, Any]) -> PolicyDocument:
    """Parse and validate a policy document. Raises InvalidDocument."""
    if isinstance(raw, str | bytes | bytearray):
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidDocument(f"Policy document is not valid JSON: {e}") from e
    else:
        data = raw
    if not isinstance(data, Mapping):
        raise InvalidDocument("Policy document must be a JSON object")

    raw_statements = data.get("Statement")
    if raw_statements is None:
        raise InvalidDocument("Policy document must have a Statement field")
    if not isinstance(raw_statements, list):
        raise InvalidDocument("Statement must be an array")

    statements = tuple(_parse_statement(i, s) for i, s in enumerate(raw_statements))
    return PolicyDocument(version=str(data.get("Version", "")), statements=statements)


def _parse_statement(index: int, raw: Any) -> Statement:
    if not isinstance(raw, Mapping):
        raise InvalidDocument(f"Statement {index} must be an object")
    if "Effect" not in raw:
        raise InvalidDocument(f"Statement {index} must have Effect field")
    effect_raw = raw["Effect"]
    if effect_raw not in (Effect.ALLOW.value, Effect.DENY.value):
        raise InvalidDocument(f"Statement {index} Effect must be Allow or Deny, got {effect_raw!r}")
    for field_name in ("Action", "Resource"):
        if field_name not in raw:
            raise InvalidDocument(f"Statement {index} must have {field_name} field")

    try:
        actions = validate_patterns(_string_or_list(raw["Action"]), "Action")
        resources = validate_patterns(_string_or_list(raw["Resource"]), "Resource")
    except ConfigurationError as e:
        raise InvalidDocument(f"Statement {index}: {e}") from e

    sid = raw.get("Sid")
    return Statement(
        index=index,
        effect=Effect(effect_raw),
        actions=actions,
        resources=resources,
        conditions=parse_condition_block(raw.get("Condition")),
        sid=str(sid) if sid is not None else None,
    )


def _string_or_list(value: Any) -> list[Any]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return value
    raise ConfigurationError(f"expected a string or a list of strings, got {value!r}")
