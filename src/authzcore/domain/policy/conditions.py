"""Statement condition blocks.

A condition block maps operator -> key -> expected value(s). It is parsed
into a flat tuple of ``ConditionClause`` predicates. Every clause must hold;
inside one clause a list of expected values holds when any value matches,
except for negated operators, which hold only when no value matches.
A key missing from the request context never satisfies a clause.
"""

import fnmatch
import ipaddress
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from authzcore.domain.exceptions import InvalidDocument

logger = logging.getLogger(__name__)

Scalar = str | int | float | bool


class ConditionOperator(StrEnum):
    """Supported condition operators."""

    STRING_EQUALS = "StringEquals"
    STRING_NOT_EQUALS = "StringNotEquals"
    STRING_EQUALS_IGNORE_CASE = "StringEqualsIgnoreCase"
    STRING_LIKE = "StringLike"
    STRING_NOT_LIKE = "StringNotLike"
    BOOL = "Bool"
    NUMERIC_EQUALS = "NumericEquals"
    NUMERIC_LESS_THAN = "NumericLessThan"
    NUMERIC_GREATER_THAN = "NumericGreaterThan"
    IP_ADDRESS = "IpAddress"
    NOT_IP_ADDRESS = "NotIpAddress"

    @property
    def negated(self) -> bool:
        return self in _NEGATED


_NEGATED = frozenset(
    {
        ConditionOperator.STRING_NOT_EQUALS,
        ConditionOperator.STRING_NOT_LIKE,
        ConditionOperator.NOT_IP_ADDRESS,
    }
)


@dataclass(frozen=True)
class ConditionClause:
    """One (operator, key, expected values) predicate."""

    operator: ConditionOperator
    key: str
    expected: tuple[Scalar, ...]

    def evaluate(self, context: Mapping[str, Any]) -> bool:
        """Return True when the clause holds for ``context``."""
        if self.key not in context:
            return False
        actual = context[self.key]
        if self.operator.negated:
            positive = _POSITIVE_FORM[self.operator]
            return not any(_apply(positive, e, actual) for e in self.expected)
        return any(_apply(self.operator, e, actual) for e in self.expected)

    def to_dict(self) -> dict[str, Any]:
        value: Any = self.expected[0] if len(self.expected) == 1 else list(self.expected)
        return {self.operator.value: {self.key: value}}


def parse_condition_block(raw: Any) -> tuple[ConditionClause, ...]:
    """Parse a ``Condition`` object into clauses. Raises InvalidDocument."""
    if raw is None:
        return ()
    if not isinstance(raw, Mapping):
        raise InvalidDocument("Condition must be an object of operator -> {key: value}")
    clauses: list[ConditionClause] = []
    for operator_name, requirements in raw.items():
        try:
            operator = ConditionOperator(operator_name)
        except ValueError:
            raise InvalidDocument(f"Unsupported condition operator: {operator_name}") from None
        if not isinstance(requirements, Mapping) or not requirements:
            raise InvalidDocument(f"Condition {operator_name} must map keys to values")
        for key, expected in requirements.items():
            clauses.append(
                ConditionClause(operator=operator, key=str(key), expected=_expected_values(expected))
            )
    return tuple(clauses)


def evaluate_conditions(clauses: Iterable[ConditionClause], context: Mapping[str, Any]) -> bool:
    """Return True when every clause holds. No clauses means unconditional."""
    return all(c.evaluate(context) for c in clauses)


def merge_conditions(
    base: tuple[ConditionClause, ...],
    overrides: tuple[ConditionClause, ...],
) -> tuple[ConditionClause, ...]:
    """Overlay ``overrides`` on ``base``: same (operator, key) is replaced, the rest added."""
    if not overrides:
        return base
    replaced = {(c.operator, c.key) for c in overrides}
    kept = tuple(c for c in base if (c.operator, c.key) not in replaced)
    return kept + overrides


def _expected_values(raw: Any) -> tuple[Scalar, ...]:
    values = list(raw) if isinstance(raw, list | tuple) else [raw]
    if not values:
        raise InvalidDocument("Condition value list must not be empty")
    for v in values:
        if not isinstance(v, str | int | float | bool):
            raise InvalidDocument(f"Condition values must be scalars, got {v!r}")
    return tuple(values)


def _as_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _as_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    return None


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _ip_matches(expected: Any, actual: Any) -> bool:
    try:
        address = ipaddress.ip_address(str(actual))
        if "/" in str(expected):
            return address in ipaddress.ip_network(str(expected), strict=False)
        return address == ipaddress.ip_address(str(expected))
    except ValueError:
        logger.debug("Unparseable address in IP condition: expected=%r actual=%r", expected, actual)
        return False


def _compare_numbers(expected: Any, actual: Any, op: ConditionOperator) -> bool:
    e = _as_number(expected)
    a = _as_number(actual)
    if e is None or a is None:
        return False
    if op == ConditionOperator.NUMERIC_LESS_THAN:
        return a < e
    if op == ConditionOperator.NUMERIC_GREATER_THAN:
        return a > e
    return a == e


def _apply(op: ConditionOperator, expected: Any, actual: Any) -> bool:
    match op:
        case ConditionOperator.STRING_EQUALS:
            return _as_string(expected) == _as_string(actual)
        case ConditionOperator.STRING_EQUALS_IGNORE_CASE:
            return _as_string(expected).casefold() == _as_string(actual).casefold()
        case ConditionOperator.STRING_LIKE:
            return fnmatch.fnmatchcase(_as_string(actual), _as_string(expected))
        case ConditionOperator.BOOL:
            e = _as_bool(expected)
            return e is not None and e == _as_bool(actual)
        case (
            ConditionOperator.NUMERIC_EQUALS
            | ConditionOperator.NUMERIC_LESS_THAN
            | ConditionOperator.NUMERIC_GREATER_THAN
        ):
            return _compare_numbers(expected, actual, op)
        case ConditionOperator.IP_ADDRESS:
            return _ip_matches(expected, actual)
        case _:
            raise ValueError(f"Operator {op} has no positive form")


_POSITIVE_FORM = {
    ConditionOperator.STRING_NOT_EQUALS: ConditionOperator.STRING_EQUALS,
    ConditionOperator.STRING_NOT_LIKE: ConditionOperator.STRING_LIKE,
    ConditionOperator.NOT_IP_ADDRESS: ConditionOperator.IP_ADDRESS,
}
