"""Policy language: pattern matching, documents and conditions."""

from authzcore.domain.policy.conditions import (
    ConditionClause,
    ConditionOperator,
    evaluate_conditions,
    parse_condition_block,
)
from authzcore.domain.policy.document import PolicyDocument, Statement, parse_policy_document
from authzcore.domain.policy.matcher import match, match_any, pattern_covers, patterns_overlap

__all__ = [
    "ConditionClause",
    "ConditionOperator",
    "PolicyDocument",
    "Statement",
    "evaluate_conditions",
    "match",
    "match_any",
    "parse_condition_block",
    "parse_policy_document",
    "pattern_covers",
    "patterns_overlap",
]
