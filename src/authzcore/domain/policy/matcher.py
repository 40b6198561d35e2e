"""Wildcard matching for action and resource patterns.

Patterns are matched case-sensitively against whole identifiers. ``*``
matches any run of characters inside one segment, where segments are
separated by ``:`` and ``/``; ``?`` matches one character inside a segment.
A ``*`` at the very end of a pattern may span the remaining segments, and a
bare ``*`` matches everything.

Example
-------
>>> match("resource:*", "resource:Read")
True
>>> match("arn:monkeys:iam:org1:resource/*", "arn:monkeys:iam:org2:resource/7")
False
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from functools import cache, lru_cache

from authzcore.domain.exceptions import ConfigurationError

WILDCARD = "*"
SEPARATORS = frozenset(":/")

_LITERAL = "lit"
_SEGMENT_STAR = "seg"
_ANY_STAR = "any"
_ONE = "one"


def match(pattern: str, candidate: str) -> bool:
    """Return True when ``candidate`` is matched by ``pattern``."""
    if not pattern:
        raise ConfigurationError("Pattern must not be empty")
    if pattern == WILDCARD:
        return True
    return _compile(pattern).fullmatch(candidate) is not None


def match_any(patterns: Iterable[str], candidate: str) -> bool:
    """Return True when any pattern matches. An empty pattern set is an error."""
    patterns = tuple(patterns)
    if not patterns:
        raise ConfigurationError("Pattern set must not be empty")
    return any(match(p, candidate) for p in patterns)


def validate_patterns(patterns: Iterable[str], field_name: str = "pattern") -> tuple[str, ...]:
    """Check a pattern set and return it as a tuple."""
    result = tuple(patterns)
    if not result:
        raise ConfigurationError(f"{field_name} set must not be empty")
    for p in result:
        if not isinstance(p, str) or not p:
            raise ConfigurationError(f"{field_name} must be a non-empty string, got {p!r}")
    return result


def has_wildcard(pattern: str) -> bool:
    return "*" in pattern or "?" in pattern


def patterns_overlap(a: str, b: str) -> bool:
    """Return True when some identifier is matched by both patterns."""
    if not a or not b:
        raise ConfigurationError("Pattern must not be empty")
    ta = _tokens(a)
    tb = _tokens(b)

    @cache
    def overlap(i: int, j: int) -> bool:
        if i == len(ta) and j == len(tb):
            return True
        a_tok = ta[i] if i < len(ta) else None
        b_tok = tb[j] if j < len(tb) else None

        if a_tok is not None and a_tok[0] in (_SEGMENT_STAR, _ANY_STAR):
            if overlap(i + 1, j):
                return True
            return b_tok is not None and _star_absorbs(a_tok, b_tok) and overlap(i, j + 1)
        if b_tok is not None and b_tok[0] in (_SEGMENT_STAR, _ANY_STAR):
            if overlap(i, j + 1):
                return True
            return a_tok is not None and _star_absorbs(b_tok, a_tok) and overlap(i + 1, j)
        if a_tok is None or b_tok is None:
            return False
        return _single_compatible(a_tok, b_tok) and overlap(i + 1, j + 1)

    return overlap(0, 0)


def pattern_covers(general: str, specific: str) -> bool:
    """Return True when every identifier matched by ``specific`` is matched by ``general``.

    The check is conservative: it may answer False for exotic pattern pairs
    whose containment only holds by coincidence, but never answers True
    when some identifier escapes ``general``.
    """
    if not general or not specific:
        raise ConfigurationError("Pattern must not be empty")
    if not has_wildcard(specific):
        return match(general, specific)
    tg = _tokens(general)
    ts = _tokens(specific)

    @cache
    def covers(i: int, j: int) -> bool:
        if j == len(ts):
            return all(kind in (_SEGMENT_STAR, _ANY_STAR) for kind, _ in tg[i:])
        if i == len(tg):
            return False
        g_kind, g_char = tg[i]
        s_kind, s_char = ts[j]
        if g_kind == _ANY_STAR:
            return True
        if g_kind == _SEGMENT_STAR:
            if covers(i + 1, j):
                return True
            # the star swallows one more specific token, which must stay inside the segment
            stays = s_kind in (_SEGMENT_STAR, _ONE) or (
                s_kind == _LITERAL and s_char not in SEPARATORS
            )
            return stays and covers(i, j + 1)
        if s_kind in (_SEGMENT_STAR, _ANY_STAR):
            return False
        if g_kind == _ONE:
            if s_kind == _LITERAL and s_char in SEPARATORS:
                return False
            return covers(i + 1, j + 1)
        return s_kind == _LITERAL and s_char == g_char and covers(i + 1, j + 1)

    return covers(0, 0)


@lru_cache(maxsize=4096)
def _compile(pattern: str) -> re.Pattern[str]:
    parts: list[str] = []
    for kind, char in _tokens(pattern):
        if kind == _LITERAL:
            parts.append(re.escape(char))
        elif kind == _ONE:
            parts.append("[^:/]")
        elif kind == _SEGMENT_STAR:
            parts.append("[^:/]*")
        else:
            parts.append(".*")
    return re.compile("".join(parts))


@lru_cache(maxsize=4096)
def _tokens(pattern: str) -> tuple[tuple[str, str], ...]:
    if pattern == WILDCARD:
        return ((_ANY_STAR, ""),)
    last = len(pattern) - 1
    tokens: list[tuple[str, str]] = []
    for i, char in enumerate(pattern):
        if char == "*":
            tokens.append((_ANY_STAR if i == last else _SEGMENT_STAR, ""))
        elif char == "?":
            tokens.append((_ONE, ""))
        else:
            tokens.append((_LITERAL, char))
    return tuple(tokens)


def _star_absorbs(star: tuple[str, str], other: tuple[str, str]) -> bool:
    # Another star can always be satisfied by the empty string.
    if other[0] in (_SEGMENT_STAR, _ANY_STAR, _ONE):
        return True
    return star[0] == _ANY_STAR or other[1] not in SEPARATORS


def _single_compatible(a: tuple[str, str], b: tuple[str, str]) -> bool:
    if a[0] == _LITERAL and b[0] == _LITERAL:
        return a[1] == b[1]
    if a[0] == _LITERAL:
        return a[1] not in SEPARATORS
    if b[0] == _LITERAL:
        return b[1] not in SEPARATORS
    return True
