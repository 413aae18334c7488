"""
Path pattern parsing and matching for tsconfig ``paths`` entries.

A pattern holds at most one ``*``. ``"lib/*"`` matches ``"lib/util"`` and
captures ``"util"``; substituting that capture into ``"src/lib/*"`` yields
``"src/lib/util"``.
"""

import re
from dataclasses import dataclass

from .models import PathPattern, StaticPattern, WildcardPattern

# Greedy: a malformed pattern with several `*` splits on the last one
RE_WILDCARD = re.compile(r'^(.*)\*(.*)$', re.DOTALL)


@dataclass(frozen=True)
class PatternMatch:
    """Result of matching a candidate against a pattern."""
    is_match: bool
    capture: str = ""


NO_MATCH = PatternMatch(is_match=False)


def parse_pattern(pattern: str) -> PathPattern:
    """Parse a pattern string into a static or wildcard pattern."""
    match = RE_WILDCARD.match(pattern)
    if match:
        return WildcardPattern(prefix=match.group(1), suffix=match.group(2))
    return StaticPattern(pattern=pattern)


def match_pattern(pattern: PathPattern, candidate: str) -> PatternMatch:
    """Match ``candidate`` against ``pattern``.

    Args:
        pattern: Parsed pattern
        candidate: Concrete specifier

    Returns:
        PatternMatch with the wildcard capture (empty for static patterns)
    """
    if not pattern.is_wildcard:
        return PatternMatch(is_match=True) if candidate == pattern.pattern else NO_MATCH

    prefix, suffix = pattern.prefix, pattern.suffix
    # prefix and suffix may not overlap inside the candidate
    if len(candidate) < len(prefix) + len(suffix):
        return NO_MATCH
    if not (candidate.startswith(prefix) and candidate.endswith(suffix)):
        return NO_MATCH

    return PatternMatch(
        is_match=True,
        capture=candidate[len(prefix):len(candidate) - len(suffix)]
    )


def substitute_pattern(pattern: PathPattern, capture: str) -> str:
    """Fill ``capture`` into the wildcard of ``pattern``."""
    if pattern.is_wildcard:
        return pattern.prefix + capture + pattern.suffix
    return pattern.pattern
