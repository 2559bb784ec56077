"""Shared text-matching utilities.

Pure functions with no domain dependencies — safe to import from any
layer (scoring, digest, CLI).
"""

from __future__ import annotations

from collections.abc import Iterable


def mutually_contains(a: str, b: str) -> bool:
    """True when either lowercased string contains the other.

    >>> mutually_contains("React", "react native")
    True
    """
    left = a.lower()
    right = b.lower()
    return left in right or right in left


def overlapping_tags(tags: Iterable[str], skills: Iterable[str]) -> list[str]:
    """Return the *tags* (lowercased, in order) matched by any of *skills*.

    A tag matches when a skill contains it or it contains the skill,
    case-insensitively.  Empty strings never match.
    """
    skill_list = [s.lower() for s in skills if s]
    return [
        tag.lower()
        for tag in tags
        if tag and any(mutually_contains(tag, skill) for skill in skill_list)
    ]
