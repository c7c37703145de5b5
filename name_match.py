"""
name_match.py — cheap name similarity for remake hints.

Scores (case-insensitive):
  1.0  identical
  0.9  one is the other plus a trailing number   (Bob / Bob2)
  0.8  one contains the other                     (Bob / Bobby)
  else fraction of same-position characters over the longer length

The positional ratio is not an edit distance: "Xbob" vs "bob" scores 0 on
that path (it is caught by containment instead). It is meant to rank human
review candidates, never to merge anything on its own.
"""

from __future__ import annotations

import re


def normalize_name(name: str) -> str:
    return (name or "").strip().lower()


def _has_numeric_suffix(base: str, other: str) -> bool:
    return re.fullmatch(re.escape(base) + r"\d+", other) is not None


def positional_ratio(a: str, b: str) -> float:
    longest = max(len(a), len(b))
    if longest == 0:
        return 0.0
    matches = sum(1 for x, y in zip(a, b) if x == y)
    return matches / longest


def similarity(a: str, b: str) -> float:
    n1 = normalize_name(a)
    n2 = normalize_name(b)

    if n1 == n2:
        return 1.0
    if not n1 or not n2:
        return 0.0
    if _has_numeric_suffix(n1, n2) or _has_numeric_suffix(n2, n1):
        return 0.9
    if n1 in n2 or n2 in n1:
        return 0.8
    return positional_ratio(n1, n2)
