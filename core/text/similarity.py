"""Shared fuzzy-match utilities for the tutoring engine.

Single-source ``similarity`` used by repetition detection, practice
resolution and reply de-duplication. **No third-party dependencies.**
"""

from __future__ import annotations

from core.text.normalize import normalize

__all__ = ["levenshtein_distance", "similarity"]


def levenshtein_distance(a: str, b: str) -> int:
    """Return the unit-cost edit distance between *a* and *b*."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + cost,
                )
            )
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """Return ``1 - distance / max_len`` over the normalized forms, in [0, 1].

    Identical normalized strings (including two empty ones) score 1.0.
    """
    norm_a = normalize(a)
    norm_b = normalize(b)
    if norm_a == norm_b:
        return 1.0
    max_len = max(len(norm_a), len(norm_b))
    if max_len == 0:
        return 1.0
    return 1.0 - levenshtein_distance(norm_a, norm_b) / max_len
