"""Canonical text form used for every comparison in the engine."""

from __future__ import annotations

import re

__all__ = ["normalize"]

_PUNCTUATION_RE = re.compile(r"[.,!?;:'\"]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """Lower-case *text*, drop ``. , ! ? ; : ' "`` and collapse whitespace."""
    text = _PUNCTUATION_RE.sub("", text.lower())
    return _WHITESPACE_RE.sub(" ", text).strip()
