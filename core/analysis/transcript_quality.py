"""Gate that flags inputs looking like transcription noise.

This is a gate, not a scorer: when :meth:`is_poor_quality` returns ``True``
the pipeline skips repetition and correction logic for the turn and answers
with a clarification request instead.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from core.analysis.lexicon import META_NOISE_WORDS, VALID_SHORT_WORDS

__all__ = ["TranscriptQualityClassifier", "is_poor_quality"]

_SHORT_LETTERS_RE = re.compile(r"[a-z]{1,2}", re.IGNORECASE)
_SHOUTED_WORD_RE = re.compile(r"[A-Z]{3,}")


class TranscriptQualityClassifier:
    def __init__(
        self,
        valid_words: Iterable[str] = VALID_SHORT_WORDS,
        noise_words: Iterable[str] = META_NOISE_WORDS,
    ) -> None:
        self.valid_words = frozenset(word.lower() for word in valid_words)
        self._patterns: list[re.Pattern[str]] = [
            re.compile(re.escape(word), re.IGNORECASE) for word in noise_words
        ]
        self._patterns.append(_SHORT_LETTERS_RE)
        self._patterns.append(_SHOUTED_WORD_RE)

    def is_poor_quality(self, text: str) -> bool:
        trimmed = text.strip()
        if trimmed.lower() in self.valid_words:
            return False
        return any(pattern.fullmatch(trimmed) for pattern in self._patterns)


_default_classifier = TranscriptQualityClassifier()


def is_poor_quality(text: str) -> bool:
    """Module-level shortcut using the default word lists."""
    return _default_classifier.is_poor_quality(text)
