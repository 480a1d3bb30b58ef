"""Classifies a new user turn as a repeat (and of which kind) or not.

Detection must run against the recent-input window as it stood *before*
this turn; the caller pushes the input onto the window afterwards.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from core.analysis.lexicon import AFFECTIONATE_MARKERS, COMMON_LEARNER_PHRASES
from core.analysis.transcript_quality import TranscriptQualityClassifier
from core.defaults import MEMORIZATION_MAX_LENGTH, PRACTICE_SIMILARITY_THRESHOLD
from core.session.state import SessionState
from core.text.normalize import normalize
from core.text.similarity import similarity

__all__ = [
    "ERROR",
    "MEMORIZATION",
    "PLAYFUL",
    "PRACTICE",
    "REPETITION_TYPES",
    "RepetitionDetector",
    "RepetitionResult",
]

logger = logging.getLogger(__name__)

ERROR = "error"
PLAYFUL = "playful"
MEMORIZATION = "memorization"
PRACTICE = "practice"

REPETITION_TYPES = frozenset({ERROR, PLAYFUL, MEMORIZATION, PRACTICE})


@dataclass(slots=True, frozen=True)
class RepetitionResult:
    is_repetition: bool
    type: str | None = None


_NOT_REPEATED = RepetitionResult(is_repetition=False)


class RepetitionDetector:
    def __init__(
        self,
        quality: TranscriptQualityClassifier | None = None,
        affectionate_markers: Iterable[str] = AFFECTIONATE_MARKERS,
        common_phrases: Iterable[str] = COMMON_LEARNER_PHRASES,
        practice_threshold: float = PRACTICE_SIMILARITY_THRESHOLD,
        memorization_max_length: int = MEMORIZATION_MAX_LENGTH,
    ) -> None:
        self.quality = quality or TranscriptQualityClassifier()
        self.affectionate_markers = tuple(affectionate_markers)
        self.common_phrases = tuple(common_phrases)
        self.practice_threshold = practice_threshold
        self.memorization_max_length = memorization_max_length

    def detect(self, state: SessionState, current_input: str) -> RepetitionResult:
        if self.quality.is_poor_quality(current_input):
            logger.debug("Skipping repetition check for poor transcript: %r", current_input)
            return _NOT_REPEATED

        pending = state.pending_correction
        if pending is not None:
            score = similarity(current_input, pending.corrected_text)
            if score > self.practice_threshold:
                logger.info(
                    "Practice detected for session=%s: %r ~ %r (%.2f)",
                    state.session_id,
                    current_input,
                    pending.corrected_text,
                    score,
                )
                return RepetitionResult(is_repetition=True, type=PRACTICE)

        last_input = state.last_input()
        if last_input is None:
            return _NOT_REPEATED

        normalized = normalize(current_input)
        if normalized != normalize(last_input):
            return _NOT_REPEATED

        return RepetitionResult(is_repetition=True, type=self._classify(normalized))

    def _classify(self, normalized: str) -> str:
        if any(marker in normalized for marker in self.affectionate_markers):
            return PLAYFUL
        if len(normalized) < self.memorization_max_length or self._is_common_phrase(normalized):
            return MEMORIZATION
        return ERROR

    def _is_common_phrase(self, normalized: str) -> bool:
        return any(phrase in normalized for phrase in self.common_phrases)
