"""Registers tutor corrections and resolves the learner's practice attempts.

Detection is pure pattern scanning over the tutor's accepted reply (see
:mod:`core.corrections.rules`). A session holds at most one pending
correction; a newer detection silently replaces the older one and nothing
expires it by time or turn count.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from core.corrections.followups import contextual_follow_up
from core.corrections.rules import (
    MEMO_CONTEXTUAL_RULES,
    MEMO_RULES,
    PRACTICE_CONTEXTUAL_RULES,
    PRACTICE_RULES,
    ContextualRule,
    CorrectionRule,
)
from core.defaults import PRACTICE_SIMILARITY_THRESHOLD, RECENT_CORRECTION_TTL_SECONDS
from core.replies.messages import PRACTICE_RETRY, localized
from core.session.state import PendingCorrection, RecentCorrection, SessionState
from core.text.similarity import similarity

__all__ = ["CorrectionTracker", "PracticeOutcome"]

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class PracticeOutcome:
    success: bool
    reply: str
    corrected_text: str
    score: float


def _first_match(
    rules: Sequence[CorrectionRule],
    contextual: Sequence[ContextualRule],
    user_input: str,
    reply: str,
) -> str | None:
    for rule in rules:
        corrected = rule.extract(reply)
        if corrected:
            return corrected
    for rule in contextual:
        if rule.applies(user_input, reply):
            return rule.corrected_text
    return None


class CorrectionTracker:
    def __init__(
        self,
        rules: Sequence[CorrectionRule] = PRACTICE_RULES,
        contextual_rules: Sequence[ContextualRule] = PRACTICE_CONTEXTUAL_RULES,
        memo_rules: Sequence[CorrectionRule] = MEMO_RULES,
        memo_contextual_rules: Sequence[ContextualRule] = MEMO_CONTEXTUAL_RULES,
        practice_threshold: float = PRACTICE_SIMILARITY_THRESHOLD,
        memo_ttl_seconds: float = RECENT_CORRECTION_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.rules = tuple(rules)
        self.contextual_rules = tuple(contextual_rules)
        self.memo_rules = tuple(memo_rules)
        self.memo_contextual_rules = tuple(memo_contextual_rules)
        self.practice_threshold = practice_threshold
        self.memo_ttl_seconds = memo_ttl_seconds
        self._clock = clock

    # ------------------------------------------------------------------
    # Pending correction (practice)
    # ------------------------------------------------------------------

    def extract_correction(self, user_input: str, tutor_reply: str) -> str | None:
        """Return the corrected form offered in *tutor_reply*, if any."""
        return _first_match(self.rules, self.contextual_rules, user_input, tutor_reply)

    def detect_and_register(
        self,
        state: SessionState,
        user_input: str,
        tutor_reply: str,
    ) -> PendingCorrection | None:
        corrected = self.extract_correction(user_input, tutor_reply)
        if corrected is None:
            return None
        pending = PendingCorrection(original_text=user_input, corrected_text=corrected)
        if state.pending_correction is not None:
            logger.debug(
                "Replacing pending correction %r for session=%s",
                state.pending_correction.corrected_text,
                state.session_id,
            )
        state.pending_correction = pending
        logger.info(
            "Correction registered for session=%s: %r -> %r",
            state.session_id,
            user_input,
            corrected,
        )
        return pending

    def resolve_practice(
        self,
        state: SessionState,
        user_input: str,
        language: str | None = None,
    ) -> PracticeOutcome | None:
        """Check a practice attempt against the pending correction.

        On success the pending correction is cleared and a topic follow-up is
        returned; on failure it is kept and the learner is asked to repeat
        the same corrected text.
        """
        pending = state.pending_correction
        if pending is None:
            return None
        language = language or state.language
        score = similarity(user_input, pending.corrected_text)
        if score > self.practice_threshold:
            state.pending_correction = None
            logger.info("Practice succeeded for session=%s: %r", state.session_id, pending.corrected_text)
            return PracticeOutcome(
                success=True,
                reply=contextual_follow_up(pending.corrected_text, language),
                corrected_text=pending.corrected_text,
                score=score,
            )

        logger.info(
            "Practice needs another try for session=%s: said %r, expected %r",
            state.session_id,
            user_input,
            pending.corrected_text,
        )
        return PracticeOutcome(
            success=False,
            reply=localized(PRACTICE_RETRY, language).format(corrected=pending.corrected_text),
            corrected_text=pending.corrected_text,
            score=score,
        )

    # ------------------------------------------------------------------
    # Recent-correction memo (prompt context)
    # ------------------------------------------------------------------

    def note_correction(self, state: SessionState, user_input: str, tutor_reply: str) -> RecentCorrection | None:
        """Count how often the tutor corrects the same word in a row."""
        word = _first_match(self.memo_rules, self.memo_contextual_rules, user_input, tutor_reply)
        if word is None:
            return None

        expires_at = self._clock() + self.memo_ttl_seconds
        memo = state.recent_correction
        if memo is not None and memo.word == word and memo.expires_at > self._clock():
            memo.count += 1
            memo.last_reply = tutor_reply
            memo.expires_at = expires_at
            logger.debug("Repeated correction for %r, count=%d", word, memo.count)
        else:
            memo = RecentCorrection(word=word, count=1, last_reply=tutor_reply, expires_at=expires_at)
            state.recent_correction = memo
        return memo

    def check_recent(
        self,
        state: SessionState,
        user_input: str,
        *,
        prune: bool = False,
    ) -> RecentCorrection | None:
        """Return the memo while the learner keeps using the corrected word.

        With *prune* an expired memo, or one the learner moved on from, is
        dropped from the session.
        """
        memo = state.recent_correction
        if memo is None:
            return None
        if memo.expires_at > self._clock() and memo.word.lower() in user_input.lower().split():
            return memo
        if prune:
            state.recent_correction = None
        return None

    def prompt_context(self, state: SessionState, user_input: str) -> str | None:
        """Describe outstanding corrections for the generation prompt."""
        lines: list[str] = []
        memo = self.check_recent(state, user_input)
        if memo is not None:
            lines.append(
                f'You already corrected "{memo.word}" {memo.count} time(s). '
                "Do not repeat the same correction word for word; try a new explanation or move on."
            )
        pending = state.pending_correction
        if pending is not None:
            lines.append(
                f'The learner has not yet practiced your correction "{pending.corrected_text}" '
                f'(they originally said "{pending.original_text}").'
            )
        return "\n".join(lines) if lines else None

    def clear(self, state: SessionState) -> None:
        state.pending_correction = None
        state.recent_correction = None
