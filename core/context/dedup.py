"""Keeps the tutor from anchoring on, or emitting, repeated replies."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from core.defaults import NEAR_DUPLICATE_REPLY_THRESHOLD, RECENT_REPLY_WINDOW
from core.session.state import ASSISTANT, Turn
from core.text.normalize import normalize
from core.text.similarity import similarity

__all__ = ["ReplyDeduplicator"]

logger = logging.getLogger(__name__)


class ReplyDeduplicator:
    def __init__(
        self,
        near_duplicate_threshold: float = NEAR_DUPLICATE_REPLY_THRESHOLD,
        recent_window: int = RECENT_REPLY_WINDOW,
    ) -> None:
        self.near_duplicate_threshold = near_duplicate_threshold
        self.recent_window = recent_window

    def filter_history_for_prompt(self, turns: Sequence[Turn]) -> list[Turn]:
        """Drop repeated and near-duplicate assistant turns, keep the rest in order.

        An assistant turn is dropped when its normalized content equals an
        assistant turn already kept, or when it is more than 70% similar to
        the immediately preceding kept turn if that one is also an assistant
        turn.
        """
        kept: list[Turn] = []
        seen: set[str] = set()
        for turn in turns:
            if turn.role == ASSISTANT:
                normalized = normalize(turn.content)
                if normalized in seen:
                    logger.debug("Filtering duplicate assistant turn: %r", turn.content)
                    continue
                previous = kept[-1] if kept else None
                if previous is not None and previous.role == ASSISTANT:
                    score = similarity(turn.content, previous.content)
                    if score > self.near_duplicate_threshold:
                        logger.debug("Filtering similar assistant turn (%.0f%%): %r", score * 100, turn.content)
                        continue
                seen.add(normalized)
            kept.append(turn)
        return kept

    def recent_replies(self, full_history: Sequence[Turn]) -> list[str]:
        assistant = [turn.content for turn in full_history if turn.role == ASSISTANT]
        return assistant[-self.recent_window:] if self.recent_window else []

    def is_immediate_repeat(self, full_history: Sequence[Turn], candidate_reply: str) -> bool:
        normalized = normalize(candidate_reply)
        return any(normalize(reply) == normalized for reply in self.recent_replies(full_history))
