"""Bounded conversation memory with summarization overflow.

Keeps the most recent *N* turns of a session verbatim so that reply
generation always sees recent context without the unbounded full history.
Turns that fall out of the window are folded into an accumulating summary
produced by a summarization collaborator (an LLM call).

Usage::

    memory = ConversationMemory(summarizer, window_size=30)
    await memory.update(state, full_history)
    turns = memory.read_for_generation(state)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from typing import Protocol

from config import REPLY_TIMEOUT_SECONDS
from core.defaults import MEMORY_WINDOW_TURNS, SUMMARY_SEPARATOR
from core.session.state import ASSISTANT, SessionState, Turn

__all__ = ["ConversationMemory", "Summarizer", "SUMMARY_TEMPLATE"]

logger = logging.getLogger(__name__)

SUMMARY_TEMPLATE = "[Previous conversation summary: {summary}]"


class Summarizer(Protocol):
    async def summarize(self, turns: Sequence[Turn]) -> str: ...


class ConversationMemory:
    """Sliding-window turn history per session.

    Parameters
    ----------
    summarizer:
        Collaborator that condenses evicted turns into text. ``None``
        disables summarization (evicted turns are simply dropped).
    window_size:
        Maximum number of turns kept verbatim per session.
    summary_timeout:
        Seconds to wait for the summarizer before giving up on a batch.
    """

    def __init__(
        self,
        summarizer: Summarizer | None = None,
        window_size: int = MEMORY_WINDOW_TURNS,
        summary_timeout: float = REPLY_TIMEOUT_SECONDS,
    ) -> None:
        self.summarizer = summarizer
        self.window_size = window_size
        self.summary_timeout = summary_timeout

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    async def update(self, state: SessionState, full_history: Sequence[Turn]) -> None:
        """Rebuild the window from *full_history* and summarize the overflow.

        Only overflow turns not folded into the summary by an earlier call
        are sent to the summarizer. A failed summarization is logged and the
        batch skipped; the window is truncated either way.
        """
        history = list(full_history)
        overflow_end = max(len(history) - self.window_size, 0)
        start = min(state.summarized_count, overflow_end)
        batch = history[start:overflow_end]

        if batch:
            await self._summarize_batch(state, batch)
        state.summarized_count = overflow_end
        state.memory_window = history[overflow_end:]
        state.memory_primed = True

        logger.debug(
            "Memory updated for session=%s: window=%d summarized=%d",
            state.session_id,
            len(state.memory_window),
            overflow_end,
        )

    def read_for_generation(self, state: SessionState) -> list[Turn]:
        """Return the window, led by a synthetic summary turn when one exists."""
        window = list(state.memory_window)
        if not state.summary:
            return window
        oldest = min((turn.timestamp for turn in window), default=datetime.now(timezone.utc))
        summary_turn = Turn(
            role=ASSISTANT,
            content=SUMMARY_TEMPLATE.format(summary=state.summary),
            timestamp=oldest - timedelta(seconds=1),
        )
        return [summary_turn, *window]

    def clear(self, state: SessionState) -> None:
        state.memory_window = []
        state.summary = ""
        state.summarized_count = 0
        state.memory_primed = False

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _summarize_batch(self, state: SessionState, batch: list[Turn]) -> None:
        if self.summarizer is None:
            logger.debug("No summarizer configured, dropping %d turns", len(batch))
            return
        try:
            text = await asyncio.wait_for(self.summarizer.summarize(batch), timeout=self.summary_timeout)
        except Exception as exc:
            logger.warning(
                "Summarization failed for session=%s (%d turns skipped): %s",
                state.session_id,
                len(batch),
                exc,
            )
            return

        text = (text or "").strip()
        if not text:
            logger.warning("Summarizer returned empty text for session=%s", state.session_id)
            return
        state.summary = f"{state.summary}{SUMMARY_SEPARATOR}{text}" if state.summary else text
        logger.info("Conversation summary extended for session=%s (%d turns)", state.session_id, len(batch))
