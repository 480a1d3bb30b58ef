"""Per-session conversational state.

A :class:`SessionState` owns everything the engine remembers about one
conversation: the recent-input ring, the used canned phrases, the single
pending-correction slot, the memory window and the accumulated summary.
Nothing in here is shared between sessions.
"""

from __future__ import annotations

import asyncio
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Deque

from config import DEFAULT_LANGUAGE
from core.defaults import RECENT_INPUT_WINDOW

__all__ = [
    "PendingCorrection",
    "RecentCorrection",
    "SessionState",
    "Turn",
    "USER",
    "ASSISTANT",
]

USER = "user"
ASSISTANT = "assistant"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True, frozen=True)
class Turn:
    """One utterance. Immutable once created."""

    role: str
    content: str
    timestamp: datetime = field(default_factory=_utcnow)
    repetition_type: str | None = None

    def as_message(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(slots=True, frozen=True)
class PendingCorrection:
    original_text: str
    corrected_text: str
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(slots=True)
class RecentCorrection:
    """Short-lived memo of the word the tutor keeps correcting."""

    word: str
    count: int
    last_reply: str
    expires_at: float


@dataclass
class SessionState:
    session_id: str
    language: str = DEFAULT_LANGUAGE
    recent_inputs: Deque[str] = field(default_factory=lambda: deque(maxlen=RECENT_INPUT_WINDOW))
    used_patterns: dict[str, set[str]] = field(default_factory=dict)
    pending_correction: PendingCorrection | None = None
    recent_correction: RecentCorrection | None = None
    memory_window: list[Turn] = field(default_factory=list)
    summary: str = ""
    summarized_count: int = 0
    memory_primed: bool = False
    arrival_seq: int = 0
    committed_seq: int = 0
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)
    last_active: float = field(default_factory=time.monotonic)

    def push_recent_input(self, text: str) -> None:
        """Record a raw user input; the oldest entry falls off after three."""
        self.recent_inputs.append(text)

    def take_ticket(self) -> int:
        """Number the next incoming turn in arrival order."""
        self.arrival_seq += 1
        return self.arrival_seq

    def last_input(self) -> str | None:
        return self.recent_inputs[-1] if self.recent_inputs else None

    def touch(self) -> None:
        self.last_active = time.monotonic()
