"""Centralised algorithm defaults for the tutoring engine.

All tuneable thresholds and window sizes used by the turn pipeline are
collected here so that the engine can be tuned from a single location.

Each module still uses local names and simply import from here.
"""

from __future__ import annotations

# ── SimilarityScorer consumers ───────────────────────────────────
PRACTICE_SIMILARITY_THRESHOLD: float = 0.8
NEAR_DUPLICATE_REPLY_THRESHOLD: float = 0.7

# ── RepetitionDetector (core/analysis/repetition.py) ─────────────
RECENT_INPUT_WINDOW: int = 3
MEMORIZATION_MAX_LENGTH: int = 50

# ── ConversationMemory (core/context/session_memory.py) ──────────
MEMORY_WINDOW_TURNS: int = 30
SUMMARY_SEPARATOR: str = "\n\n"
SUMMARY_LANGUAGE: str = "en"

# ── ReplyDeduplicator (core/context/dedup.py) ────────────────────
RECENT_REPLY_WINDOW: int = 3

# ── CorrectionTracker (core/corrections/tracker.py) ──────────────
RECENT_CORRECTION_TTL_SECONDS: int = 5 * 60

# ── Input gate (core/pipeline/processor.py) ──────────────────────
MIN_INPUT_LENGTH: int = 2

# ── Transcriber (core/speech/transcriber.py) ─────────────────────
MIN_AUDIO_BYTES: int = 1000

# ── Conversation stats ───────────────────────────────────────────
STATS_GOOD_USER_TURNS: int = 5
STATS_EXCELLENT_USER_TURNS: int = 10
