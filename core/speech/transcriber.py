"""Speech-to-text boundary with retries and empty-input detection.

The provider is tried up to ``attempts`` times, each call bounded by
``timeout`` seconds, sleeping ``backoff * attempt`` seconds between tries.
Whatever comes back is checked before it reaches the engine: nothing
usable raises :class:`~core.errors.NoSpeechDetectedError`, and subtitle
credits that speech models hallucinate from background noise raise
:class:`~core.errors.BackgroundAudioError`.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable
from typing import Protocol

from config import TRANSCRIBE_ATTEMPTS, TRANSCRIBE_BACKOFF_SECONDS, TRANSCRIBE_TIMEOUT_SECONDS
from core.defaults import MIN_AUDIO_BYTES, MIN_INPUT_LENGTH
from core.errors import (
    BackgroundAudioError,
    EmptyAudioError,
    NoSpeechDetectedError,
    ProviderError,
    ProviderTimeoutError,
)

__all__ = ["BACKGROUND_AUDIO_PATTERNS", "Transcriber", "ensure_speech"]

logger = logging.getLogger(__name__)

_NO_CONTENT_RE = re.compile(r"[\W_]*")

BACKGROUND_AUDIO_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"sous-titres.*amara",
        r"subtitles.*by",
        r"captions.*by",
        r"transcribed.*by",
        r"powered.*by",
        r"copyright",
        r"all rights reserved",
    )
)


class SpeechProvider(Protocol):
    async def transcribe(self, audio: bytes, session_id: str, language_hint: str | None = None) -> str: ...


def ensure_speech(text: str | None) -> str:
    """Return stripped *text*, or raise when it carries nothing to answer."""
    cleaned = (text or "").strip()
    if len(cleaned) < MIN_INPUT_LENGTH or _NO_CONTENT_RE.fullmatch(cleaned):
        raise NoSpeechDetectedError("no speech detected")
    return cleaned


class Transcriber:
    def __init__(
        self,
        provider: SpeechProvider,
        *,
        attempts: int = TRANSCRIBE_ATTEMPTS,
        timeout: float = TRANSCRIBE_TIMEOUT_SECONDS,
        backoff: float = TRANSCRIBE_BACKOFF_SECONDS,
        min_audio_bytes: int = MIN_AUDIO_BYTES,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.provider = provider
        self.attempts = max(1, attempts)
        self.timeout = timeout
        self.backoff = backoff
        self.min_audio_bytes = min_audio_bytes
        self._sleep = sleep

    async def transcribe(self, audio: bytes, session_id: str, language_hint: str | None = None) -> str:
        if len(audio) < self.min_audio_bytes:
            raise EmptyAudioError(f"audio too short ({len(audio)} bytes)")

        text = await self._transcribe_with_retry(audio, session_id, language_hint)
        cleaned = ensure_speech(text)
        for pattern in BACKGROUND_AUDIO_PATTERNS:
            if pattern.search(cleaned):
                logger.warning("Background audio transcript for session=%s: %r", session_id, cleaned)
                raise BackgroundAudioError("transcript looks like background audio")
        return cleaned

    async def _transcribe_with_retry(self, audio: bytes, session_id: str, language_hint: str | None) -> str:
        attempt = 0
        while True:
            attempt += 1
            try:
                return await asyncio.wait_for(
                    self.provider.transcribe(audio, session_id, language_hint),
                    timeout=self.timeout,
                )
            except asyncio.TimeoutError:
                error: ProviderError = ProviderTimeoutError(f"transcription timed out after {self.timeout}s")
            except ProviderError as exc:
                error = exc
            except Exception as exc:
                error = ProviderError(f"transcription failed: {exc}")

            logger.warning(
                "Transcription attempt %d/%d failed for session=%s: %s",
                attempt,
                self.attempts,
                session_id,
                error,
            )
            if attempt >= self.attempts:
                raise error
            await self._sleep(self.backoff * attempt)
