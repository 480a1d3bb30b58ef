from __future__ import annotations

import asyncio
import logging
import re
import uuid
from pathlib import Path
from typing import Protocol

from config import AUDIO_DIR, REPLY_TIMEOUT_SECONDS
from core.errors import ProviderError, ProviderTimeoutError

__all__ = ["SpeechSynthesizer"]

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_RE = re.compile(r"[^\w-]")


class VoiceProvider(Protocol):
    async def synthesize(self, text: str, language: str, session_id: str) -> bytes: ...


class SpeechSynthesizer:
    """Turns an accepted tutor reply into an mp3 file and returns its path."""

    def __init__(
        self,
        provider: VoiceProvider,
        audio_dir: str | Path = AUDIO_DIR,
        timeout: float = REPLY_TIMEOUT_SECONDS,
    ) -> None:
        self.provider = provider
        self.audio_dir = Path(audio_dir)
        self.timeout = timeout

    async def synthesize(self, text: str, language: str, session_id: str) -> Path | None:
        try:
            audio = await asyncio.wait_for(
                self.provider.synthesize(text, language, session_id),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as exc:
            raise ProviderTimeoutError(f"speech synthesis timed out after {self.timeout}s") from exc

        if not audio:
            logger.debug("Speech provider returned no audio for session=%s", session_id)
            return None

        self.audio_dir.mkdir(parents=True, exist_ok=True)
        safe_id = _UNSAFE_FILENAME_RE.sub("_", session_id)
        path = self.audio_dir / f"{safe_id}-{uuid.uuid4().hex[:12]}.mp3"
        try:
            path.write_bytes(audio)
        except OSError as exc:
            raise ProviderError(f"could not store synthesized audio: {exc}") from exc
        logger.info("Synthesized %d bytes of %s speech for session=%s", len(audio), language, session_id)
        return path
