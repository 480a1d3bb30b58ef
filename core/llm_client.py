from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from typing import Any, Protocol

from dotenv import load_dotenv
from openai import AsyncOpenAI

from config import CHAT_MODEL_ID, TRANSCRIBE_MODEL_ID, TTS_MODEL_ID, TTS_VOICE
from core.defaults import SUMMARY_LANGUAGE
from core.errors import ProviderError
from core.llm.prompts import build_summary_request, build_summary_system_prompt, build_system_prompt
from core.session.state import Turn

logger = logging.getLogger(__name__)


class LLMClient(Protocol):
    async def generate_reply(
        self,
        user_text: str,
        language: str,
        history: Sequence[Turn],
        prompt_override: str | None = None,
    ) -> str: ...

    async def summarize(self, turns: Sequence[Turn]) -> str: ...

    async def transcribe(self, audio: bytes, session_id: str, language_hint: str | None = None) -> str: ...

    async def synthesize(self, text: str, language: str, session_id: str) -> bytes: ...


def format_transcript(turns: Sequence[Turn]) -> str:
    return "\n".join(f"{turn.role}: {turn.content}" for turn in turns)


class MockLLMClient:
    """Offline stand-in: echoes the learner so the transports work without a key."""

    async def generate_reply(
        self,
        user_text: str,
        language: str,
        history: Sequence[Turn],
        prompt_override: str | None = None,
    ) -> str:
        return f"I heard: {user_text}"

    async def summarize(self, turns: Sequence[Turn]) -> str:
        return f"{len(turns)} earlier turns."

    async def transcribe(self, audio: bytes, session_id: str, language_hint: str | None = None) -> str:
        return ""

    async def synthesize(self, text: str, language: str, session_id: str) -> bytes:
        return b""


class OpenAITutorClient:
    def __init__(
        self,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        chat_model: str | None = None,
        transcribe_model: str | None = None,
        tts_model: str | None = None,
        tts_voice: str | None = None,
    ) -> None:
        load_dotenv()
        self.api_key = api_key or os.getenv("OPENAI_API_KEY", "")
        self.base_url = base_url or os.getenv("OPENAI_BASE_URL") or None
        self.chat_model = chat_model or CHAT_MODEL_ID
        self.transcribe_model = transcribe_model or TRANSCRIBE_MODEL_ID
        self.tts_model = tts_model or TTS_MODEL_ID
        self.tts_voice = tts_voice or TTS_VOICE

        self._client: AsyncOpenAI | None = None

    async def generate_reply(
        self,
        user_text: str,
        language: str,
        history: Sequence[Turn],
        prompt_override: str | None = None,
    ) -> str:
        system_prompt = prompt_override or build_system_prompt(language)
        messages: list[dict[str, str]] = [{"role": "system", "content": system_prompt}]
        messages.extend(turn.as_message() for turn in history)
        messages.append({"role": "user", "content": user_text})
        return await self._chat(messages, label="Reply")

    async def summarize(self, turns: Sequence[Turn]) -> str:
        request = build_summary_request(format_transcript(turns), SUMMARY_LANGUAGE)
        messages = [
            {"role": "system", "content": build_summary_system_prompt(SUMMARY_LANGUAGE)},
            {"role": "user", "content": request},
        ]
        logger.debug("Summarizing %d turns in %s", len(turns), SUMMARY_LANGUAGE)
        return await self._chat(messages, label="Summary", max_tokens=300)

    async def transcribe(self, audio: bytes, session_id: str, language_hint: str | None = None) -> str:
        client = self._get_client()
        kwargs: dict[str, Any] = {
            "model": self.transcribe_model,
            "file": ("audio.ogg", audio),
            "response_format": "text",
        }
        if language_hint:
            kwargs["language"] = language_hint
        try:
            result = await client.audio.transcriptions.create(**kwargs)
        except Exception as exc:
            raise ProviderError(f"transcription failed: {exc}") from exc

        text = result if isinstance(result, str) else getattr(result, "text", "")
        logger.info("Transcribed %d bytes for session=%s: %r", len(audio), session_id, text[:80])
        return text.strip()

    async def synthesize(self, text: str, language: str, session_id: str) -> bytes:
        client = self._get_client()
        try:
            response = await client.audio.speech.create(
                model=self.tts_model,
                voice=self.tts_voice,
                input=text,
                response_format="mp3",
            )
        except Exception as exc:
            raise ProviderError(f"speech synthesis failed: {exc}") from exc
        return response.content

    async def _chat(
        self,
        messages: list[dict[str, str]],
        *,
        label: str,
        temperature: float = 0.7,
        max_tokens: int = 150,
    ) -> str:
        client = self._get_client()
        try:
            completion = await client.chat.completions.create(
                model=self.chat_model,
                temperature=temperature,
                max_tokens=max_tokens,
                messages=messages,
            )
        except Exception as exc:
            logger.error("%s generation failed: %s", label, exc)
            raise ProviderError(f"{label.lower()} generation failed: {exc}") from exc

        usage = getattr(completion, "usage", None)
        if usage:
            logger.info(
                "%s tokens: prompt=%s completion=%s total=%s",
                label,
                getattr(usage, "prompt_tokens", "?"),
                getattr(usage, "completion_tokens", "?"),
                getattr(usage, "total_tokens", "?"),
            )

        if not completion.choices:
            raise ProviderError(f"{label.lower()} generation returned no choices")

        reply = (completion.choices[0].message.content or "").strip()
        if not reply:
            raise ProviderError(f"{label.lower()} generation returned empty text")
        return reply

    def _get_client(self) -> AsyncOpenAI:
        if self._client is not None:
            return self._client

        if not self.api_key:
            logger.error("OpenAITutorClient: OPENAI_API_KEY is not set, provider disabled")
            raise ProviderError("OPENAI_API_KEY is not set")

        self._client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url)
        return self._client
