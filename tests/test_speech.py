"""Tests for the transcription and speech synthesis boundaries."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from core.errors import (
    BackgroundAudioError,
    EmptyAudioError,
    NoSpeechDetectedError,
    ProviderError,
    ProviderTimeoutError,
)
from core.speech.synthesizer import SpeechSynthesizer
from core.speech.transcriber import Transcriber, ensure_speech

AUDIO = b"\x00" * 2048


class ScriptedProvider:
    """Returns or raises the scripted outcomes in order."""

    def __init__(self, *outcomes) -> None:
        self.outcomes = list(outcomes)
        self.calls = 0

    async def transcribe(self, audio, session_id, language_hint=None):
        self.calls += 1
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        if outcome == "hang":
            await asyncio.sleep(1)
        return outcome


def _transcriber(provider, sleeps):
    async def fake_sleep(seconds):
        sleeps.append(seconds)

    return Transcriber(provider, attempts=3, timeout=0.01, backoff=1.0, sleep=fake_sleep)


def test_short_audio_is_rejected_before_calling_provider():
    async def scenario() -> None:
        provider = ScriptedProvider("never used")
        with pytest.raises(EmptyAudioError):
            await _transcriber(provider, []).transcribe(b"\x00" * 999, "s1")
        assert provider.calls == 0

    asyncio.run(scenario())


def test_retries_with_linear_backoff_then_succeeds():
    async def scenario() -> None:
        sleeps: list[float] = []
        provider = ScriptedProvider(ProviderError("boom"), "hang", "  Hola, ¿qué tal?  ")
        text = await _transcriber(provider, sleeps).transcribe(AUDIO, "s1", "es")
        assert text == "Hola, ¿qué tal?"
        assert provider.calls == 3
        assert sleeps == [1.0, 2.0]

    asyncio.run(scenario())


def test_gives_up_after_three_attempts():
    async def scenario() -> None:
        sleeps: list[float] = []
        provider = ScriptedProvider("hang", "hang", "hang")
        with pytest.raises(ProviderTimeoutError):
            await _transcriber(provider, sleeps).transcribe(AUDIO, "s1")
        assert provider.calls == 3
        assert sleeps == [1.0, 2.0]

    asyncio.run(scenario())


def test_last_provider_error_is_raised_without_sleeping():
    async def scenario() -> None:
        sleeps: list[float] = []
        failure = ProviderError("quota exceeded")

        async def fake_sleep(seconds):
            sleeps.append(seconds)

        transcriber = Transcriber(ScriptedProvider(failure), attempts=1, timeout=0.01, sleep=fake_sleep)
        with pytest.raises(ProviderError) as excinfo:
            await transcriber.transcribe(AUDIO, "s1")
        assert excinfo.value is failure
        assert sleeps == []

    asyncio.run(scenario())


@pytest.mark.parametrize("output", ["", "   ", "a", "...", ". , ."])
def test_empty_transcripts_mean_no_speech(output):
    async def scenario() -> None:
        with pytest.raises(NoSpeechDetectedError):
            await _transcriber(ScriptedProvider(output), []).transcribe(AUDIO, "s1")

    asyncio.run(scenario())


@pytest.mark.parametrize(
    "output",
    ["Sous-titres réalisés par la communauté d'Amara.org", "Subtitles by the community", "Copyright 2024"],
)
def test_background_audio_transcripts_are_rejected(output):
    async def scenario() -> None:
        with pytest.raises(BackgroundAudioError):
            await _transcriber(ScriptedProvider(output), []).transcribe(AUDIO, "s1")

    asyncio.run(scenario())


def test_ensure_speech():
    assert ensure_speech("  ok ") == "ok"
    with pytest.raises(NoSpeechDetectedError):
        ensure_speech("?!")
    with pytest.raises(NoSpeechDetectedError):
        ensure_speech(None)


def test_synthesizer_writes_mp3(tmp_path):
    async def scenario() -> None:
        provider = AsyncMock()
        provider.synthesize = AsyncMock(return_value=b"ID3fake-mp3")
        synthesizer = SpeechSynthesizer(provider, audio_dir=tmp_path / "audio")

        path = await synthesizer.synthesize("Ciao!", "it", "chat:42")

        provider.synthesize.assert_awaited_once_with("Ciao!", "it", "chat:42")
        assert path.parent == tmp_path / "audio"
        assert path.name.startswith("chat_42-")
        assert path.suffix == ".mp3"
        assert path.read_bytes() == b"ID3fake-mp3"

    asyncio.run(scenario())


def test_synthesizer_returns_none_without_audio(tmp_path):
    async def scenario() -> None:
        provider = AsyncMock()
        provider.synthesize = AsyncMock(return_value=b"")
        synthesizer = SpeechSynthesizer(provider, audio_dir=tmp_path)
        assert await synthesizer.synthesize("Ciao!", "it", "s1") is None

    asyncio.run(scenario())
