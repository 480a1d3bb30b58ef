"""Error taxonomy for the tutoring engine.

Only the boundaries raise these: the input gate, the provider wrappers and
the commit step of a turn. The detection functions themselves never raise.
"""

from __future__ import annotations

__all__ = [
    "BackgroundAudioError",
    "EmptyAudioError",
    "MessageTooLongError",
    "NoSpeechDetectedError",
    "ProviderError",
    "ProviderTimeoutError",
    "SessionSupersededError",
    "TutorError",
]


class TutorError(RuntimeError):
    """Base class for recoverable tutoring errors."""

    code: str = "TUTOR_ERROR"


class EmptyAudioError(TutorError):
    code = "EMPTY_AUDIO"


class NoSpeechDetectedError(TutorError):
    code = "NO_SPEECH_DETECTED"


class BackgroundAudioError(TutorError):
    """Transcript looks like subtitle or watermark text from background audio."""

    code = "BACKGROUND_AUDIO"


class ProviderError(TutorError):
    """An external provider (generation, transcription, synthesis) failed."""

    code = "PROVIDER_ERROR"


class ProviderTimeoutError(ProviderError):
    code = "PROVIDER_TIMEOUT"


class MessageTooLongError(TutorError, ValueError):
    code = "MESSAGE_TOO_LONG"


class SessionSupersededError(TutorError):
    """The session was cleared while a turn for it was still in flight."""

    code = "SESSION_SUPERSEDED"
