from __future__ import annotations

import os


DB_PATH = os.getenv("DB_PATH", "data/tutor.db")
LOG_LEVEL = os.getenv("LOG_LEVEL", os.getenv("TUTOR_LOG_LEVEL", "INFO")).upper()
MAX_TEXT_LENGTH = int(os.getenv("MAX_TEXT_LENGTH", "2000"))

# ── Language providers (OpenAI-compatible API) ───────────────────
CHAT_MODEL_ID = os.getenv("TUTOR_CHAT_MODEL", "gpt-4o")
TRANSCRIBE_MODEL_ID = os.getenv("TUTOR_TRANSCRIBE_MODEL", "whisper-1")
TTS_MODEL_ID = os.getenv("TUTOR_TTS_MODEL", "tts-1")
TTS_VOICE = os.getenv("TUTOR_TTS_VOICE", "nova")
AUDIO_DIR = os.getenv("TUTOR_AUDIO_DIR", "data/audio")

REPLY_TIMEOUT_SECONDS = float(os.getenv("REPLY_TIMEOUT_SECONDS", "25"))
TRANSCRIBE_TIMEOUT_SECONDS = float(os.getenv("TRANSCRIBE_TIMEOUT_SECONDS", "15"))
TRANSCRIBE_ATTEMPTS = int(os.getenv("TRANSCRIBE_ATTEMPTS", "3"))
TRANSCRIBE_BACKOFF_SECONDS = float(os.getenv("TRANSCRIBE_BACKOFF_SECONDS", "1.0"))

# ── Sessions ─────────────────────────────────────────────────────
SUPPORTED_LANGUAGES: tuple[str, ...] = ("es", "en", "fr", "it", "de", "pt")
DEFAULT_LANGUAGE = os.getenv("DEFAULT_LANGUAGE", "es")
if DEFAULT_LANGUAGE not in SUPPORTED_LANGUAGES:
	DEFAULT_LANGUAGE = "es"
SESSION_TTL_SECONDS = float(os.getenv("SESSION_TTL_SECONDS", str(6 * 60 * 60)))

# ── Inactivity (presence check, then goodbye) ────────────────────
INACTIVITY_WARNING_SECONDS = float(os.getenv("INACTIVITY_WARNING_SECONDS", "90"))
INACTIVITY_CLOSE_SECONDS = float(os.getenv("INACTIVITY_CLOSE_SECONDS", "30"))
INACTIVITY_TICK_SECONDS = float(os.getenv("INACTIVITY_TICK_SECONDS", "5"))
