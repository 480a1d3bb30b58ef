from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from config import MAX_TEXT_LENGTH, REPLY_TIMEOUT_SECONDS, SUPPORTED_LANGUAGES
from core.analysis.repetition import PRACTICE, RepetitionDetector
from core.analysis.transcript_quality import TranscriptQualityClassifier
from core.context.dedup import ReplyDeduplicator
from core.context.session_memory import ConversationMemory
from core.corrections.tracker import CorrectionTracker
from core.defaults import STATS_EXCELLENT_USER_TURNS, STATS_GOOD_USER_TURNS
from core.errors import MessageTooLongError, ProviderError, ProviderTimeoutError, SessionSupersededError
from core.journal.storage import TurnStorage
from core.llm.prompts import build_anti_repetition_prompt, build_system_prompt
from core.llm_client import LLMClient, MockLLMClient
from core.pipeline.events import (
    CORRECTION_REGISTERED,
    PRACTICE_RESOLVED,
    SESSION_CLEARED,
    TURN_FALLBACK,
    TURN_PROCESSED,
    EventBus,
)
from core.replies.messages import CLARIFICATION, FALLBACK_APOLOGY, localized
from core.replies.variety import ResponseVarietyPicker
from core.session.state import ASSISTANT, USER, SessionState, Turn
from core.session.store import SessionStore
from core.speech.synthesizer import SpeechSynthesizer
from core.speech.transcriber import Transcriber, ensure_speech

logger = logging.getLogger(__name__)

# Control characters to strip during sanitization (keep tab, newline, carriage return)
_CONTROL_CHAR_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def _sanitize_text(text: str) -> str:
    """Strip excess whitespace and control characters from *text*."""
    text = _CONTROL_CHAR_RE.sub("", text)
    return text.strip()


def _validate_language(language: str) -> str:
    language = language.strip().lower()
    if language not in SUPPORTED_LANGUAGES:
        raise ValueError(f"Unsupported language: {language!r} (expected one of {', '.join(SUPPORTED_LANGUAGES)})")
    return language


@dataclass(slots=True)
class TurnResult:
    user_turn: Turn
    assistant_turn: Turn
    language: str
    repetition_type: str | None = None
    poor_quality: bool = False
    fallback: bool = False
    regenerated: bool = False
    audio_path: Path | None = None

    @property
    def reply_text(self) -> str:
        return self.assistant_turn.content


@dataclass(slots=True)
class SessionStats:
    message_count: int
    session_duration: int
    voice_quality: str


class TurnProcessor:
    """Runs one learner turn end to end for a session.

    Each turn goes through the quality gate and the repetition check, then
    either answers from the canned pools or asks the language model, keeps
    the reply from repeating a recent one, registers any correction it
    contains, persists both turns and compacts the session memory. Turns of
    one session are serialized on the session lock; side effects are only
    applied once the reply is settled.
    """

    def __init__(
        self,
        storage: TurnStorage,
        store: SessionStore | None = None,
        llm_client: LLMClient | None = None,
        *,
        quality: TranscriptQualityClassifier | None = None,
        detector: RepetitionDetector | None = None,
        tracker: CorrectionTracker | None = None,
        picker: ResponseVarietyPicker | None = None,
        memory: ConversationMemory | None = None,
        dedup: ReplyDeduplicator | None = None,
        transcriber: Transcriber | None = None,
        synthesizer: SpeechSynthesizer | None = None,
        event_bus: EventBus | None = None,
        reply_timeout: float = REPLY_TIMEOUT_SECONDS,
        max_text_length: int = MAX_TEXT_LENGTH,
    ) -> None:
        self.storage = storage
        self.store = store or SessionStore()
        self.llm_client = llm_client or MockLLMClient()
        self.quality = quality or TranscriptQualityClassifier()
        self.detector = detector or RepetitionDetector(quality=self.quality)
        self.tracker = tracker or CorrectionTracker()
        self.picker = picker or ResponseVarietyPicker()
        self.memory = memory or ConversationMemory(summarizer=self.llm_client)
        self.dedup = dedup or ReplyDeduplicator()
        self.transcriber = transcriber
        self.synthesizer = synthesizer
        self.event_bus = event_bus or EventBus()
        self.reply_timeout = reply_timeout
        self.max_text_length = max_text_length

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    async def process_text(self, session_id: str, text: str, language: str | None = None) -> TurnResult:
        text = self._check_text(text)
        if language is not None:
            language = _validate_language(language)

        state = self.store.get_or_create(session_id, language)
        return await self._process(session_id, state, state.take_ticket(), text, language)

    async def process_audio(self, session_id: str, audio: bytes, language: str | None = None) -> TurnResult:
        """Transcribe *audio* and process it as a turn.

        The turn is numbered when the audio arrives, so a transcription that
        needed retries cannot be committed after a newer turn of the session.
        """
        if self.transcriber is None:
            raise ProviderError("no transcriber configured")
        if language is not None:
            language = _validate_language(language)

        state = self.store.get_or_create(session_id, language)
        ticket = state.take_ticket()
        text = await self.transcriber.transcribe(audio, session_id, state.language)
        return await self._process(session_id, state, ticket, self._check_text(text), language)

    def set_language(self, session_id: str, language: str) -> str:
        language = _validate_language(language)
        state = self.store.get_or_create(session_id, language)
        logger.info("Language for session=%s set to %s", session_id, language)
        return state.language

    def language_of(self, session_id: str) -> str:
        state = self.store.get(session_id)
        return state.language if state is not None else self.store.default_language

    async def get_stats(self, session_id: str) -> SessionStats:
        message_count = await self.storage.count_turns(session_id)
        user_turns = await self.storage.count_user_turns(session_id)
        started_at = await self.storage.session_started_at(session_id)
        duration = 0
        if started_at is not None:
            if started_at.tzinfo is None:
                started_at = started_at.replace(tzinfo=timezone.utc)
            duration = max(int((datetime.now(timezone.utc) - started_at).total_seconds()), 0)

        if user_turns > STATS_EXCELLENT_USER_TURNS:
            voice_quality = "Excellent"
        elif user_turns > STATS_GOOD_USER_TURNS:
            voice_quality = "Good"
        else:
            voice_quality = "Fair"
        return SessionStats(message_count=message_count, session_duration=duration, voice_quality=voice_quality)

    async def close_session(self, session_id: str) -> bool:
        """Drop the in-memory state of an idle session, keeping its history."""
        state = self.store.get(session_id)
        if state is None:
            return False
        async with state.lock:
            self.store.delete(session_id)
        logger.info("Session closed: session=%s", session_id)
        return True

    async def clear_session(self, session_id: str) -> int:
        """Forget the session: persisted turns and all in-memory state.

        Runs under the session lock, so a turn arriving meanwhile waits and
        then starts on a fresh state with an empty history.
        """
        state = self.store.get_or_create(session_id)
        async with state.lock:
            removed = await self.storage.clear_session(session_id)
            self.store.delete(session_id)
            self.memory.clear(state)
            self.tracker.clear(state)
            state.used_patterns.clear()
            state.recent_inputs.clear()
        self.event_bus.publish(SESSION_CLEARED, {"session_id": session_id, "turns_removed": removed})
        logger.info("Session cleared: session=%s turns_removed=%d", session_id, removed)
        return removed

    # ------------------------------------------------------------------
    # Turn state machine
    # ------------------------------------------------------------------

    async def _process(
        self,
        session_id: str,
        state: SessionState,
        ticket: int,
        text: str,
        language: str | None,
    ) -> TurnResult:
        while True:
            async with state.lock:
                if self.store.holds(state):
                    result = await self._locked_turn(state, ticket, text)
                    break
            # The session was cleared or closed while this turn waited.
            logger.info("Session %s was reset before turn %d started, moving it to the new state", session_id, ticket)
            state = self.store.get_or_create(session_id, language)
            ticket = state.take_ticket()

        if self.synthesizer is not None and not result.fallback:
            result.audio_path = await self._synthesize_safe(result.reply_text, result.language, session_id)
        return result

    async def _locked_turn(self, state: SessionState, ticket: int, text: str) -> TurnResult:
        if ticket < state.committed_seq:
            logger.warning(
                "Dropping turn %d for session=%s: turn %d was already committed",
                ticket,
                state.session_id,
                state.committed_seq,
            )
            raise SessionSupersededError(f"turn {ticket} of session {state.session_id} arrived before a committed turn")

        history = await self.storage.load_history(state.session_id)
        if not state.memory_primed:
            await self.memory.update(state, history)
        result = await self._run_turn(state, text, history)
        state.committed_seq = ticket
        return result

    async def _run_turn(self, state: SessionState, text: str, history: list[Turn]) -> TurnResult:
        language = state.language
        received_at = datetime.now(timezone.utc)

        repetition = self.detector.detect(state, text)
        if repetition.is_repetition:
            return await self._short_circuit_repetition(state, text, repetition.type, received_at, history)

        if self.quality.is_poor_quality(text):
            logger.info("Poor-quality input for session=%s: %r", state.session_id, text)
            self._ensure_current(state)
            state.push_recent_input(text)
            user_turn = Turn(role=USER, content=text, timestamp=received_at)
            reply = localized(CLARIFICATION, language)
            return await self._persist_and_compact(state, history, user_turn, reply, poor_quality=True)

        user_turn = Turn(role=USER, content=text, timestamp=received_at)
        prompt_history = self.dedup.filter_history_for_prompt(self.memory.read_for_generation(state))
        system_prompt = build_system_prompt(language, self.tracker.prompt_context(state, text))

        try:
            reply = await self._generate(text, language, prompt_history, system_prompt)
        except ProviderError as exc:
            return await self._commit_fallback(state, user_turn, exc)

        regenerated = False
        if self.dedup.is_immediate_repeat(history, reply):
            logger.info("Generated reply repeats a recent one for session=%s, regenerating", state.session_id)
            regenerated = True
            retry_prompt = build_anti_repetition_prompt(system_prompt, reply, text)
            try:
                reply = await self._generate(text, language, prompt_history, retry_prompt)
            except ProviderError as exc:
                logger.warning("Regeneration failed for session=%s, keeping first reply: %s", state.session_id, exc)

        # Reply settled: apply this turn's side effects.
        self._ensure_current(state)
        state.push_recent_input(text)
        pending = self.tracker.detect_and_register(state, text, reply)
        if pending is not None:
            self.event_bus.publish(
                CORRECTION_REGISTERED,
                {
                    "session_id": state.session_id,
                    "original_text": pending.original_text,
                    "corrected_text": pending.corrected_text,
                },
            )
        self.tracker.check_recent(state, text, prune=True)
        self.tracker.note_correction(state, text, reply)

        return await self._persist_and_compact(state, history, user_turn, reply, regenerated=regenerated)

    async def _short_circuit_repetition(
        self,
        state: SessionState,
        text: str,
        repetition_type: str | None,
        received_at: datetime,
        history: list[Turn],
    ) -> TurnResult:
        language = state.language
        self._ensure_current(state)

        reply: str | None = None
        if repetition_type == PRACTICE:
            outcome = self.tracker.resolve_practice(state, text, language)
            if outcome is not None:
                reply = outcome.reply
                self.event_bus.publish(
                    PRACTICE_RESOLVED,
                    {
                        "session_id": state.session_id,
                        "success": outcome.success,
                        "corrected_text": outcome.corrected_text,
                        "score": outcome.score,
                    },
                )
        if reply is None:
            reply = self.picker.pick(state, repetition_type or PRACTICE, language)

        state.push_recent_input(text)
        logger.info("Repetition (%s) short-circuited for session=%s", repetition_type, state.session_id)
        user_turn = Turn(role=USER, content=text, timestamp=received_at, repetition_type=repetition_type)
        return await self._persist_and_compact(state, history, user_turn, reply, repetition_type=repetition_type)

    async def _persist_and_compact(
        self,
        state: SessionState,
        history: list[Turn],
        user_turn: Turn,
        reply: str,
        *,
        repetition_type: str | None = None,
        poor_quality: bool = False,
        regenerated: bool = False,
    ) -> TurnResult:
        assistant_turn = Turn(role=ASSISTANT, content=reply)
        await self.storage.save_turns(state.session_id, [user_turn, assistant_turn])
        await self.memory.update(state, [*history, user_turn, assistant_turn])

        result = TurnResult(
            user_turn=user_turn,
            assistant_turn=assistant_turn,
            language=state.language,
            repetition_type=repetition_type,
            poor_quality=poor_quality,
            regenerated=regenerated,
        )
        self.event_bus.publish(
            TURN_PROCESSED,
            {
                "session_id": state.session_id,
                "language": result.language,
                "repetition_type": result.repetition_type,
                "poor_quality": result.poor_quality,
                "regenerated": result.regenerated,
            },
        )
        return result

    async def _commit_fallback(self, state: SessionState, user_turn: Turn, exc: ProviderError) -> TurnResult:
        """Persist the learner's turn plus an apology and touch nothing else."""
        logger.warning("Reply generation failed for session=%s: %s", state.session_id, exc)
        self._ensure_current(state)
        apology = Turn(role=ASSISTANT, content=localized(FALLBACK_APOLOGY, state.language))
        await self.storage.save_turns(state.session_id, [user_turn, apology])
        self.event_bus.publish(
            TURN_FALLBACK,
            {"session_id": state.session_id, "error": type(exc).__name__, "code": exc.code},
        )
        return TurnResult(user_turn=user_turn, assistant_turn=apology, language=state.language, fallback=True)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _check_text(self, text: str) -> str:
        text = _sanitize_text(text)
        if len(text) > self.max_text_length:
            raise MessageTooLongError(f"Message too long: {len(text)} chars (max {self.max_text_length})")
        return ensure_speech(text)

    async def _generate(self, text: str, language: str, history: list[Turn], system_prompt: str) -> str:
        try:
            reply = await asyncio.wait_for(
                self.llm_client.generate_reply(text, language, history, prompt_override=system_prompt),
                timeout=self.reply_timeout,
            )
        except asyncio.TimeoutError as exc:
            raise ProviderTimeoutError(f"reply generation timed out after {self.reply_timeout}s") from exc
        except ProviderError:
            raise
        except Exception as exc:
            raise ProviderError(f"reply generation failed: {exc}") from exc

        reply = (reply or "").strip()
        if not reply:
            raise ProviderError("reply generation returned empty text")
        return reply

    async def _synthesize_safe(self, text: str, language: str, session_id: str) -> Path | None:
        try:
            return await self.synthesizer.synthesize(text, language, session_id)
        except Exception as exc:
            logger.warning("Speech synthesis failed for session=%s: %s", session_id, exc)
            return None

    def _ensure_current(self, state: SessionState) -> None:
        if not self.store.holds(state):
            raise SessionSupersededError(f"session {state.session_id} was cleared while a turn was in flight")
