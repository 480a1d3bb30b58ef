from __future__ import annotations

import logging
import os

from config import DB_PATH as _DEFAULT_DB_PATH
from core.context.session_memory import ConversationMemory
from core.journal.storage import TurnStorage
from core.llm_client import LLMClient, MockLLMClient, OpenAITutorClient
from core.pipeline.events import EventBus
from core.pipeline.processor import TurnProcessor
from core.session.store import SessionStore
from core.speech.synthesizer import SpeechSynthesizer
from core.speech.transcriber import Transcriber

logger = logging.getLogger(__name__)


def build_llm_client() -> LLMClient:
    if not os.getenv("OPENAI_API_KEY"):
        logger.warning("OPENAI_API_KEY is not set, using the offline echo client")
        return MockLLMClient()
    return OpenAITutorClient()


def build_processor(
    db_path: str | None = None,
    *,
    llm_client: LLMClient | None = None,
    with_speech: bool = False,
    event_bus: EventBus | None = None,
) -> TurnProcessor:
    resolved = db_path or _DEFAULT_DB_PATH
    storage = TurnStorage(db_path=resolved)
    client = llm_client or build_llm_client()
    transcriber = Transcriber(client) if with_speech else None
    synthesizer = SpeechSynthesizer(client) if with_speech else None
    return TurnProcessor(
        storage=storage,
        store=SessionStore(),
        llm_client=client,
        memory=ConversationMemory(summarizer=client),
        transcriber=transcriber,
        synthesizer=synthesizer,
        event_bus=event_bus or EventBus(),
    )
