import asyncio
import random

from core.journal.storage import TurnStorage
from core.pipeline.processor import TurnProcessor
from core.replies.variety import ResponseVarietyPicker
from core.session.store import SessionStore
from interfaces.cli.main import SESSION_ID, handle_command


def _processor(tmp_path) -> TurnProcessor:
    return TurnProcessor(
        storage=TurnStorage(db_path=tmp_path / "cli.db"),
        store=SessionStore(default_language="en"),
        picker=ResponseVarietyPicker(rng=random.Random(1)),
    )


def test_cli_commands(tmp_path):
    async def scenario() -> None:
        processor = _processor(tmp_path)

        assert await handle_command(processor, "/lang") == "Current language: en"
        assert await handle_command(processor, "/lang fr") == "Language set to fr."
        assert (await handle_command(processor, "/lang xx")).startswith("Supported languages:")

        result = await processor.process_text(SESSION_ID, "Bonjour tout le monde")
        assert result.reply_text == "I heard: Bonjour tout le monde"
        stats = await handle_command(processor, "/stats")
        assert stats.startswith("messages=2 duration=")
        assert stats.endswith("voice_quality=Fair")

        assert await handle_command(processor, "/clear") == "Conversation cleared (2 messages removed)."
        assert await handle_command(processor, "/help").startswith("Commands:")

    asyncio.run(scenario())
