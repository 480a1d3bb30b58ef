from __future__ import annotations

import asyncio
import logging

from config import LOG_LEVEL, SUPPORTED_LANGUAGES
from core.errors import TutorError
from core.pipeline.processor import TurnProcessor
from core.replies.messages import error_message
from interfaces.processor_factory import build_processor

SESSION_ID = "cli"


async def handle_command(processor: TurnProcessor, line: str) -> str:
    command, _, argument = line.partition(" ")
    if command == "/clear":
        removed = await processor.clear_session(SESSION_ID)
        return f"Conversation cleared ({removed} messages removed)."
    if command == "/lang":
        if not argument.strip():
            return f"Current language: {processor.language_of(SESSION_ID)}"
        try:
            return f"Language set to {processor.set_language(SESSION_ID, argument)}."
        except ValueError:
            return f"Supported languages: {', '.join(SUPPORTED_LANGUAGES)}"
    if command == "/stats":
        stats = await processor.get_stats(SESSION_ID)
        return (
            f"messages={stats.message_count} duration={stats.session_duration}s "
            f"voice_quality={stats.voice_quality}"
        )
    return "Commands: /clear, /lang <code>, /stats, exit"


async def run_cli(processor: TurnProcessor | None = None) -> None:
    processor = processor or build_processor()
    print(f"Clara CLI. Language: {processor.language_of(SESSION_ID)}. Type 'exit' to quit.")

    while True:
        text = input("> ").strip()
        if text.lower() in {"exit", "quit", "q"}:
            print("Bye.")
            break
        if not text:
            continue
        if text.startswith("/"):
            print(await handle_command(processor, text))
            continue

        try:
            result = await processor.process_text(SESSION_ID, text)
        except TutorError as exc:
            print(error_message(exc, processor.language_of(SESSION_ID)))
            continue
        if result.repetition_type:
            print(f"[repetition={result.repetition_type}]")
        print(result.reply_text)


if __name__ == "__main__":
    logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO))
    asyncio.run(run_cli())
