from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

from aiogram import Bot, Dispatcher, F, Router
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.types import FSInputFile, Message
from dotenv import load_dotenv

from config import LOG_LEVEL, SUPPORTED_LANGUAGES
from core.errors import TutorError
from core.pipeline.events import SESSION_CLEARED, Event, EventBus
from core.pipeline.processor import TurnProcessor, TurnResult
from core.replies.messages import error_message
from core.scheduler.inactivity import InactivityMonitor
from interfaces.processor_factory import build_processor

router = Router()
logger = logging.getLogger(__name__)
LOCK_PATH = Path("data/telegram_bot.lock")


class BotInstanceLockError(RuntimeError):
    pass


def _is_process_alive(pid: int) -> bool:
    if pid <= 0:
        return False
    try:
        os.kill(pid, 0)
    except OSError:
        return False
    return True


def _acquire_bot_instance_lock(lock_path: Path = LOCK_PATH) -> Path:
    lock_path.parent.mkdir(parents=True, exist_ok=True)

    if lock_path.exists():
        try:
            existing_pid = int(lock_path.read_text(encoding="utf-8").strip())
        except (ValueError, OSError):
            existing_pid = 0

        if _is_process_alive(existing_pid):
            raise BotInstanceLockError(
                f"Another local bot instance is already running (pid={existing_pid})."
            )
        lock_path.unlink(missing_ok=True)

    flags = os.O_CREAT | os.O_EXCL | os.O_WRONLY
    fd = os.open(str(lock_path), flags)
    with os.fdopen(fd, "w", encoding="utf-8") as handle:
        handle.write(str(os.getpid()))

    return lock_path


def _release_bot_instance_lock(lock_path: Path) -> None:
    lock_path.unlink(missing_ok=True)


def _get_bot_token() -> str:
    load_dotenv()
    token = os.getenv("TELEGRAM_BOT_TOKEN")
    if not token:
        raise RuntimeError("TELEGRAM_BOT_TOKEN is not set")
    return token


def _session_id(message: Message) -> str:
    return str(message.chat.id)


@router.message(CommandStart())
async def cmd_start(message: Message, processor: TurnProcessor) -> None:
    language = processor.language_of(_session_id(message))
    await message.answer(
        "Hi, I'm Clara, your conversation partner for language practice.\n\n"
        "Write or send me a voice message and I'll answer and gently correct you.\n"
        f"Current language: {language}. Change it with /lang <code> "
        f"({', '.join(SUPPORTED_LANGUAGES)}).\n"
        "/stats shows your session, /clear starts over."
    )


@router.message(Command("lang"))
async def cmd_lang(message: Message, command: CommandObject, processor: TurnProcessor) -> None:
    session_id = _session_id(message)
    if not command.args:
        await message.answer(f"Current language: {processor.language_of(session_id)}")
        return
    try:
        language = processor.set_language(session_id, command.args)
    except ValueError:
        await message.answer(f"Supported languages: {', '.join(SUPPORTED_LANGUAGES)}")
        return
    await message.answer(f"Language set to {language}.")


@router.message(Command("stats"))
async def cmd_stats(message: Message, processor: TurnProcessor) -> None:
    stats = await processor.get_stats(_session_id(message))
    minutes, seconds = divmod(stats.session_duration, 60)
    await message.answer(
        f"Messages: {stats.message_count}\n"
        f"Session: {minutes}m {seconds}s\n"
        f"Voice quality: {stats.voice_quality}"
    )


@router.message(Command("clear"))
async def cmd_clear(message: Message, processor: TurnProcessor) -> None:
    removed = await processor.clear_session(_session_id(message))
    await message.answer(f"Conversation cleared ({removed} messages removed).")


@router.message(F.voice)
async def handle_voice_message(
    message: Message,
    bot: Bot,
    processor: TurnProcessor,
    monitor: InactivityMonitor,
) -> None:
    session_id = _session_id(message)
    try:
        buffer = await bot.download(message.voice)
        audio = buffer.read() if buffer is not None else b""
        result = await processor.process_audio(session_id, audio)
    except TutorError as exc:
        logger.info("Voice message rejected for session=%s: %s", session_id, exc.code)
        await message.answer(error_message(exc, processor.language_of(session_id)))
        return
    except Exception:
        logger.exception("Telegram voice handler failed for session=%s", session_id)
        await message.answer(error_message(TutorError(), processor.language_of(session_id)))
        return
    await _answer(message, result, monitor)


@router.message(F.text)
async def handle_text_message(message: Message, processor: TurnProcessor, monitor: InactivityMonitor) -> None:
    await handle_incoming_message(message, processor, monitor)


async def handle_incoming_message(message: Message, processor: TurnProcessor, monitor: InactivityMonitor) -> None:
    if message.text is None:
        return

    session_id = _session_id(message)
    try:
        logger.info("Telegram message received for session=%s", session_id)
        result = await processor.process_text(session_id, message.text)
    except TutorError as exc:
        logger.info("Message rejected for session=%s: %s", session_id, exc.code)
        await message.answer(error_message(exc, processor.language_of(session_id)))
        return
    except Exception:
        logger.exception("Telegram handler failed for session=%s", session_id)
        await message.answer(error_message(TutorError(), processor.language_of(session_id)))
        return
    await _answer(message, result, monitor)


async def _answer(message: Message, result: TurnResult, monitor: InactivityMonitor) -> None:
    session_id = _session_id(message)
    await message.answer(result.reply_text)
    if result.audio_path is not None:
        await message.answer_audio(FSInputFile(result.audio_path))
    monitor.touch(session_id, result.language)
    logger.info("Telegram reply sent to session=%s", session_id)


def build_monitor(bot: Bot, processor: TurnProcessor, event_bus: EventBus) -> InactivityMonitor:
    async def notify(session_id: str, kind: str, text: str) -> None:
        await bot.send_message(chat_id=session_id, text=text)

    monitor = InactivityMonitor(notify=notify, on_close=processor.close_session, sweep=processor.store.evict_expired)

    def on_cleared(event: Event) -> None:
        monitor.cancel(event.payload["session_id"])

    event_bus.subscribe(SESSION_CLEARED, on_cleared)
    return monitor


async def run_bot() -> None:
    token = _get_bot_token()
    bot = Bot(token=token)
    event_bus = EventBus()
    processor = build_processor(with_speech=True, event_bus=event_bus)
    monitor = build_monitor(bot, processor, event_bus)

    dispatcher = Dispatcher()
    dispatcher["processor"] = processor
    dispatcher["monitor"] = monitor
    dispatcher.include_router(router)

    try:
        monitor.start()
        await dispatcher.start_polling(bot)
    finally:
        await monitor.stop()
        processor.store.teardown()
        await bot.session.close()


def main() -> None:
    logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO))
    lock_path: Path | None = None
    try:
        lock_path = _acquire_bot_instance_lock()
        asyncio.run(run_bot())
    except BotInstanceLockError as exc:
        logger.error("%s", exc)
        raise SystemExit(1) from exc
    finally:
        if lock_path is not None:
            _release_bot_instance_lock(lock_path)


if __name__ == "__main__":
    main()
