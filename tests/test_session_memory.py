"""Tests for core/context/session_memory.py."""

import asyncio
from datetime import datetime, timedelta, timezone

from core.context.session_memory import SUMMARY_TEMPLATE, ConversationMemory
from core.session.state import ASSISTANT, USER, SessionState, Turn


class FakeSummarizer:
    def __init__(self) -> None:
        self.batches: list[list[Turn]] = []

    async def summarize(self, turns):
        self.batches.append(list(turns))
        return f"summary of {len(turns)} turns"


class FailingSummarizer:
    async def summarize(self, turns):
        raise RuntimeError("provider down")


class SlowSummarizer:
    async def summarize(self, turns):
        await asyncio.sleep(1)
        return "too late"


def _history(count: int) -> list[Turn]:
    start = datetime(2026, 1, 1, tzinfo=timezone.utc)
    return [
        Turn(role=USER if i % 2 == 0 else ASSISTANT, content=f"turn {i}", timestamp=start + timedelta(seconds=i))
        for i in range(count)
    ]


def test_short_history_is_kept_verbatim_without_summary():
    async def scenario() -> None:
        summarizer = FakeSummarizer()
        memory = ConversationMemory(summarizer)
        state = SessionState(session_id="s1")
        history = _history(12)

        await memory.update(state, history)

        assert state.memory_window == history
        assert state.summary == ""
        assert summarizer.batches == []
        assert state.memory_primed

    asyncio.run(scenario())


def test_overflow_is_summarized_and_window_is_last_thirty():
    async def scenario() -> None:
        summarizer = FakeSummarizer()
        memory = ConversationMemory(summarizer)
        state = SessionState(session_id="s1")
        history = _history(40)

        await memory.update(state, history)

        assert len(state.memory_window) == 30
        assert state.memory_window == history[-30:]
        assert state.summary == "summary of 10 turns"
        assert summarizer.batches == [history[:10]]

    asyncio.run(scenario())


def test_summary_grows_and_only_new_overflow_is_sent():
    async def scenario() -> None:
        summarizer = FakeSummarizer()
        memory = ConversationMemory(summarizer)
        state = SessionState(session_id="s1")

        await memory.update(state, _history(40))
        await memory.update(state, _history(42))

        assert summarizer.batches[1] == _history(42)[10:12]
        assert state.summary == "summary of 10 turns\n\nsummary of 2 turns"
        assert len(state.memory_window) == 30

    asyncio.run(scenario())


def test_summarization_failure_still_truncates_window():
    async def scenario() -> None:
        memory = ConversationMemory(FailingSummarizer())
        state = SessionState(session_id="s1")

        await memory.update(state, _history(35))

        assert len(state.memory_window) == 30
        assert state.summary == ""

    asyncio.run(scenario())


def test_summarization_timeout_is_skipped():
    async def scenario() -> None:
        memory = ConversationMemory(SlowSummarizer(), summary_timeout=0.01)
        state = SessionState(session_id="s1")

        await memory.update(state, _history(31))

        assert state.summary == ""
        assert len(state.memory_window) == 30
        assert state.summarized_count == 1

    asyncio.run(scenario())


def test_read_for_generation_prepends_summary_turn():
    async def scenario() -> None:
        memory = ConversationMemory(FakeSummarizer())
        state = SessionState(session_id="s1")
        history = _history(33)
        await memory.update(state, history)

        turns = memory.read_for_generation(state)

        assert len(turns) == 31
        assert turns[0].role == ASSISTANT
        assert turns[0].content == SUMMARY_TEMPLATE.format(summary="summary of 3 turns")
        assert turns[0].timestamp == history[3].timestamp - timedelta(seconds=1)
        assert turns[1:] == history[3:]

    asyncio.run(scenario())


def test_clear_resets_memory():
    async def scenario() -> None:
        memory = ConversationMemory(FakeSummarizer())
        state = SessionState(session_id="s1")
        await memory.update(state, _history(35))

        memory.clear(state)

        assert state.memory_window == []
        assert state.summary == ""
        assert state.summarized_count == 0
        assert not state.memory_primed

    asyncio.run(scenario())
