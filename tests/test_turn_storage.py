import asyncio
from datetime import datetime, timezone

from core.journal.storage import TurnStorage
from core.session.state import ASSISTANT, USER, Turn


def test_turns_round_trip_in_order(tmp_path):
    async def scenario() -> None:
        storage = TurnStorage(db_path=tmp_path / "test.db")
        ts = datetime(2026, 3, 1, 10, 0, tzinfo=timezone.utc)

        await storage.save_turn("s1", Turn(role=USER, content="Ciao!", timestamp=ts))
        await storage.save_turns(
            "s1",
            [
                Turn(role=ASSISTANT, content="Ciao! Come stai?", timestamp=ts),
                Turn(role=USER, content="Ciao!", timestamp=ts, repetition_type="memorization"),
            ],
        )
        await storage.save_turn("s2", Turn(role=USER, content="other session"))

        history = await storage.load_history("s1")
        assert [turn.content for turn in history] == ["Ciao!", "Ciao! Come stai?", "Ciao!"]
        assert history[0].timestamp == ts
        assert history[2].repetition_type == "memorization"
        assert history[1].repetition_type is None

    asyncio.run(scenario())


def test_counts_start_time_and_clear(tmp_path):
    async def scenario() -> None:
        storage = TurnStorage(db_path=tmp_path / "test.db")
        start = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
        assert await storage.session_started_at("s1") is None

        await storage.save_turn("s1", Turn(role=USER, content="hello there", timestamp=start))
        await storage.save_turn("s1", Turn(role=ASSISTANT, content="Hi!"))
        await storage.save_turn("s1", Turn(role=USER, content="how are you"))

        assert await storage.count_turns("s1") == 3
        assert await storage.count_user_turns("s1") == 2
        assert await storage.session_started_at("s1") == start

        assert await storage.clear_session("s1") == 3
        assert await storage.load_history("s1") == []
        assert await storage.count_turns("s1") == 0

    asyncio.run(scenario())
