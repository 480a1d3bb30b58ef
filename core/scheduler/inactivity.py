"""InactivityMonitor: explicit per-session deadlines checked by a ticker.

Every learner activity pushes the session's warning deadline
``warning_seconds`` ahead. When it passes, a localized "are you there?"
is sent and a close deadline ``close_seconds`` ahead is armed; when that
one passes too, a goodbye is sent and the session is closed.

The ticker is an APScheduler interval job running inside the existing
asyncio loop; :meth:`InactivityMonitor.tick` can also be called directly
with an explicit ``now``.

Usage::

    monitor = InactivityMonitor(notify=send_text, on_close=processor.close_session, sweep=store.evict_expired)
    monitor.start()
    monitor.touch("chat-42", "it")
    await monitor.stop()
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from config import INACTIVITY_CLOSE_SECONDS, INACTIVITY_TICK_SECONDS, INACTIVITY_WARNING_SECONDS
from core.replies.messages import GOODBYES, PRESENCE_CHECK, localized

__all__ = ["GOODBYE", "PRESENCE_CHECK_NOTICE", "InactivityMonitor"]

logger = logging.getLogger(__name__)

PRESENCE_CHECK_NOTICE = "presence_check"
GOODBYE = "goodbye"

Notify = Callable[[str, str, str], Awaitable[None]]
OnClose = Callable[[str], Awaitable[object]]
Sweep = Callable[[], list[str]]


@dataclass(slots=True)
class _Deadline:
    language: str
    warn_at: float
    close_at: float | None = None


class InactivityMonitor:
    """Tracks idle sessions and nudges, then closes, them.

    Parameters
    ----------
    notify:
        ``await notify(session_id, kind, text)`` delivers a message to the
        learner; *kind* is :data:`PRESENCE_CHECK_NOTICE` or :data:`GOODBYE`.
    on_close:
        Awaited with the session id after the goodbye was sent.
    sweep:
        Called on every tick; returns session ids dropped elsewhere (for
        example idle sessions evicted from the session store), whose
        deadlines are then cancelled.
    warning_seconds / close_seconds:
        Idle time before the presence check, then before the goodbye.
    tick_seconds:
        Interval of the APScheduler job that calls :meth:`tick`.
    """

    def __init__(
        self,
        notify: Notify,
        on_close: OnClose | None = None,
        *,
        sweep: Sweep | None = None,
        warning_seconds: float = INACTIVITY_WARNING_SECONDS,
        close_seconds: float = INACTIVITY_CLOSE_SECONDS,
        tick_seconds: float = INACTIVITY_TICK_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        rng: random.Random | None = None,
    ) -> None:
        self._notify = notify
        self._on_close = on_close
        self._sweep = sweep
        self.warning_seconds = warning_seconds
        self.close_seconds = close_seconds
        self.tick_seconds = tick_seconds
        self._clock = clock
        self._rng = rng or random.Random()
        self._deadlines: dict[str, _Deadline] = {}
        self._scheduler: AsyncIOScheduler | None = None

    # ── Deadlines ────────────────────────────────────────────────

    def touch(self, session_id: str, language: str, now: float | None = None) -> None:
        """Register activity: re-arm the warning, disarm any pending close."""
        now = self._clock() if now is None else now
        self._deadlines[session_id] = _Deadline(language=language, warn_at=now + self.warning_seconds)

    def cancel(self, session_id: str) -> None:
        self._deadlines.pop(session_id, None)

    def watched(self) -> list[str]:
        return list(self._deadlines)

    async def tick(self, now: float | None = None) -> list[tuple[str, str]]:
        """Fire every deadline that has passed; return ``(session_id, kind)`` pairs."""
        now = self._clock() if now is None else now
        fired: list[tuple[str, str]] = []

        for session_id, deadline in list(self._deadlines.items()):
            if deadline.close_at is not None:
                if now < deadline.close_at:
                    continue
                self._deadlines.pop(session_id, None)
                text = self._rng.choice(localized(GOODBYES, deadline.language))
                await self._send(session_id, GOODBYE, text)
                if self._on_close is not None:
                    try:
                        await self._on_close(session_id)
                    except Exception as exc:
                        logger.warning("Closing idle session=%s failed: %s", session_id, exc)
                fired.append((session_id, GOODBYE))
                logger.info("Closed idle session=%s", session_id)
            elif now >= deadline.warn_at:
                deadline.close_at = now + self.close_seconds
                await self._send(session_id, PRESENCE_CHECK_NOTICE, localized(PRESENCE_CHECK, deadline.language))
                fired.append((session_id, PRESENCE_CHECK_NOTICE))
                logger.debug("Presence check sent to session=%s", session_id)

        if self._sweep is not None:
            for session_id in self._sweep():
                self.cancel(session_id)
        return fired

    # ── Ticker ───────────────────────────────────────────────────

    def start(self) -> None:
        if self._scheduler is not None:
            logger.warning("InactivityMonitor already started")
            return

        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self.tick,
            trigger=IntervalTrigger(seconds=self.tick_seconds),
            id="inactivity_tick",
            name="Inactivity deadlines",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()
        logger.info(
            "InactivityMonitor started: warning=%ss close=%ss tick=%ss",
            self.warning_seconds,
            self.close_seconds,
            self.tick_seconds,
        )

    async def stop(self) -> None:
        if self._scheduler is not None:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("InactivityMonitor stopped")
        self._deadlines.clear()

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None

    async def _send(self, session_id: str, kind: str, text: str) -> None:
        try:
            await self._notify(session_id, kind, text)
        except Exception as exc:
            logger.warning("Inactivity notice %s to session=%s failed: %s", kind, session_id, exc)
