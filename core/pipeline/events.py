from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)

TURN_PROCESSED = "turn.processed"
TURN_FALLBACK = "turn.fallback"
CORRECTION_REGISTERED = "correction.registered"
PRACTICE_RESOLVED = "practice.resolved"
SESSION_CLEARED = "session.cleared"


@dataclass(slots=True)
class Event:
    name: str
    payload: dict[str, Any]
    timestamp: str


class EventBus:
    def __init__(self) -> None:
        self._subscribers: dict[str, list[Callable[[Event], None]]] = defaultdict(list)

    def subscribe(self, event_name: str, handler: Callable[[Event], None]) -> None:
        self._subscribers[event_name].append(handler)

    def unsubscribe(self, event_name: str, handler: Callable[[Event], None]) -> None:
        handlers = self._subscribers.get(event_name, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event_name: str, payload: dict[str, Any]) -> Event:
        event = Event(
            name=event_name,
            payload=payload,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        # A failing subscriber must not break the turn that emitted the event.
        for handler in list(self._subscribers.get(event_name, [])):
            try:
                handler(event)
            except Exception:
                logger.exception("Event handler failed for %s", event_name)
        return event
