from __future__ import annotations

from core.scheduler.inactivity import GOODBYE, PRESENCE_CHECK_NOTICE, InactivityMonitor

__all__ = ["GOODBYE", "InactivityMonitor", "PRESENCE_CHECK_NOTICE"]
