"""Tests for core/session/store.py."""

import time

from core.session.state import SessionState
from core.session.store import SessionStore


def test_get_or_create_returns_same_state():
    store = SessionStore(default_language="fr")
    state = store.get_or_create("s1")
    assert state.language == "fr"
    assert store.get_or_create("s1") is state
    assert "s1" in store
    assert len(store) == 1


def test_get_or_create_switches_language():
    store = SessionStore()
    state = store.get_or_create("s1", language="it")
    store.get_or_create("s1", language="de")
    assert state.language == "de"


def test_delete_and_holds():
    store = SessionStore()
    state = store.get_or_create("s1")
    assert store.holds(state)

    assert store.delete("s1") is state
    assert not store.holds(state)
    assert store.get("s1") is None
    assert store.delete("s1") is None

    fresh = store.get_or_create("s1")
    assert fresh is not state
    assert not store.holds(state)


def test_sessions_are_independent():
    store = SessionStore()
    first = store.get_or_create("a")
    second = store.get_or_create("b")
    first.push_recent_input("hello")
    assert list(second.recent_inputs) == []
    assert first.lock is not second.lock


def test_idle_sessions_expire():
    store = SessionStore(ttl_seconds=60)
    state = store.get_or_create("idle")
    store.get_or_create("busy")
    state.last_active = time.monotonic() - 120

    assert store.evict_expired() == ["idle"]
    assert store.session_ids() == ["busy"]


def test_get_evicts_expired_session():
    store = SessionStore(ttl_seconds=60)
    state = store.get_or_create("s1")
    state.last_active = time.monotonic() - 61
    assert store.get("s1") is None


def test_teardown_drops_everything():
    store = SessionStore()
    store.get_or_create("a")
    store.get_or_create("b")
    store.teardown()
    assert len(store) == 0


def test_put_registers_state_and_refreshes_activity():
    store = SessionStore(ttl_seconds=60)
    state = SessionState(session_id="s1", language="pt", last_active=time.monotonic() - 120)

    store.put(state)

    assert store.get("s1") is state
    assert store.holds(state)
    assert time.monotonic() - state.last_active < 60

    replacement = SessionState(session_id="s1", language="de")
    store.put(replacement)
    assert not store.holds(state)
    assert store.get("s1").language == "de"
