"""Tests for canned reply pools and localized messages."""

import random

import pytest

from core.analysis.repetition import ERROR, MEMORIZATION, PLAYFUL, PRACTICE
from core.errors import BackgroundAudioError, MessageTooLongError, ProviderTimeoutError
from core.replies.messages import (
    CLARIFICATION,
    FALLBACK_APOLOGY,
    GOODBYES,
    NO_SPEECH,
    PRACTICE_RETRY,
    PRESENCE_CHECK,
    TOO_LONG,
    error_message,
    localized,
)
from core.replies.variety import REPETITION_RESPONSES, ResponseVarietyPicker
from core.session.state import SessionState


def _state(language: str = "it") -> SessionState:
    return SessionState(session_id="s1", language=language)


@pytest.mark.parametrize("category", [ERROR, PLAYFUL, MEMORIZATION, PRACTICE])
def test_pick_returns_distinct_phrases_until_pool_exhausted(category):
    picker = ResponseVarietyPicker(rng=random.Random(7))
    state = _state("en")
    pool = picker.pool(category, "en")

    picked = [picker.pick(state, category) for _ in pool]
    assert len(set(picked)) == len(pool)
    assert set(picked) == set(pool)


def test_exhausted_pool_resets_and_returns_first_phrase():
    picker = ResponseVarietyPicker(rng=random.Random(1))
    state = _state("it")
    pool = picker.pool(MEMORIZATION, "it")
    for _ in pool:
        picker.pick(state, MEMORIZATION)

    assert picker.pick(state, MEMORIZATION) == pool[0]
    assert state.used_patterns[MEMORIZATION] == set()


def test_used_phrases_are_tracked_per_category_and_session():
    picker = ResponseVarietyPicker(rng=random.Random(3))
    first, second = _state(), _state()
    picker.pick(first, ERROR)
    assert len(first.used_patterns[ERROR]) == 1
    assert PLAYFUL not in first.used_patterns
    assert second.used_patterns == {}


def test_unknown_language_and_category_fall_back():
    picker = ResponseVarietyPicker()
    assert picker.pool(PLAYFUL, "xx") == REPETITION_RESPONSES[PLAYFUL]["en"]
    assert picker.pool("unknown", "es") == REPETITION_RESPONSES[ERROR]["es"]


def test_every_pool_covers_six_languages():
    for category, by_language in REPETITION_RESPONSES.items():
        assert set(by_language) == {"es", "en", "fr", "it", "de", "pt"}, category
        assert all(by_language.values()), category


@pytest.mark.parametrize("table", [CLARIFICATION, FALLBACK_APOLOGY, NO_SPEECH, PRACTICE_RETRY, PRESENCE_CHECK, TOO_LONG, GOODBYES])
def test_message_tables_cover_six_languages(table):
    assert set(table) == {"es", "en", "fr", "it", "de", "pt"}


def test_localized_falls_back_to_english():
    assert localized(CLARIFICATION, "ja") == CLARIFICATION["en"]
    assert localized(CLARIFICATION, "fr") == CLARIFICATION["fr"]


def test_error_message_by_error_kind():
    assert error_message(BackgroundAudioError(), "de") == NO_SPEECH["de"]
    assert error_message(MessageTooLongError(), "pt") == TOO_LONG["pt"]
    assert error_message(ProviderTimeoutError(), "es") == FALLBACK_APOLOGY["es"]
