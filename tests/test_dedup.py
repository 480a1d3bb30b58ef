"""Tests for core/context/dedup.py."""

import pytest

from core.context.dedup import ReplyDeduplicator
from core.session.state import ASSISTANT, USER, Turn
from core.text.similarity import similarity


def _a(text: str) -> Turn:
    return Turn(role=ASSISTANT, content=text)


def _u(text: str) -> Turn:
    return Turn(role=USER, content=text)


def test_near_duplicate_consecutive_assistant_turn_is_dropped():
    first, second = _a("Great job, Anna!"), _a("Great job, Ana!")
    assert similarity(first.content, second.content) > 0.7

    assert ReplyDeduplicator().filter_history_for_prompt([first, second]) == [first]


def test_distinct_consecutive_assistant_turns_are_kept():
    # 10 edits over 19 characters: below the near-duplicate threshold
    first, second = _a("Great job!"), _a("Great job, well done!")
    assert similarity(first.content, second.content) == pytest.approx(1 - 10 / 19)

    assert ReplyDeduplicator().filter_history_for_prompt([first, second]) == [first, second]


def test_exact_duplicate_anywhere_earlier_is_dropped():
    turns = [_u("hi"), _a("Hello! How are you?"), _u("fine"), _a("hello, how are you"), _u("ok then")]
    kept = ReplyDeduplicator().filter_history_for_prompt(turns)
    assert [turn.content for turn in kept] == ["hi", "Hello! How are you?", "fine", "ok then"]


def test_similar_replies_separated_by_user_turn_are_kept():
    turns = [_a("Great job, Anna!"), _u("thanks"), _a("Great job, Ana!")]
    assert ReplyDeduplicator().filter_history_for_prompt(turns) == turns


def test_user_turns_are_never_dropped():
    turns = [_u("I like pizza"), _u("I like pizza"), _u("I like pizza.")]
    assert ReplyDeduplicator().filter_history_for_prompt(turns) == turns


def test_is_immediate_repeat_looks_at_last_three_assistant_replies():
    history = [
        _a("Reply one."),
        _u("a"),
        _a("Reply two."),
        _u("b"),
        _a("Reply three."),
        _u("c"),
        _a("Reply four."),
    ]
    dedup = ReplyDeduplicator()
    assert dedup.recent_replies(history) == ["Reply two.", "Reply three.", "Reply four."]
    assert dedup.is_immediate_repeat(history, "reply TWO")
    assert not dedup.is_immediate_repeat(history, "Reply one.")
    assert not dedup.is_immediate_repeat(history, "Something new")


def test_is_immediate_repeat_on_empty_history():
    assert not ReplyDeduplicator().is_immediate_repeat([], "Hello")
