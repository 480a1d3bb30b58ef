"""Tests for the transcript quality gate and the repetition detector."""

import pytest

from core.analysis.repetition import ERROR, MEMORIZATION, PLAYFUL, PRACTICE, RepetitionDetector
from core.analysis.transcript_quality import TranscriptQualityClassifier, is_poor_quality
from core.session.state import PendingCorrection, SessionState


def _state(*inputs: str) -> SessionState:
    state = SessionState(session_id="s1", language="en")
    for text in inputs:
        state.push_recent_input(text)
    return state


@pytest.mark.parametrize("text", ["CONVERSATION", "conversation", "  Talking ", "ok", "a", "BLAH"])
def test_poor_quality_inputs(text):
    assert is_poor_quality(text)


@pytest.mark.parametrize("text", ["hi", "No", "Hola", "I like pizza", "Blah", "ciao bella"])
def test_acceptable_inputs(text):
    assert not is_poor_quality(text)


def test_quality_lists_are_injectable():
    classifier = TranscriptQualityClassifier(valid_words=["ok"], noise_words=["umm"])
    assert not classifier.is_poor_quality("ok")
    assert classifier.is_poor_quality("UMM")
    assert not classifier.is_poor_quality("conversation")


def test_exact_repeat_of_short_sentence_is_memorization():
    detector = RepetitionDetector()
    result = detector.detect(_state("I like pizza"), "I like pizza.")
    assert result.is_repetition
    assert result.type == MEMORIZATION


def test_poor_quality_gate_suppresses_detection():
    detector = RepetitionDetector()
    result = detector.detect(_state("CONVERSATION"), "CONVERSATION")
    assert not result.is_repetition
    assert result.type is None


def test_affectionate_marker_makes_repeat_playful():
    detector = RepetitionDetector()
    result = detector.detect(_state("ciao amore mio"), "Ciao amore mio!")
    assert result.type == PLAYFUL


def test_long_repeat_is_error():
    sentence = "Yesterday I went to the market and bought many vegetables for dinner"
    assert len(sentence) >= 50
    result = RepetitionDetector().detect(_state(sentence), sentence)
    assert result.is_repetition
    assert result.type == ERROR


def test_long_repeat_with_common_phrase_is_memorization():
    sentence = "Buongiorno signora, mi chiamo Giovanni e vengo dalla Spagna, piacere"
    assert len(sentence) >= 50
    result = RepetitionDetector().detect(_state(sentence), sentence)
    assert result.type == MEMORIZATION


def test_only_the_most_recent_input_counts():
    detector = RepetitionDetector()
    result = detector.detect(_state("I like pizza", "I like pasta"), "I like pizza")
    assert not result.is_repetition


def test_no_history_is_not_a_repeat():
    assert not RepetitionDetector().detect(_state(), "I like pizza").is_repetition


def test_close_match_to_pending_correction_is_practice():
    state = _state("I breathe from the nose")
    state.pending_correction = PendingCorrection("I breathe from the nose", "through the nose")
    result = RepetitionDetector().detect(state, "Through the nose!")
    assert result.is_repetition
    assert result.type == PRACTICE


def test_far_from_pending_correction_falls_through():
    state = _state("something else entirely")
    state.pending_correction = PendingCorrection("I breathe from the nose", "through the nose")
    assert not RepetitionDetector().detect(state, "from the nose").is_repetition


def test_detect_is_deterministic_and_does_not_mutate_state():
    detector = RepetitionDetector()
    state = _state("I like pizza")
    first = detector.detect(state, "I like pizza")
    second = detector.detect(state, "I like pizza")
    assert first == second
    assert list(state.recent_inputs) == ["I like pizza"]


def test_recent_input_window_keeps_three():
    state = _state("one", "two", "three", "four")
    assert list(state.recent_inputs) == ["two", "three", "four"]
