"""Tests for core/text: normalization and the shared similarity score."""

import pytest

from core.text.normalize import normalize
from core.text.similarity import levenshtein_distance, similarity

SAMPLES = [
    "",
    "I like pizza.",
    "  Hello,   WORLD!  ",
    "¿Cómo estás?",
    "It's \"quoted\"; isn't it: yes",
    "through the nose",
    "from the nose",
]


def test_normalize_strips_punctuation_and_collapses_whitespace():
    assert normalize("  Hello,   WORLD!  ") == "hello world"
    assert normalize("It's fine: really; \"yes\"") == "its fine really yes"


def test_normalize_keeps_other_characters():
    assert normalize("¿Cómo estás?") == "¿cómo estás"


@pytest.mark.parametrize("text", SAMPLES)
def test_normalize_is_idempotent(text):
    assert normalize(normalize(text)) == normalize(text)


def test_levenshtein_distance_basics():
    assert levenshtein_distance("", "") == 0
    assert levenshtein_distance("abc", "") == 3
    assert levenshtein_distance("kitten", "sitting") == 3
    assert levenshtein_distance("flaw", "lawn") == 2


@pytest.mark.parametrize("a", SAMPLES)
@pytest.mark.parametrize("b", SAMPLES)
def test_similarity_is_symmetric_and_bounded(a, b):
    score = similarity(a, b)
    assert score == similarity(b, a)
    assert 0.0 <= score <= 1.0


@pytest.mark.parametrize("text", SAMPLES)
def test_similarity_with_itself_is_one(text):
    assert similarity(text, text) == 1.0


def test_similarity_ignores_case_and_punctuation():
    assert similarity("I like pizza", "i like PIZZA.") == 1.0


def test_similarity_of_practice_phrases():
    # 5 edits over 16 characters
    assert similarity("through the nose", "from the nose") == pytest.approx(1 - 5 / 16)
    assert similarity("through the nose", "from the nose") < 0.8
