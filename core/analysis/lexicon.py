"""Word lists consumed by the transcript gate and the repetition detector.

Kept as plain data so the content can evolve per language without touching
the matching code. Every list is injectable through the constructors of
:class:`~core.analysis.transcript_quality.TranscriptQualityClassifier` and
:class:`~core.analysis.repetition.RepetitionDetector`.
"""

from __future__ import annotations

# Short utterances that must never be treated as transcription noise.
VALID_SHORT_WORDS: frozenset[str] = frozenset(
    {
        # en
        "hi", "hello", "hey", "good", "morning", "afternoon", "evening", "night",
        "yes", "no", "thanks", "thank", "you",
        # es
        "hola", "buenos", "buenas", "dias", "tardes", "noches", "si", "gracias",
        # fr
        "bonjour", "bonsoir", "salut", "oui", "non", "merci",
        # it
        "ciao", "buongiorno", "buonasera", "grazie",
        # de
        "hallo", "guten", "tag", "abend", "ja", "nein", "danke",
        # pt
        "ola", "bom", "dia", "tarde", "noite", "sim", "nao", "obrigado",
    }
)

# Meta-words the speech recognizer emits when it hears people talking
# about talking rather than actual learner speech. Matched as whole strings.
META_NOISE_WORDS: tuple[str, ...] = (
    "conversacion",
    "conversing",
    "conversation",
    "conversar",
    "talking",
    "hablando",
    "parlando",
    "speaking",
)

# Substring markers that make an exact repeat "playful".
AFFECTIONATE_MARKERS: tuple[str, ...] = ("amore", "caro", "tesoro", "bello")

# Substring markers of phrases learners drill on purpose.
COMMON_LEARNER_PHRASES: tuple[str, ...] = (
    "ciao",
    "grazie",
    "prego",
    "scusi",
    "come stai",
    "buongiorno",
    "buonasera",
    "mi chiamo",
    "dove",
    "quando",
    "perche",
    "quanto costa",
    "non capisco",
)
