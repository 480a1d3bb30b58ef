"""Topic follow-up questions asked after a successful practice attempt."""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["FOLLOW_UP_TOPICS", "GENERIC_PRAISE", "FollowUpTopic", "contextual_follow_up"]


@dataclass(frozen=True, slots=True)
class FollowUpTopic:
    keywords: tuple[str, ...]
    questions: dict[str, str]


FOLLOW_UP_TOPICS: tuple[FollowUpTopic, ...] = (
    FollowUpTopic(
        keywords=("guitar", "guitarra", "guitare", "chitarra", "gitarre"),
        questions={
            "en": "Perfect! Do you play guitar?",
            "es": "¡Perfecto! ¿Tocas la guitarra?",
            "fr": "Parfait! Tu joues de la guitare?",
            "it": "Perfetto! Suoni la chitarra?",
            "de": "Perfekt! Spielst du Gitarre?",
            "pt": "Perfeito! Tocas guitarra?",
        },
    ),
    FollowUpTopic(
        keywords=("music", "música", "musique", "musica", "musik"),
        questions={
            "en": "Great! What type of music do you like?",
            "es": "¡Excelente! ¿Qué tipo de música te gusta?",
            "fr": "Excellent! Quel type de musique aimes-tu?",
            "it": "Eccellente! Che tipo di musica ti piace?",
            "de": "Ausgezeichnet! Was für Musik hörst du gern?",
            "pt": "Excelente! Que tipo de música gostas?",
        },
    ),
    FollowUpTopic(
        keywords=("book", "libro", "livre", "buch"),
        questions={
            "en": "Excellent! What kind of books do you enjoy?",
            "es": "¡Muy bien! ¿Qué tipo de libros te gustan?",
            "fr": "Très bien! Quel genre de livres aimes-tu?",
            "it": "Molto bene! Che genere di libri ti piacciono?",
            "de": "Sehr gut! Was für Bücher liest du gern?",
            "pt": "Muito bem! Que género de livros gostas?",
        },
    ),
    FollowUpTopic(
        keywords=("food", "comida", "nourriture", "cibo", "essen"),
        questions={
            "en": "Perfect! Do you like cooking?",
            "es": "¡Perfecto! ¿Te gusta cocinar?",
            "fr": "Parfait! Tu aimes cuisiner?",
            "it": "Perfetto! Ti piace cucinare?",
            "de": "Perfekt! Kochst du gern?",
            "pt": "Perfeito! Gostas de cozinhar?",
        },
    ),
    FollowUpTopic(
        keywords=("travel", "viaje", "voyage", "viaggio", "reise"),
        questions={
            "en": "Great! Do you like to travel?",
            "es": "¡Excelente! ¿Te gusta viajar?",
            "fr": "Excellent! Tu aimes voyager?",
            "it": "Eccellente! Ti piace viaggiare?",
            "de": "Ausgezeichnet! Reist du gern?",
            "pt": "Excelente! Gostas de viajar?",
        },
    ),
)

GENERIC_PRAISE: dict[str, str] = {
    "en": "Perfect! That sounded great!",
    "es": "¡Perfecto! ¡Sonó genial!",
    "fr": "Parfait! C'était très bien!",
    "it": "Perfetto! È suonato benissimo!",
    "de": "Perfekt! Das klang toll!",
    "pt": "Perfeito! Soou muito bem!",
}


def contextual_follow_up(corrected_text: str, language: str) -> str:
    """Map the practiced phrase to a topic question in *language*.

    Words are scanned left to right; the first word containing any topic
    keyword decides the topic. Unknown languages fall back to English.
    """
    for word in corrected_text.lower().split():
        for topic in FOLLOW_UP_TOPICS:
            if any(keyword in word for keyword in topic.keywords):
                return topic.questions.get(language, topic.questions["en"])
    return GENERIC_PRAISE.get(language, GENERIC_PRAISE["en"])
