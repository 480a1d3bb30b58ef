"""Localized fixed messages the engine emits without the language model."""

from __future__ import annotations

from core.errors import (
    BackgroundAudioError,
    EmptyAudioError,
    MessageTooLongError,
    NoSpeechDetectedError,
    TutorError,
)

__all__ = [
    "CLARIFICATION",
    "FALLBACK_APOLOGY",
    "GOODBYES",
    "NO_SPEECH",
    "PRACTICE_RETRY",
    "PRESENCE_CHECK",
    "TOO_LONG",
    "error_message",
    "localized",
]

FALLBACK_LANGUAGE = "en"

# Poor-quality transcript: ask the learner to repeat.
CLARIFICATION: dict[str, str] = {
    "es": "No te escuché bien. ¿Podrías repetir lo que dijiste?",
    "en": "I didn't catch that clearly. Could you repeat what you said?",
    "fr": "Je n'ai pas bien entendu. Pourriez-vous répéter ce que vous avez dit?",
    "it": "Non ho sentito bene. Potresti ripetere quello che hai detto?",
    "de": "Ich habe das nicht gut verstanden. Könnten Sie wiederholen, was Sie gesagt haben?",
    "pt": "Não ouvi bem. Poderia repetir o que disse?",
}

# Provider timeout or failure.
FALLBACK_APOLOGY: dict[str, str] = {
    "es": "Perdona, tuve un problema para responder. ¿Puedes intentarlo de nuevo?",
    "en": "Sorry, I had trouble answering just now. Could you try again?",
    "fr": "Désolée, j'ai eu un souci pour répondre. Tu peux réessayer?",
    "it": "Scusa, ho avuto un problema a rispondere. Puoi riprovare?",
    "de": "Entschuldige, ich konnte gerade nicht antworten. Versuchst du es noch einmal?",
    "pt": "Desculpa, tive um problema ao responder. Podes tentar outra vez?",
}

# Empty or silent input.
NO_SPEECH: dict[str, str] = {
    "es": "No escuché nada. ¿Puedes hablar un poco más cerca del micrófono?",
    "en": "I didn't hear anything. Could you speak a little closer to the microphone?",
    "fr": "Je n'ai rien entendu. Tu peux parler un peu plus près du micro?",
    "it": "Non ho sentito niente. Puoi parlare un po' più vicino al microfono?",
    "de": "Ich habe nichts gehört. Kannst du etwas näher am Mikrofon sprechen?",
    "pt": "Não ouvi nada. Podes falar um pouco mais perto do microfone?",
}

# Input over the length limit.
TOO_LONG: dict[str, str] = {
    "es": "Tu mensaje es demasiado largo. ¿Puedes decirlo más corto?",
    "en": "Your message is too long. Could you say it in fewer words?",
    "fr": "Ton message est trop long. Tu peux le dire plus brièvement?",
    "it": "Il tuo messaggio è troppo lungo. Puoi dirlo in modo più breve?",
    "de": "Deine Nachricht ist zu lang. Kannst du es kürzer sagen?",
    "pt": "A tua mensagem é demasiado longa. Podes dizê-lo de forma mais curta?",
}

# Failed practice attempt; formatted with the corrected text.
PRACTICE_RETRY: dict[str, str] = {
    "es": "Intentémoslo otra vez. La forma correcta es: \"{corrected}\". ¿Puedes repetirlo?",
    "en": "Let's try that again. The correct way to say it is: \"{corrected}\". Can you repeat it?",
    "fr": "Essayons encore. La bonne façon de le dire est : \"{corrected}\". Tu peux le répéter?",
    "it": "Proviamo di nuovo. Il modo corretto è: \"{corrected}\". Puoi ripeterlo?",
    "de": "Versuchen wir es noch einmal. Richtig heißt es: \"{corrected}\". Kannst du es wiederholen?",
    "pt": "Vamos tentar outra vez. A forma correta é: \"{corrected}\". Podes repetir?",
}

PRESENCE_CHECK: dict[str, str] = {
    "es": "¿Estás ahí?",
    "en": "Are you there?",
    "fr": "Tu es là ?",
    "it": "Ci sei?",
    "de": "Bist du da?",
    "pt": "Estás aí?",
}

GOODBYES: dict[str, list[str]] = {
    "es": [
        "¡Parece que tomamos una pausa! Te espero cuando quieras seguir practicando.",
        "Me encantó platicar contigo. ¡Nos vemos pronto!",
        "Por ahora cierro la conversación, pero vuelve cuando gustes.",
    ],
    "en": [
        "Looks like we took a break. Catch you later!",
        "It was great chatting. Talk to you again soon!",
        "I'll close the chat for now. Just write whenever you're ready.",
    ],
    "fr": [
        "On dirait qu'on fait une petite pause. Reviens quand tu veux continuer.",
        "C'était sympa de parler avec toi. À très bientôt !",
        "Je me déconnecte un moment. On reprend quand tu veux !",
    ],
    "it": [
        "Sembra che ci siamo presi una pausa. Torna quando vuoi!",
        "È stato bello parlare con te. A presto!",
        "Chiudo la conversazione per ora. Riprendiamo quando ti va.",
    ],
    "de": [
        "Wir machen wohl eine kurze Pause. Bis bald!",
        "Schön, mit dir zu sprechen. Wir sehen uns!",
        "Ich beende das Gespräch für jetzt. Schreib einfach, wenn du weitermachen willst.",
    ],
    "pt": [
        "Parece que fizemos uma pausa. Até logo!",
        "Foi ótimo conversar contigo. Falamos em breve!",
        "Vou fechar a conversa por agora. Volta quando quiseres.",
    ],
}


def localized(table: dict, language: str):
    """Return *table*'s entry for *language*, falling back to English."""
    return table.get(language, table[FALLBACK_LANGUAGE])


def error_message(exc: TutorError, language: str) -> str:
    """Short learner-facing text for a recoverable error."""
    if isinstance(exc, (EmptyAudioError, NoSpeechDetectedError, BackgroundAudioError)):
        return localized(NO_SPEECH, language)
    if isinstance(exc, MessageTooLongError):
        return localized(TOO_LONG, language)
    return localized(FALLBACK_APOLOGY, language)
