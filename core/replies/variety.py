"""Canned replies for repeated user turns, without reissuing the same phrase.

The used-phrase set is tracked per session and per category. It is cleared
only when every phrase of the category pool has been used; that reset call
returns the pool's first element deterministically.
"""

from __future__ import annotations

import logging
import random

from core.analysis.repetition import ERROR, MEMORIZATION, PLAYFUL, PRACTICE
from core.session.state import SessionState

__all__ = ["REPETITION_RESPONSES", "ResponseVarietyPicker"]

logger = logging.getLogger(__name__)

REPETITION_RESPONSES: dict[str, dict[str, list[str]]] = {
    ERROR: {
        "it": [
            "Hai detto di nuovo la stessa frase, va tutto bene! Vuoi provare con una variazione?",
            "Ho sentito la stessa frase di prima. Tutto ok? Proviamo qualcosa di nuovo?",
            "Stessa frase! Nessun problema, capita. Vuoi dire qualcos'altro?",
        ],
        "es": [
            "Dijiste la misma frase otra vez, ¡no pasa nada! ¿Quieres probar con una variación?",
            "Escuché la misma frase de antes. ¿Todo bien? ¿Probamos algo nuevo?",
            "¡La misma frase! No hay problema, pasa. ¿Quieres decir otra cosa?",
        ],
        "en": [
            "You said the same sentence again, that's fine! Want to try a variation?",
            "I heard the same sentence as before. All good? Shall we try something new?",
            "Same sentence! No problem, it happens. Want to say something else?",
        ],
        "fr": [
            "Tu as redit la même phrase, pas de souci ! Tu veux essayer une variante?",
            "J'ai entendu la même phrase qu'avant. Tout va bien? On essaie autre chose?",
            "Même phrase ! Aucun problème, ça arrive. Tu veux dire autre chose?",
        ],
        "de": [
            "Du hast denselben Satz noch einmal gesagt, alles gut! Willst du eine Variante probieren?",
            "Ich habe denselben Satz wie vorhin gehört. Alles okay? Probieren wir etwas Neues?",
            "Derselbe Satz! Kein Problem, das passiert. Möchtest du etwas anderes sagen?",
        ],
        "pt": [
            "Disseste a mesma frase outra vez, está tudo bem! Queres tentar uma variação?",
            "Ouvi a mesma frase de antes. Tudo bem? Experimentamos algo novo?",
            "A mesma frase! Sem problema, acontece. Queres dizer outra coisa?",
        ],
    },
    PLAYFUL: {
        "it": [
            "Amore mio... di nuovo? Hai un'anima romantica! Proviamo con una nuova parola tenera?",
            "Che dolce! Mi piace quando ripeti le parole affettuose. Ora proviamo 'tesoro' o 'caro'?",
            "Aww, di nuovo! Ti piacciono le parole romantiche. Scopriamo altre espressioni dolci?",
        ],
        "es": [
            "¿Otra vez? ¡Tienes alma romántica! ¿Probamos una nueva palabra cariñosa?",
            "¡Qué dulce! Me gusta cuando repites palabras cariñosas. ¿Probamos 'cariño' o 'tesoro'?",
            "¡Otra vez! Te gustan las palabras románticas. ¿Descubrimos más expresiones dulces?",
        ],
        "en": [
            "Again? You have a romantic soul! Shall we try a new sweet word?",
            "How sweet! I like it when you repeat affectionate words. Now try 'sweetheart' or 'darling'?",
            "Aww, again! You like romantic words. Shall we discover more sweet expressions?",
        ],
        "fr": [
            "Encore? Tu as une âme romantique ! On essaie un nouveau mot tendre?",
            "Trop mignon ! J'aime quand tu répètes les mots affectueux. On essaie 'mon trésor' ou 'mon chéri'?",
            "Encore une fois ! Tu aimes les mots romantiques. On découvre d'autres expressions douces?",
        ],
        "de": [
            "Schon wieder? Du hast eine romantische Seele! Probieren wir ein neues Kosewort?",
            "Wie süß! Ich mag es, wenn du liebevolle Wörter wiederholst. Versuchen wir 'Schatz' oder 'Liebling'?",
            "Noch einmal! Du magst romantische Wörter. Entdecken wir weitere süße Ausdrücke?",
        ],
        "pt": [
            "Outra vez? Tens uma alma romântica! Experimentamos uma nova palavra carinhosa?",
            "Que doce! Gosto quando repetes palavras carinhosas. Experimentamos 'querido' ou 'tesouro'?",
            "Outra vez! Gostas de palavras românticas. Descobrimos mais expressões doces?",
        ],
    },
    MEMORIZATION: {
        "it": [
            "Ottima ripetizione! Vuoi trasformarla ora in una domanda o aggiungere un aggettivo?",
            "Perfetto! Quella frase ti viene naturale. Ora proviamo qualcosa di nuovo?",
            "Bravissimo! La stai memorizzando bene. Proviamo una variazione?",
        ],
        "es": [
            "¡Muy buena repetición! ¿Quieres convertirla en pregunta o añadir un adjetivo?",
            "¡Perfecto! Esa frase ya te sale natural. ¿Probamos algo nuevo?",
            "¡Muy bien! La estás memorizando. ¿Probamos una variación?",
        ],
        "en": [
            "Great repetition! Want to turn it into a question or add an adjective?",
            "Perfect! That sentence comes naturally to you now. Shall we try something new?",
            "Well done! You're memorizing it nicely. Shall we try a variation?",
        ],
        "fr": [
            "Excellente répétition ! Tu veux la transformer en question ou ajouter un adjectif?",
            "Parfait ! Cette phrase te vient naturellement. On essaie quelque chose de nouveau?",
            "Bravo ! Tu la mémorises bien. On essaie une variante?",
        ],
        "de": [
            "Tolle Wiederholung! Willst du daraus eine Frage machen oder ein Adjektiv hinzufügen?",
            "Perfekt! Der Satz kommt dir schon ganz natürlich. Probieren wir etwas Neues?",
            "Sehr gut! Du prägst ihn dir gut ein. Probieren wir eine Variante?",
        ],
        "pt": [
            "Ótima repetição! Queres transformá-la numa pergunta ou juntar um adjetivo?",
            "Perfeito! Essa frase já te sai naturalmente. Experimentamos algo novo?",
            "Muito bem! Estás a memorizá-la bem. Experimentamos uma variação?",
        ],
    },
    PRACTICE: {
        "en": [
            "Perfect! That was excellent practice!",
            "Great job! You got it right!",
            "Much better! Well done!",
            "Excellent! That's exactly right!",
            "Perfect pronunciation! Well done!",
        ],
        "es": [
            "¡Perfecto! ¡Fue una práctica excelente!",
            "¡Buen trabajo! ¡Lo dijiste bien!",
            "¡Mucho mejor! ¡Bien hecho!",
        ],
        "fr": [
            "Parfait ! C'était un excellent entraînement !",
            "Bravo ! Tu l'as bien dit !",
            "Beaucoup mieux ! Bien joué !",
        ],
        "it": [
            "Perfetto! Ottimo esercizio!",
            "Bravo! L'hai detto giusto!",
            "Molto meglio! Ben fatto!",
        ],
        "de": [
            "Perfekt! Das war eine ausgezeichnete Übung!",
            "Gut gemacht! Das war richtig!",
            "Viel besser! Sehr gut!",
        ],
        "pt": [
            "Perfeito! Foi uma ótima prática!",
            "Bom trabalho! Disseste bem!",
            "Muito melhor! Bem feito!",
        ],
    },
}


class ResponseVarietyPicker:
    def __init__(
        self,
        responses: dict[str, dict[str, list[str]]] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.responses = responses if responses is not None else REPETITION_RESPONSES
        self._rng = rng or random.Random()

    def pool(self, category: str, language: str) -> list[str]:
        by_language = self.responses.get(category) or self.responses[ERROR]
        if language in by_language:
            return by_language[language]
        return by_language.get("en") or next(iter(by_language.values()))

    def pick(self, state: SessionState, category: str, language: str | None = None) -> str:
        pool = self.pool(category, language or state.language)
        used = state.used_patterns.setdefault(category, set())
        available = [phrase for phrase in pool if phrase not in used]

        if not available:
            logger.debug("Response pool exhausted for session=%s category=%s, resetting", state.session_id, category)
            used.clear()
            return pool[0]

        chosen = self._rng.choice(available)
        used.add(chosen)
        return chosen
