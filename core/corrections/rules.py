"""Declarative tables of tutor-correction phrasings.

Each :class:`CorrectionRule` is a ``(language, pattern, extraction)`` tuple
evaluated in order; the first rule that matches a tutor reply yields the
corrected text. :class:`ContextualRule` entries cover corrections the tutor
makes without a recognizable phrasing, keyed on what the user said.

Two tables exist:

* ``PRACTICE_RULES`` / ``PRACTICE_CONTEXTUAL_RULES`` register a pending
  correction the user is expected to repeat.
* ``MEMO_RULES`` / ``MEMO_CONTEXTUAL_RULES`` feed the short-lived memo that
  tells the language model which word it already corrected.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

__all__ = [
    "ContextualRule",
    "CorrectionRule",
    "MEMO_CONTEXTUAL_RULES",
    "MEMO_RULES",
    "PRACTICE_CONTEXTUAL_RULES",
    "PRACTICE_RULES",
]

# A quoted span: straight, curly or guillemet quotes.
_Q = r"[\"“«]([^\"”»]+)[\"”»]"
_SEP = r"[:\s]+"
_NOT = r"[,\s]*"


@dataclass(frozen=True, slots=True)
class CorrectionRule:
    language: str
    pattern: re.Pattern[str]
    fixed_text: str | None = None

    def extract(self, reply: str) -> str | None:
        match = self.pattern.search(reply)
        if match is None:
            return None
        if self.fixed_text is not None:
            return self.fixed_text
        if not match.groups() or match.group(1) is None:
            return None
        corrected = match.group(1).strip()
        return corrected or None


@dataclass(frozen=True, slots=True)
class ContextualRule:
    reply_patterns: tuple[re.Pattern[str], ...]
    corrected_text: str
    user_marker: str | None = None
    require_all: bool = False

    def applies(self, user_input: str, reply: str) -> bool:
        if self.user_marker is not None and self.user_marker not in user_input.lower():
            return False
        hits = (pattern.search(reply) is not None for pattern in self.reply_patterns)
        return all(hits) if self.require_all else any(hits)


def _rule(language: str, source: str, fixed_text: str | None = None) -> CorrectionRule:
    return CorrectionRule(language, re.compile(source, re.IGNORECASE), fixed_text)


def _i(source: str) -> re.Pattern[str]:
    return re.compile(source, re.IGNORECASE)


PRACTICE_RULES: tuple[CorrectionRule, ...] = (
    # en: general
    _rule("en", rf"you could say{_SEP}{_Q}"),
    _rule("en", rf"try saying{_SEP}{_Q}"),
    _rule("en", rf"a better way is{_SEP}{_Q}"),
    _rule("en", rf"the correct way is{_SEP}{_Q}"),
    _rule("en", rf"should be{_SEP}{_Q}"),
    _rule("en", rf"would be{_SEP}{_Q}"),
    _rule("en", rf"more natural to say{_SEP}{_Q}"),
    _rule("en", rf"we say{_SEP}{_Q}{_NOT}not{_SEP}{_Q}"),
    _rule("en", rf"we usually say{_SEP}{_Q}{_NOT}not{_SEP}{_Q}"),
    # en: prepositions
    _rule("en", r"in english[,\s]*we say[:\s]+\"?([^\",.!?]+)\"?[,\s]*not[:\s]+\"?([^\",.!?]+)\"?"),
    _rule("en", r"through the nose[,\s]*not from the nose", "through the nose"),
    _rule("en", r"listen to[,\s]*not listen from", "listen to"),
    _rule("en", r"different from[,\s]*not different than", "different from"),
    # es
    _rule("es", rf"podrías decir{_SEP}{_Q}"),
    _rule("es", rf"sería mejor decir{_SEP}{_Q}"),
    _rule("es", rf"la forma correcta es{_SEP}{_Q}"),
    _rule("es", rf"en español decimos{_SEP}{_Q}{_NOT}no{_SEP}{_Q}"),
    # fr
    _rule("fr", rf"tu pourrais dire{_SEP}{_Q}"),
    _rule("fr", rf"il vaut mieux dire{_SEP}{_Q}"),
    _rule("fr", rf"la façon correcte est{_SEP}{_Q}"),
    _rule("fr", rf"en français[,\s]*on dit{_SEP}{_Q}{_NOT}pas{_SEP}{_Q}"),
    # it
    _rule("it", rf"potresti dire{_SEP}{_Q}"),
    _rule("it", rf"sarebbe meglio dire{_SEP}{_Q}"),
    _rule("it", rf"il modo corretto è{_SEP}{_Q}"),
    _rule("it", rf"in italiano diciamo{_SEP}{_Q}{_NOT}non{_SEP}{_Q}"),
    # de
    _rule("de", rf"du könntest sagen{_SEP}{_Q}"),
    _rule("de", rf"besser wäre{_SEP}{_Q}"),
    _rule("de", rf"richtig ist{_SEP}{_Q}"),
    _rule("de", rf"auf deutsch sagt man{_SEP}{_Q}{_NOT}nicht{_SEP}{_Q}"),
    # pt
    _rule("pt", rf"poderias dizer{_SEP}{_Q}"),
    _rule("pt", rf"seria melhor dizer{_SEP}{_Q}"),
    _rule("pt", rf"a forma correta é{_SEP}{_Q}"),
    _rule("pt", rf"em português dizemos{_SEP}{_Q}{_NOT}não{_SEP}{_Q}"),
)

PRACTICE_CONTEXTUAL_RULES: tuple[ContextualRule, ...] = (
    ContextualRule(
        reply_patterns=(_i(r"through the nose"), _i(r"sniff"), _i(r"snort")),
        corrected_text="through the nose",
        user_marker="from the nose",
    ),
)

_MEMO_SEP = r"[.:\s]+"

MEMO_RULES: tuple[CorrectionRule, ...] = (
    # en
    _rule("en", rf"you could say{_MEMO_SEP}{_Q}"),
    _rule("en", rf"try saying{_MEMO_SEP}{_Q}"),
    _rule("en", rf"a better way is{_MEMO_SEP}{_Q}"),
    _rule("en", rf"the correct pronunciation is{_MEMO_SEP}{_Q}"),
    _rule("en", rf"you meant{_MEMO_SEP}{_Q}"),
    _rule("en", rf"should be{_MEMO_SEP}{_Q}"),
    # fr: "I heard X but I think you meant Y" keeps Y
    _rule(
        "fr",
        rf"j'ai entendu{_MEMO_SEP}[\"“«][^\"”»]+[\"”»][.\s]*mais[.\s]*je pense que vous vouliez dire{_MEMO_SEP}{_Q}",
    ),
    _rule("fr", rf"vous pourriez dire{_MEMO_SEP}{_Q}"),
    _rule("fr", rf"essayez de dire{_MEMO_SEP}{_Q}"),
    _rule("fr", rf"une meilleure façon serait{_MEMO_SEP}{_Q}"),
    # es
    _rule("es", rf"podrías decir{_MEMO_SEP}{_Q}"),
    _rule("es", rf"intenta decir{_MEMO_SEP}{_Q}"),
    _rule("es", rf"una mejor forma sería{_MEMO_SEP}{_Q}"),
    # "but I think you meant" in three languages
    _rule("fr", rf"mais je pense que vous vouliez dire{_MEMO_SEP}{_Q}"),
    _rule("es", rf"pero creo que querías decir{_MEMO_SEP}{_Q}"),
    _rule("en", rf"but I think you meant{_MEMO_SEP}{_Q}"),
)

MEMO_CONTEXTUAL_RULES: tuple[ContextualRule, ...] = (
    ContextualRule(
        reply_patterns=(_i(r"\btu\b"), _i(r"\btout\b")),
        corrected_text="tout",
        require_all=True,
    ),
)
