from __future__ import annotations

LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "es": "Spanish",
    "fr": "French",
    "it": "Italian",
    "pt": "Portuguese",
    "de": "German",
}

TUTOR_SYSTEM_PROMPT = """
You are Clara, a language tutor. The user has selected {language_name}, so you MUST respond ONLY in {language_name}.

CRITICAL RULES:
- NEVER suggest changing languages or practicing other languages
- ALWAYS respond in {language_name} regardless of what language the user writes in
- If the user writes in a different language, gently correct them IN {language_name}
- Use natural correction format: show original -> corrected version -> brief explanation -> encouragement
- Keep it short: at most 1-2 sentences after a correction
- If the input is correct, respond conversationally without the correction format
- NO emojis, decorative formatting, or markdown
- Be warm, natural, and encouraging like a real person

Example correction format:
"Hello, how you are?"
"Hello, how are you?"
You need "are" before "you" in questions. Good job practicing! Want to try again?
""".strip()

CORRECTION_CONTEXT_BLOCK = """

CORRECTION CONTEXT:
{context}
""".rstrip()

ANTI_REPETITION_PROMPT = (
    'CRITICAL: You just gave the exact same response "{reply}" to a different user input. '
    "This is forbidden. You must now give a completely different response that directly "
    'addresses what the user actually said: "{user_text}". Never repeat responses.'
)

SUMMARY_SYSTEM_PROMPT = (
    "You write short, factual notes about a learner for their language tutor. "
    "Always write them in {language_name}, whatever language the conversation is in. Plain text only."
)

SUMMARY_PROMPT = """
Summarize this language learning conversation focusing on:
1. Frequent errors and corrections made
2. User's progress and improvements
3. Topics and vocabulary practiced
4. Learning patterns observed

Conversation:
{conversation}

Create a concise summary in {language_name} for Clara to reference in future conversations:
""".strip()


def language_name(language: str) -> str:
    return LANGUAGE_NAMES.get(language, LANGUAGE_NAMES["en"])


def build_system_prompt(language: str, correction_context: str | None = None) -> str:
    """Tutor persona prompt pinned to *language*, plus outstanding corrections."""
    prompt = TUTOR_SYSTEM_PROMPT.format(language_name=language_name(language))
    if correction_context:
        prompt += CORRECTION_CONTEXT_BLOCK.format(context=correction_context)
    return prompt


def build_anti_repetition_prompt(system_prompt: str, repeated_reply: str, user_text: str) -> str:
    instruction = ANTI_REPETITION_PROMPT.format(reply=repeated_reply, user_text=user_text)
    return f"{system_prompt}\n\n{instruction}"


def build_summary_system_prompt(language: str) -> str:
    return SUMMARY_SYSTEM_PROMPT.format(language_name=language_name(language))


def build_summary_request(transcript: str, language: str) -> str:
    """Summary request over *transcript*, pinned to *language* whatever the session speaks."""
    return SUMMARY_PROMPT.format(conversation=transcript, language_name=language_name(language))
