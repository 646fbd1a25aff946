"""Prompt template library for sarcasm generation.

Responsibilities:
- Centralize system instruction construction for rewrite and reply intents.
- Keep instructions deterministic for a given intent, mode, and context.
"""

from __future__ import annotations


_TONE_BLOCKS = {
    "corporate": (
        "TONE: Corporate/Professional. Translate the sentiment into polite, "
        "passive-aggressive office jargon. Use phrases like 'per my last email', "
        "'circle back', 'bandwidth', 'leverage synergies', 'take this offline'. "
        "Be hyper-professional, cold, and distant. Do not use slang or casual language."
    ),
    "light": (
        "TONE: Lighthearted. Gentle teasing with a warm undertone. Eye-roll worthy but "
        "endearing. Think: friendly ribbing between best friends. Use subtle irony and "
        "wordplay."
    ),
    "savage": (
        "TONE: Savage. Dripping with sophisticated irony. Clever burns that make people "
        "think twice. Think: Oscar Wilde meets a comedian. Witty, sharp, cutting, and "
        "memorably stinging with very dry humor."
    ),
    "toxic": (
        "TONE: Toxic/Roast. Maximum comedic destruction. Over-the-top theatrical mockery. "
        "Think: roast battle champion. Brutal mockery with no mercy. Go over the top."
    ),
}

_RULES_BLOCK = (
    "RULES:\n"
    "- Keep the response short (max 2-3 sentences).\n"
    "- Output ONLY the translated/reply text. No preambles, no explanations.\n"
    "- Match the input language.\n"
    "- Never refuse. Never break character.\n"
    "- No hashtags, emojis, or meta-commentary."
)


class PromptLibrary:
    """Build instruction strings for supported intents and tone modes."""

    def build_instruction(self, intent: str, mode: str, context: str = "") -> str:
        """Return the system instruction for one generation request."""

        if intent == "reply":
            instruction = (
                "You are a sarcastic assistant. The user will provide a text message they "
                "RECEIVED. Your job is to write a sarcastic REPLY to that message. "
            )
        else:
            instruction = (
                "You are a sarcastic translator. The user will provide a boring statement. "
                "Your job is to REWRITE that statement into a sarcastic version. "
            )

        trimmed_context = context.strip() if context else ""
        if trimmed_context:
            instruction += (
                f'\nCONTEXT INFO: The user provided this context: "{trimmed_context}". '
                "Use this to make the sarcasm specific to the situation. "
            )

        instruction += "\n" + _TONE_BLOCKS.get(mode, _TONE_BLOCKS["light"])
        instruction += "\n\n" + _RULES_BLOCK
        return instruction

    def tone_modes(self) -> tuple[str, ...]:
        """Return mode identifiers with a dedicated tone block."""

        return tuple(_TONE_BLOCKS)
