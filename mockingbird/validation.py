"""Request body validation for the translate operation.

Responsibilities:
- Check text, mode, intent, and context against length, emptiness, and spam rules.
- Normalize accepted values (trimmed strings, lower-cased enums).
- Stay free of network, storage, and clock dependencies.
"""

from __future__ import annotations

import re
from typing import Any

from .models.datatypes import (
    DEFAULT_INTENT,
    DEFAULT_MODE,
    INTENTS,
    MODES,
    TranslationRequest,
    ValidationOutcome,
)


MIN_TEXT_LENGTH = 2
MAX_TEXT_LENGTH = 500
MAX_CONTEXT_LENGTH = 200
EMPTY_TEXT_MESSAGE = "Text cannot be empty."

_EXCESSIVE_REPEATS = re.compile(r"(.)\1{20,}")

_MESSAGES = {
    "InvalidBody": "Invalid request body.",
    "MissingText": "Text is required and must be a string.",
    "EmptyText": EMPTY_TEXT_MESSAGE,
    "TooShort": f"Text must be at least {MIN_TEXT_LENGTH} characters.",
    "TooLong": f"Text must be {MAX_TEXT_LENGTH} characters or less.",
    "SpamPattern": "Text appears to be spam. Please enter valid text.",
    "InvalidMode": f"Invalid mode. Must be one of: {', '.join(MODES)}.",
    "InvalidIntent": f"Invalid intent. Must be one of: {', '.join(INTENTS)}.",
    "ContextTooLong": f"Context must be {MAX_CONTEXT_LENGTH} characters or less.",
}


def _failure(reason: str) -> ValidationOutcome:
    return ValidationOutcome(ok=False, reason=reason, message=_MESSAGES[reason])


def _normalize_choice(value: Any, default: str) -> str:
    """Lower-case string choices; non-string or missing values use the default."""

    if isinstance(value, str):
        return value.lower()
    return default


def validate_translation_request(body: Any) -> ValidationOutcome:
    """Validate a decoded JSON body and return a normalized request or a failure.

    Missing or non-string `mode` and `intent` fall back to `light` and `rewrite`.
    A non-string `context` is treated as empty.
    """

    if not isinstance(body, dict):
        return _failure("InvalidBody")

    text = body.get("text")
    if not isinstance(text, str) or not text:
        return _failure("MissingText")

    trimmed_text = text.strip()
    if not trimmed_text:
        return _failure("EmptyText")
    if len(trimmed_text) < MIN_TEXT_LENGTH:
        return _failure("TooShort")
    if len(trimmed_text) > MAX_TEXT_LENGTH:
        return _failure("TooLong")
    if _EXCESSIVE_REPEATS.search(trimmed_text):
        return _failure("SpamPattern")

    mode = _normalize_choice(body.get("mode"), DEFAULT_MODE)
    if mode not in MODES:
        return _failure("InvalidMode")

    intent = _normalize_choice(body.get("intent"), DEFAULT_INTENT)
    if intent not in INTENTS:
        return _failure("InvalidIntent")

    raw_context = body.get("context")
    context = raw_context.strip() if isinstance(raw_context, str) else ""
    if len(context) > MAX_CONTEXT_LENGTH:
        return _failure("ContextTooLong")

    return ValidationOutcome(
        ok=True,
        request=TranslationRequest(
            text=trimmed_text,
            mode=mode,
            intent=intent,
            context=context,
        ),
    )
