"""Core datatypes shared across MockingBird modules.

Responsibilities:
- Represent immutable records exchanged between validation, caching, and HTTP layers.
- Define the closed mode/intent vocabularies and the static mode catalog.

Key types:
- `TranslationRequest`, `ValidationOutcome`, `RateLimitDecision`, `CacheEntry`,
  `RateLimitEntry`, and `ModeDescriptor`.
"""

from __future__ import annotations

from dataclasses import dataclass


MODES: tuple[str, ...] = ("corporate", "light", "savage", "toxic")
INTENTS: tuple[str, ...] = ("rewrite", "reply")
DEFAULT_MODE = "light"
DEFAULT_INTENT = "rewrite"


@dataclass(frozen=True, slots=True)
class TranslationRequest:
    """A validated, normalized translation request.

    Attributes:
        text: Trimmed input text.
        mode: Lower-cased tone preset from `MODES`.
        intent: Lower-cased intent from `INTENTS`.
        context: Trimmed situational context, empty when not provided.
    """

    text: str
    mode: str = DEFAULT_MODE
    intent: str = DEFAULT_INTENT
    context: str = ""


@dataclass(frozen=True, slots=True)
class ValidationOutcome:
    """Result of validating a raw request body.

    Attributes:
        ok: Whether the body passed every rule.
        request: Normalized request when `ok` is true.
        reason: Failed rule identifier (for example `TooLong`) when `ok` is false.
        message: User-facing message for the failed rule.
    """

    ok: bool
    request: TranslationRequest | None = None
    reason: str | None = None
    message: str | None = None


@dataclass(frozen=True, slots=True)
class RateLimitDecision:
    """Outcome of one rate limiter check."""

    allowed: bool
    remaining: int


@dataclass(slots=True)
class RateLimitEntry:
    """Mutable per-client counter owned by a rate limiter."""

    count: int
    window_reset_at: float


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """One cached provider response with its creation timestamp."""

    key: tuple[str, str, str, str]
    value: str
    created_at: float


@dataclass(frozen=True, slots=True)
class ModeDescriptor:
    """Public description of one tone preset."""

    id: str
    name: str
    description: str

    def as_payload(self) -> dict[str, str]:
        """Return the JSON-ready representation used by `/modes`."""

        return {"id": self.id, "name": self.name, "description": self.description}


MODE_CATALOG: tuple[ModeDescriptor, ...] = (
    ModeDescriptor(
        id="corporate",
        name="Corporate",
        description="Polite, passive-aggressive office speak",
    ),
    ModeDescriptor(id="light", name="Light", description="Playful and gently teasing"),
    ModeDescriptor(id="savage", name="Savage", description="Sharp, witty, and cutting"),
    ModeDescriptor(id="toxic", name="Toxic", description="Brutally sarcastic roast mode"),
)
