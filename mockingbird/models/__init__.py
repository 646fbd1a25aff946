"""Shared typed data models for MockingBird.

This package contains dataclasses and vocabularies used across service modules
to avoid cross-module coupling and circular imports.
"""

from .datatypes import (
    DEFAULT_INTENT,
    DEFAULT_MODE,
    INTENTS,
    MODE_CATALOG,
    MODES,
    CacheEntry,
    ModeDescriptor,
    RateLimitDecision,
    RateLimitEntry,
    TranslationRequest,
    ValidationOutcome,
)

__all__ = [
    "DEFAULT_INTENT",
    "DEFAULT_MODE",
    "INTENTS",
    "MODE_CATALOG",
    "MODES",
    "CacheEntry",
    "ModeDescriptor",
    "RateLimitDecision",
    "RateLimitEntry",
    "TranslationRequest",
    "ValidationOutcome",
]
