"""LLM-facing abstractions for sarcasm generation.

This package defines the prompt library, the Gemini HTTP client, the bounded
response cache, and the translation orchestrator that ties them together.
"""

from .cache import ResponseCache
from .gemini_client import GeminiClient, GeminiProviderError
from .prompts import PromptLibrary
from .translator import GenerationClient, SarcasmTranslator, map_provider_failure

__all__ = [
    "GeminiClient",
    "GeminiProviderError",
    "GenerationClient",
    "PromptLibrary",
    "ResponseCache",
    "SarcasmTranslator",
    "map_provider_failure",
]
