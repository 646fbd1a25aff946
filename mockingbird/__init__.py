"""Top-level package for MockingBird.

MockingBird is a thin HTTP facade that rewrites short text into a sarcastic
version (or a sarcastic reply) through a generative-text provider. The core
entry point is `SarcasmTranslator`; `mockingbird.api.create_app` builds the
HTTP service around it.
"""

from .llm.translator import SarcasmTranslator

__all__ = ["SarcasmTranslator", "__version__"]

__version__ = "1.0.0"
