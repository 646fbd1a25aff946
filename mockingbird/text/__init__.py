"""Text normalization helpers."""

from .sanitizer import sanitize_input

__all__ = ["sanitize_input"]
