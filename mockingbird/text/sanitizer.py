"""Input sanitization applied before prompt construction and cache key derivation."""

from __future__ import annotations

import re


_WHITESPACE_RUN = re.compile(r"\s+")
_CONTROL_CHARACTERS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_PUNCTUATION_RUN = re.compile(r"([!?.,]){4,}")


def sanitize_input(text: str) -> str:
    """Collapse whitespace, drop control characters, and cap punctuation runs at 3.

    A mixed punctuation run is replaced by three copies of its last character, so
    `"!!!!?"` becomes `"???"`.
    """

    collapsed = _WHITESPACE_RUN.sub(" ", text)
    without_controls = _CONTROL_CHARACTERS.sub("", collapsed)
    capped = _PUNCTUATION_RUN.sub(lambda match: match.group(1) * 3, without_controls)
    return capped.strip()
