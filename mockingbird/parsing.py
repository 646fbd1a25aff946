"""Shared parsing helpers for configuration value normalization."""

from __future__ import annotations


_TRUE_BOOLEAN_TOKENS = frozenset({"1", "true", "yes", "on"})
_FALSE_BOOLEAN_TOKENS = frozenset({"0", "false", "no", "off"})


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_permissive_boolean(value: object) -> bool | None:
    """Parse a permissive boolean token and return `None` for invalid values."""

    if isinstance(value, bool):
        return value

    normalized = normalize_optional_string(value)
    if normalized is None:
        return None

    token = normalized.lower()
    if token in _TRUE_BOOLEAN_TOKENS:
        return True
    if token in _FALSE_BOOLEAN_TOKENS:
        return False
    return None


def parse_positive_number(value: object, field_name: str) -> float:
    """Parse a strictly positive number from an int, float, or numeric string.

    Raises:
        ValueError: If the value is boolean, non-numeric, or not greater than zero.
    """

    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be a positive number.")
    if isinstance(value, int | float):
        parsed = float(value)
    else:
        normalized = normalize_optional_string(value)
        if normalized is None:
            raise ValueError(f"`{field_name}` must be a positive number.")
        try:
            parsed = float(normalized)
        except ValueError as exc:
            raise ValueError(f"`{field_name}` must be a positive number.") from exc
    if parsed <= 0:
        raise ValueError(f"`{field_name}` must be a positive number.")
    return parsed


def parse_positive_int(value: object, field_name: str) -> int:
    """Parse a strictly positive integer from an int or numeric string."""

    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be a positive integer.")
    if isinstance(value, int):
        parsed = value
    else:
        normalized = normalize_optional_string(value)
        if normalized is None:
            raise ValueError(f"`{field_name}` must be a positive integer.")
        try:
            parsed = int(normalized)
        except ValueError as exc:
            raise ValueError(f"`{field_name}` must be a positive integer.") from exc
    if parsed <= 0:
        raise ValueError(f"`{field_name}` must be a positive integer.")
    return parsed


def split_csv(value: object) -> tuple[str, ...]:
    """Split a comma-separated value (or a list) into stripped non-empty tokens."""

    if value is None:
        return ()
    if isinstance(value, list | tuple):
        items = [normalize_optional_string(item) for item in value]
    else:
        items = [normalize_optional_string(item) for item in str(value).split(",")]
    return tuple(item for item in items if item is not None)
