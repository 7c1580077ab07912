"""Shared parsing helpers for YAML and environment configuration values."""

from __future__ import annotations

from collections.abc import Iterable


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


def parse_required_boolean(value: object, field_name: str) -> bool:
    """Parse a required boolean value from accepted textual tokens.

    Raises:
        ValueError: If the token is not one of the accepted boolean values.
    """

    parsed = parse_permissive_boolean(value)
    if parsed is not None:
        return parsed

    raise ValueError(
        f"`{field_name}` must be a boolean value (`true`/`false`, `1`/`0`, `yes`/`no`)."
    )


def parse_non_negative_float(value: object, field_name: str) -> float:
    """Parse a delay/interval value in seconds.

    Raises:
        ValueError: If the value is blank, not numeric, or negative.
    """

    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be a number of seconds, not a boolean.")
    normalized = normalize_optional_string(value)
    if normalized is None:
        raise ValueError(f"`{field_name}` must not be blank.")
    try:
        parsed = float(normalized)
    except ValueError as exc:
        raise ValueError(f"`{field_name}` must be a number of seconds.") from exc
    if parsed < 0.0:
        raise ValueError(f"`{field_name}` must not be negative.")
    return parsed


def parse_positive_int(value: object, field_name: str) -> int:
    """Parse a strictly positive integer count.

    Raises:
        ValueError: If the value is not an integer greater than zero.
    """

    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be a positive integer.")
    normalized = normalize_optional_string(value)
    if normalized is None:
        raise ValueError(f"`{field_name}` must not be blank.")
    try:
        parsed = int(normalized)
    except ValueError as exc:
        raise ValueError(f"`{field_name}` must be a positive integer.") from exc
    if parsed <= 0:
        raise ValueError(f"`{field_name}` must be a positive integer.")
    return parsed


def parse_token_list(value: object) -> tuple[str, ...]:
    """Parse a word list from a comma-separated string or a YAML sequence.

    Blank entries are dropped and duplicates keep their first position.
    """

    if value is None:
        return ()
    if isinstance(value, str):
        raw_items: Iterable[object] = value.split(",")
    elif isinstance(value, Iterable):
        raw_items = value
    else:
        raw_items = [value]

    tokens: list[str] = []
    for item in raw_items:
        token = normalize_optional_string(item)
        if token is not None and token not in tokens:
            tokens.append(token)
    return tuple(tokens)
