"""Shared parsing helpers for config values and spec fields."""

from __future__ import annotations

from typing import Any


_BOOLEAN_TOKENS = {
    "1": True, "true": True, "yes": True, "on": True,
    "0": False, "false": False, "no": False, "off": False,
}


def normalize_optional_string(value: object) -> str | None:
    """Return `value` as a stripped string, or `None` when it is missing or blank."""

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_required_boolean(value: object, field_name: str) -> bool:
    """Parse a bool or a `true`/`yes`/`1`/`on`-style token, case-insensitively."""

    if isinstance(value, bool):
        return value
    token = (normalize_optional_string(value) or "").lower()
    if token in _BOOLEAN_TOKENS:
        return _BOOLEAN_TOKENS[token]
    raise ValueError(
        f"`{field_name}` must be a boolean value (`true`/`false`, `1`/`0`, `yes`/`no`)."
    )


def parse_positive_float(value: object, field_name: str) -> float:
    """Parse a strictly positive number from a config token."""

    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be a positive number.")
    try:
        parsed = float(str(value).strip())
    except ValueError as exc:
        raise ValueError(f"`{field_name}` must be a positive number.") from exc
    if not parsed > 0:
        raise ValueError(f"`{field_name}` must be a positive number.")
    return parsed


def is_identifier_list(value: Any) -> bool:
    """Return whether a value is a non-empty list of non-blank strings."""

    if not isinstance(value, list) or not value:
        return False
    return all(isinstance(item, str) and item.strip() for item in value)
