"""Fuzzy boolean parsing for free-form form/datastore input."""

from __future__ import annotations

TRUTHY: frozenset[str] = frozenset(
    ("true", "t", "yes", "y", "on", "1", "ok", "okay", "sure")
    + ("enable", "enabled", "checked", "x", "+")
)
FALSY: frozenset[str] = frozenset(
    ("false", "f", "no", "n", "off", "0")
    + ("disable", "disabled", "unchecked", "-", "")
)


def parse_fuzzy_bool(text: str | None, default: bool | None) -> bool | None:
    """Interpret *text* as a boolean, returning *default* when it is ambiguous.

    Matching is case-insensitive and ignores surrounding whitespace.

    Examples:
        >>> parse_fuzzy_bool(" Yes ", False)
        True
        >>> parse_fuzzy_bool("off", None)
        False
        >>> parse_fuzzy_bool("maybe", None) is None
        True
    """
    if text is None:
        return default
    token = text.strip().lower()
    if token in TRUTHY:
        return True
    if token in FALSY:
        return False
    return default
