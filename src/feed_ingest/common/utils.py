"""Helpers for reading loosely-shaped parsed feed records."""

from typing import Any, Optional


def get_value(obj: Any, key: str) -> Any:
    """Get value from dict or object attribute."""
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


def first_value(item: Any, key: str) -> Any:
    """Return the first value stored under `key`, or None.

    Parsed feed records hold every child element as a list, so a missing
    key, an empty list and a scalar are all handled here.
    """
    value = get_value(item, key)
    if isinstance(value, list):
        return value[0] if value else None
    return value


def text_of(value: Any) -> Optional[str]:
    """Unwrap a parsed value to its text: plain strings pass through,
    element records yield their "_" text."""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        inner = value.get("_")
        if isinstance(inner, str):
            return inner
    return None


def attr_of(value: Any, name: str) -> Optional[str]:
    """Return attribute `name` of a parsed element record."""
    if not isinstance(value, dict):
        return None
    attrs = value.get("$")
    if isinstance(attrs, dict) and isinstance(attrs.get(name), str):
        return attrs[name]
    # Some converters flatten attributes onto the record itself.
    flat = value.get(name)
    return flat if isinstance(flat, str) else None
