"""Recursive merge of user options over default options."""

from collections.abc import Mapping
from typing import Any

# Rendered template elements are dicts tagged with this key/value pair.
# They must be replaced wholesale, never merged key by key.
ELEMENT_MARKER = "$$typeof"
ELEMENT_TYPE = "lume.element"


def is_plain_mapping(value: Any) -> bool:
    """Return True if `value` is a dict that should be merged key by key."""
    return isinstance(value, dict) and value.get(ELEMENT_MARKER) != ELEMENT_TYPE


def merge(
    defaults: Mapping[str, Any], user: Mapping[str, Any] | None = None
) -> dict[str, Any]:
    """Merge user options over default options.

    For nested plain dicts the merge is recursive. For all other values
    (including lists and rendered elements) the user value replaces the
    default entirely.

    Args:
        defaults: The default options.
        user: The options whose values take precedence. If omitted, a
            shallow copy of `defaults` is returned.

    Returns:
        A new dictionary with merged values. Neither input is modified.

    Examples:
        >>> merge({"a": 1}, {"b": 2})
        {'a': 1, 'b': 2}

        >>> merge({"a": {"x": 1}}, {"a": {"y": 2}})
        {'a': {'x': 1, 'y': 2}}

        >>> merge({"a": [1, 2]}, {"a": [3]})
        {'a': [3]}
    """
    merged = dict(defaults)

    if not user:
        return merged

    for key, value in user.items():
        if is_plain_mapping(merged.get(key)) and is_plain_mapping(value):
            merged[key] = merge(merged[key], value)
        else:
            # Lists are replaced, not concatenated
            merged[key] = value

    return merged
