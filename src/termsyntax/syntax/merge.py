"""Composition of schema fragments.

Defaults and mandatory lists are often declared at different places (a
library ships a base syntax, an application adds its own defaults). These
helpers combine declarative schema mappings before they are compiled. None of
them mutates its arguments.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from .rules import DEFAULTS_KEY, MANDATORY_KEY


def merge_schema_fragments(update: Mapping[Any, Any], base: Mapping[Any, Any]) -> dict[Any, Any]:
    """Deep merge *update* into *base*.

    Keys present in both with mapping values on both sides are merged
    recursively; otherwise the value from *update* replaces the base value.

    Example:
        >>> merge_schema_fragments({"a": {"x": 1}}, {"a": {"y": 2}, "b": 3})
        {'a': {'y': 2, 'x': 1}, 'b': 3}
    """
    merged: dict[Any, Any] = dict(base)
    for key, value in update.items():
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            merged[key] = merge_schema_fragments(value, current)
        else:
            merged[key] = value
    return merged


def add_defaults(defaults: Mapping[Any, Any], schema: Mapping[Any, Any]) -> dict[Any, Any]:
    """Return *schema* with *defaults* merged into its ``__defaults``; new values win."""
    merged = dict(schema)
    merged[DEFAULTS_KEY] = {**schema.get(DEFAULTS_KEY, {}), **defaults}
    return merged


def add_mandatory(keys: Sequence[Any], schema: Mapping[Any, Any]) -> dict[Any, Any]:
    """Return *schema* with *keys* placed before its existing ``__mandatory`` keys."""
    merged = dict(schema)
    merged[MANDATORY_KEY] = [*keys, *schema.get(MANDATORY_KEY, [])]
    return merged
