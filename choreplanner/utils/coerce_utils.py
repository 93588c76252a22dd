# File: utils/coerce_utils.py
"""Defensive coercion helpers for loosely-typed storage values.

Member capabilities and allergies come from external storage and may arrive
as lists, tuples, sets, JSON-encoded strings, comma-separated strings, or
garbage. These helpers never raise: malformed input degrades to an empty set
and a warning.

Functions:
    - coerce_string_set: Normalize any input into a frozenset of strings
"""

from __future__ import annotations

from collections.abc import Iterable
import json
import logging
from typing import Any

# Module-level logger
_LOGGER = logging.getLogger(__name__)


def _strings_from_iterable(values: Iterable[Any], field_name: str) -> set[str]:
    """Keep the non-empty string members of an iterable."""
    result: set[str] = set()
    for value in values:
        if isinstance(value, str):
            value = value.strip()
            if value:
                result.add(value)
        else:
            _LOGGER.warning(
                "Ignoring non-string %s entry: %r", field_name, value
            )
    return result


def coerce_string_set(raw_input: Any, field_name: str = "value") -> frozenset[str]:
    """Normalize a loosely-typed value into a frozenset of strings.

    Handles multiple input types:
    - None / empty: empty set
    - list, tuple, set, frozenset: string members kept, others dropped
    - str: parsed as a JSON array first, then as a comma-separated list
    - anything else: empty set with a warning

    Args:
        raw_input: Raw value from storage
        field_name: Name used in log messages (e.g. "capabilities")

    Returns:
        Frozenset of stripped, non-empty strings

    Examples:
        coerce_string_set(["adult_only", "can_drive"]) → {"adult_only", "can_drive"}
        coerce_string_set('["dust"]') → {"dust"}
        coerce_string_set("dust, pollen") → {"dust", "pollen"}
        coerce_string_set({"not": "a list"}) → frozenset()
    """
    if raw_input is None or raw_input == "":
        return frozenset()

    if isinstance(raw_input, (list, tuple, set, frozenset)):
        return frozenset(_strings_from_iterable(raw_input, field_name))

    if isinstance(raw_input, str):
        text = raw_input.strip()
        if text.startswith("["):
            try:
                decoded = json.loads(text)
            except json.JSONDecodeError:
                _LOGGER.warning(
                    "Malformed JSON in %s: %s, using empty set", field_name, text
                )
                return frozenset()
            if isinstance(decoded, list):
                return frozenset(_strings_from_iterable(decoded, field_name))
            return frozenset()
        return frozenset(_strings_from_iterable(text.split(","), field_name))

    _LOGGER.warning(
        "Unexpected %s type: %s, using empty set", field_name, type(raw_input)
    )
    return frozenset()
