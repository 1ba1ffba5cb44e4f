"""Normalization helpers.

Centralizes defensive parsing of lookup-source values and the canonical
matching key used to bind loosely spelled names to roster entities.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from typing import Any
from urllib.parse import quote

from pyroster._constants import DEFAULT_STOP_WORDS, MAPS_SEARCH_URL, URI_COMPONENT_SAFE

_NON_KEY_CHARS = re.compile(r"[^a-z0-9]")


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or value == "--":
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text else None


def non_negative_or_zero(value: Any) -> int | None:
    parsed = safe_int(value)
    if parsed is None:
        return None
    return 0 if parsed < 0 else parsed


def canonical_key(name: str, stop_words: Iterable[str] = DEFAULT_STOP_WORDS) -> str:
    """Reduce a display name to its comparison key.

    Lowercases, drops everything outside ``[a-z0-9]`` and removes every
    occurrence of the stop-words. Removal repeats until nothing changes so
    that ``canonical_key(canonical_key(x)) == canonical_key(x)`` holds even
    when a removal joins the pieces of another stop-word.

    The key is only ever used for fallback matching, never as identity.
    """
    words = [w for w in (_NON_KEY_CHARS.sub("", word.lower()) for word in stop_words) if w]
    key = _NON_KEY_CHARS.sub("", name.lower())
    while True:
        reduced = key
        for word in words:
            reduced = reduced.replace(word, "")
        if reduced == key:
            return key.strip()
        key = reduced


def maps_search_link(name: str, base_url: str = MAPS_SEARCH_URL) -> str:
    """Deterministic map search link for an entity name."""
    return f"{base_url}{quote(name, safe=URI_COMPONENT_SAFE)}"
