"""Presentation helpers: filtering, ordering and star rendering.

Nothing here changes registry state; every function returns new values.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum

from pyroster._constants import SUBJECT_KEY
from pyroster.models.entity import EntityRecord

NUMERIC_SORT_KEYS: frozenset[str] = frozenset({"rating", "rating_count"})
SORT_KEYS: frozenset[str] = frozenset({"id", "external_id", "name", "location_label", "map_link"}) | NUMERIC_SORT_KEYS

# Wire-format spellings accepted as sort keys.
_SORT_KEY_ALIASES: dict[str, str] = {
    "externalId": "external_id",
    "ratingCount": "rating_count",
    "locationLabel": "location_label",
    "mapLink": "map_link",
}


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"


def _resolve_sort_key(key: str) -> str:
    resolved = _SORT_KEY_ALIASES.get(key, key)
    if resolved not in SORT_KEYS:
        raise ValueError(f"unknown sort key {key!r}; expected one of {sorted(SORT_KEYS)}")
    return resolved


@dataclass(frozen=True, slots=True)
class SortState:
    """Current table ordering.

    Selecting the current key again flips the direction; selecting a new
    key starts descending.
    """

    key: str = "rating_count"
    direction: SortDirection = SortDirection.DESC

    def toggle(self, key: str) -> SortState:
        resolved = _resolve_sort_key(key)
        if resolved == self.key and self.direction == SortDirection.DESC:
            return SortState(resolved, SortDirection.ASC)
        return SortState(resolved, SortDirection.DESC)


def project(
    registry: Mapping[str, EntityRecord],
    search_term: str = "",
    sort_key: str | None = "rating_count",
    direction: SortDirection | str = SortDirection.DESC,
) -> list[EntityRecord]:
    """Filter by case-insensitive name substring and order by *sort_key*.

    Numeric fields compare numerically, everything else as case-sensitive
    strings. ``sort_key=None`` keeps registry order. The sort is stable.
    """
    needle = search_term.lower()
    rows = [record for record in registry.values() if needle in record.name.lower()]
    if sort_key is None:
        return rows

    key = _resolve_sort_key(sort_key)
    descending = SortDirection(direction) == SortDirection.DESC
    if key in NUMERIC_SORT_KEYS:
        return sorted(rows, key=lambda record: getattr(record, key), reverse=descending)
    return sorted(rows, key=lambda record: str(getattr(record, key)), reverse=descending)


def find_subject_id(registry: Mapping[str, EntityRecord], subject_key: str = SUBJECT_KEY) -> str | None:
    """Identifier of the highlighted entity: the first whose name contains *subject_key*."""
    needle = subject_key.lower()
    if not needle:
        return None
    for record in registry.values():
        if needle in record.name.lower():
            return record.id
    return None


def star_breakdown(rating: float) -> tuple[int, int, int]:
    """Split a 0-5 rating into ``(full, half, empty)`` stars.

    A half star is drawn when the fractional part lies within ``[0.3, 0.7]``;
    below that the star is empty and above it the rating is still rounded
    down, matching how the dashboard has always drawn ratings.
    """
    value = min(max(rating, 0.0), 5.0)
    full = math.floor(value)
    fraction = value - full
    half = 1 if full < 5 and 0.3 <= round(fraction, 6) <= 0.7 else 0
    return full, half, 5 - full - half
