"""Fold live lookup records and prior state into a new registry.

This is the only component allowed to produce registries. It never
mutates its inputs: records are frozen and updates go through
``model_copy``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from pyroster._constants import DEFAULT_STOP_WORDS, MAPS_SEARCH_URL, PLACEHOLDER_LOCATION
from pyroster.ingestion.normalize import maps_search_link
from pyroster.models.entity import EntityRecord, LiveRecord, RosterEntity
from pyroster.registry.matcher import match_entity

Registry = dict[str, EntityRecord]


def placeholder_record(entity: RosterEntity, *, maps_search_url: str = MAPS_SEARCH_URL) -> EntityRecord:
    """A record for *entity* that has not been observed live yet."""
    return EntityRecord(
        id=entity.external_id,
        external_id=entity.external_id,
        name=entity.name,
        rating=0.0,
        rating_count=0,
        location_label=PLACEHOLDER_LOCATION,
        map_link=maps_search_link(entity.name, maps_search_url),
    )


def seed_registry(
    previous: Mapping[str, EntityRecord] | None,
    roster: Sequence[RosterEntity],
    *,
    maps_search_url: str = MAPS_SEARCH_URL,
) -> Registry:
    """One record per roster entity: the previous one if known, else a placeholder.

    Records for identifiers no longer on the roster are dropped.
    """
    registry: Registry = {}
    for entity in roster:
        prior = previous.get(entity.external_id) if previous is not None else None
        registry[entity.external_id] = prior if prior is not None else placeholder_record(
            entity, maps_search_url=maps_search_url
        )
    return registry


def apply_live_record(existing: EntityRecord, live: LiveRecord) -> EntityRecord:
    """Overlay observed values from *live* onto *existing*.

    A live record without observations (``rating_count == 0``) leaves the
    existing record untouched. The name is never taken from the source.
    """
    if live.rating_count <= 0:
        return existing
    return existing.model_copy(
        update={
            "rating": live.rating,
            "rating_count": live.rating_count,
            "location_label": live.location_label or existing.location_label,
            "map_link": live.map_link or existing.map_link,
        }
    )


def merge_registry(
    previous: Mapping[str, EntityRecord] | None,
    roster: Sequence[RosterEntity],
    live_records: Iterable[LiveRecord],
    *,
    stop_words: Iterable[str] = DEFAULT_STOP_WORDS,
    maps_search_url: str = MAPS_SEARCH_URL,
) -> Registry:
    """Build the registry for one reconciliation cycle.

    The result always holds exactly one record per roster entity, in roster
    order, and no record loses observed data to a live record that carries
    none.
    """
    words = tuple(stop_words)
    registry = seed_registry(previous, roster, maps_search_url=maps_search_url)
    for live in live_records:
        target = match_entity(live, roster, registry, stop_words=words)
        if target is None:
            continue
        registry[target] = apply_live_record(registry[target], live)
    return registry
