"""Aggregate state and history snapshot models."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import Field, model_validator

from pyroster.models._base import RosterBaseModel, Timestamp
from pyroster.models.entity import EntityRecord


def _registry_from_list(records: list[Any]) -> dict[str, Any]:
    """Key a list of record dicts by external id, preserving order."""
    registry: dict[str, Any] = {}
    for record in records:
        if isinstance(record, EntityRecord):
            registry[record.external_id] = record
            continue
        if not isinstance(record, dict):
            continue
        key = record.get("externalId") or record.get("external_id") or record.get("placeId") or record.get("id")
        if key is not None:
            registry[str(key)] = record
    return registry


class HistorySnapshot(RosterBaseModel):
    """Immutable copy of the registry at one reconciliation instant."""

    _KEY_ALIASES: ClassVar[dict[str, str]] = {"casinos": "entities"}

    timestamp: Timestamp
    entities: tuple[EntityRecord, ...] = ()

    @property
    def rating_counts(self) -> tuple[int, ...]:
        return tuple(record.rating_count for record in self.entities)


class AggregateState(RosterBaseModel):
    """Registry, last update time and bounded history.

    Parameters
    ----------
    registry : dict
        ``external_id -> EntityRecord`` in roster order.
    last_updated : datetime or None
        Time of the last completed cycle.
    history : tuple of HistorySnapshot
        Recorded snapshots, oldest first.
    externally_sourced : bool
        ``True`` when rebuilt from a portable report payload. Such a state
        carries no history and must not be recorded against.
    """

    _KEY_ALIASES: ClassVar[dict[str, str]] = {"casinos": "registry", "entities": "registry"}

    registry: dict[str, EntityRecord] = Field(default_factory=dict)
    last_updated: Timestamp | None = None
    history: tuple[HistorySnapshot, ...] = ()
    externally_sourced: bool = False

    @model_validator(mode="before")
    @classmethod
    def _registry_list_to_mapping(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        merged = dict(values)
        for key in ("registry", "casinos", "entities"):
            registry = merged.get(key)
            if isinstance(registry, (list, tuple)):
                merged.pop(key)
                merged["registry"] = _registry_from_list(list(registry))
                break
        return merged

    @property
    def records(self) -> list[EntityRecord]:
        return list(self.registry.values())

    @property
    def has_live_data(self) -> bool:
        return any(not record.is_placeholder for record in self.registry.values())
