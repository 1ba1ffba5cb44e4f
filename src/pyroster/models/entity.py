"""Roster, registry and live lookup record models."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import Field, field_validator, model_validator

from pyroster._constants import PLACEHOLDER_LOCATION
from pyroster.ingestion.normalize import non_negative_or_zero, safe_float, safe_str
from pyroster.models._base import RosterBaseModel

# Keys written by earlier releases of the dashboard state.
_LEGACY_KEY_ALIASES: dict[str, str] = {
    "placeId": "externalId",
    "userRatingsTotal": "ratingCount",
    "vicinity": "locationLabel",
    "address": "locationLabel",
    "googleMapsUri": "mapLink",
}


class RosterEntity(RosterBaseModel):
    """A tracked entity, fixed at deploy time."""

    _KEY_ALIASES: ClassVar[dict[str, str]] = _LEGACY_KEY_ALIASES

    name: str
    """Canonical display name."""
    external_id: str
    """Stable identifier assigned by the lookup source."""


class EntityRecord(RosterBaseModel):
    """One reconciled registry entry.

    ``id`` always equals ``external_id``. A record with
    ``rating_count == 0`` is a placeholder that has never been confirmed
    by live data.
    """

    _KEY_ALIASES: ClassVar[dict[str, str]] = _LEGACY_KEY_ALIASES

    id: str
    external_id: str
    name: str
    rating: float = 0.0
    rating_count: int = Field(default=0, ge=0)
    location_label: str = PLACEHOLDER_LOCATION
    map_link: str = ""

    @model_validator(mode="before")
    @classmethod
    def _fill_identity(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        merged = dict(values)
        external_id = merged.get("externalId") or merged.get("external_id") or merged.get("placeId")
        if external_id is not None:
            merged["externalId"] = external_id
        elif "id" in merged:
            merged["externalId"] = external_id = merged["id"]
        if "id" not in merged and external_id is not None:
            merged["id"] = external_id
        return merged

    @field_validator("rating", mode="before")
    @classmethod
    def _coerce_rating(cls, value: Any) -> float:
        return safe_float(value) or 0.0

    @field_validator("rating_count", mode="before")
    @classmethod
    def _coerce_rating_count(cls, value: Any) -> int:
        return non_negative_or_zero(value) or 0

    @property
    def is_placeholder(self) -> bool:
        return self.rating_count == 0


class LiveRecord(RosterBaseModel):
    """One result row returned by the lookup source.

    The source is loosely structured: the identifier, location label and
    map link are optional, and numbers may arrive as strings.
    """

    _KEY_ALIASES: ClassVar[dict[str, str]] = _LEGACY_KEY_ALIASES

    name: str
    external_id: str | None = None
    rating: float = 0.0
    rating_count: int = 0
    location_label: str | None = None
    map_link: str | None = None

    @field_validator("rating", mode="before")
    @classmethod
    def _coerce_rating(cls, value: Any) -> float:
        return safe_float(value) or 0.0

    @field_validator("rating_count", mode="before")
    @classmethod
    def _coerce_rating_count(cls, value: Any) -> int:
        return non_negative_or_zero(value) or 0

    @field_validator("external_id", "location_label", "map_link", mode="before")
    @classmethod
    def _coerce_optional_text(cls, value: Any) -> str | None:
        text = safe_str(value)
        if text is None:
            return None
        return text.strip() or None
