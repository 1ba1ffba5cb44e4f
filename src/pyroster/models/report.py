"""Portable report payload models.

The portable form is a lossy projection of :class:`AggregateState`:
names, ratings, rating counts and identifiers only. Single-letter keys
keep shared links short.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import Field, field_validator

from pyroster.ingestion.normalize import non_negative_or_zero, safe_float, safe_str
from pyroster.models._base import RosterBaseModel, Timestamp

#: Current payload schema. Version 1 used verbose record keys
#: (``name``/``rating``/``userRatingsTotal``/``placeId``).
PAYLOAD_SCHEMA_VERSION = 2


class Theme(StrEnum):
    """Display preference carried alongside shared reports."""

    DARK = "dark"
    LIGHT = "light"

    @classmethod
    def parse(cls, value: str | None, default: Theme | None = None) -> Theme:
        try:
            return cls(value)
        except ValueError:
            return default if default is not None else cls.DARK


class PortableEntity(RosterBaseModel):
    """Minimal per-entity record carried in a portable payload."""

    name: str = Field(default="", alias="n")
    rating: float = Field(default=0.0, alias="r")
    rating_count: int = Field(default=0, alias="v")
    external_id: str | None = Field(default=None, alias="p")

    @field_validator("rating", mode="before")
    @classmethod
    def _coerce_rating(cls, value: Any) -> float:
        return safe_float(value) or 0.0

    @field_validator("rating_count", mode="before")
    @classmethod
    def _coerce_rating_count(cls, value: Any) -> int:
        return non_negative_or_zero(value) or 0

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, value: Any) -> str:
        return safe_str(value) or ""

    @field_validator("external_id", mode="before")
    @classmethod
    def _coerce_external_id(cls, value: Any) -> str | None:
        return safe_str(value)


class PortableReportPayload(RosterBaseModel):
    """Transport payload: ``{"c": entities, "u": last_updated, "t": theme_hint}``."""

    entities: tuple[PortableEntity, ...] = Field(default=(), alias="c")
    last_updated: Timestamp | None = Field(default=None, alias="u")
    theme_hint: str | None = Field(default=None, alias="t")
