"""Base model for roster data.

Every pyroster model inherits from :class:`RosterBaseModel` which
provides:

* ``alias_generator=to_camel`` so camelCase wire keys map
  automatically to snake_case fields.
* A ``model_validator(mode="before")`` that strips lookup-source
  sentinel values (``""``, ``"--"``, NaN) so the field default is used.
* Legacy key aliases per model via ``_KEY_ALIASES``.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Annotated, Any, ClassVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

# Sentinel strings a lookup source uses for "not available".
_SENTINELS = frozenset({"", "--", "NaN", "nan", "null", "undefined"})

# Threshold to distinguish seconds from milliseconds.
_MS_THRESHOLD = 1_000_000_000_000


def parse_timestamp(value: Any) -> datetime | None:
    """Coerce an ISO-8601 string or epoch number (s or ms) to an aware UTC datetime.

    Naive datetimes and ISO strings without an offset are taken as UTC.
    """
    if value is None:
        return value
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        ts = float(value)
        if ts >= _MS_THRESHOLD:
            ts /= 1000.0
        try:
            return datetime.fromtimestamp(ts, tz=UTC)
        except (OverflowError, OSError) as exc:
            raise ValueError(f"epoch timestamp {value!r} is out of range") from exc
    if isinstance(value, str):
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=UTC)
    return value


Timestamp = Annotated[datetime, BeforeValidator(parse_timestamp)]
"""Annotated type that coerces ISO strings and epoch numbers to UTC datetimes."""


class RosterBaseModel(BaseModel):
    """Base for roster models.

    Handles:
    * camelCase -> snake_case via ``alias_generator=to_camel``
    * Sentinel values (``""``, ``"--"``, NaN) -> dropped so the field
      default is used instead
    * Renaming legacy keys through ``_KEY_ALIASES``
    """

    _KEY_ALIASES: ClassVar[dict[str, str]] = {}
    """``{"legacyKey": "currentKey"}`` renames applied before validation."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @staticmethod
    def _clean_dict(values: dict[str, Any], aliases: dict[str, str] | None = None) -> dict[str, Any]:
        """Strip sentinel values and apply key aliases on *values*."""
        working = dict(values)
        if aliases:
            for old_key, new_key in aliases.items():
                if old_key in working and new_key not in working:
                    working[new_key] = working.pop(old_key)

        cleaned: dict[str, Any] = {}
        for key, value in working.items():
            if value is None:
                continue
            if isinstance(value, str) and value.strip() in _SENTINELS:
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        aliases: dict[str, str] = getattr(cls, "_KEY_ALIASES", {})
        return RosterBaseModel._clean_dict(values, aliases)

    def to_wire(self) -> dict[str, Any]:
        """JSON-safe dict using camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)
