"""Engine configuration for pyroster."""

from __future__ import annotations

import dataclasses
import os
from datetime import timedelta
from typing import Any

from pyroster._constants import (
    DAILY_REFRESH_HOUR,
    DEFAULT_LOCATION_HINT,
    DEFAULT_ROSTER,
    DEFAULT_STOP_WORDS,
    GEOLOCATION_TIMEOUT_S,
    HISTORY_LIMIT,
    MAPS_SEARCH_URL,
    RECORD_INTERVAL,
    SUBJECT_KEY,
)
from pyroster.exceptions import RosterConfigError
from pyroster.models.entity import RosterEntity


def _default_roster() -> tuple[RosterEntity, ...]:
    return tuple(RosterEntity(name=name, external_id=external_id) for name, external_id in DEFAULT_ROSTER)


def _split_words(value: str) -> tuple[str, ...]:
    return tuple(word.strip().lower() for word in value.split(",") if word.strip())


@dataclasses.dataclass(frozen=True)
class RosterConfig:
    """Engine configuration.

    Parameters
    ----------
    location_hint : str
        Free-text locality passed to the lookup source.
    lookup_url : str or None
        Endpoint used by :class:`pyroster.ingestion.source.HttpLookupSource`.
    roster : tuple of RosterEntity
        The tracked entities, in display order. Changing it is a
        deployment-time operation.
    stop_words : tuple of str
        Category/locality words removed when building matching keys.
    history_limit : int
        Maximum number of history snapshots retained (oldest dropped first).
    record_interval : timedelta
        Maximum age of the newest snapshot before an unchanged registry is
        recorded again.
    geolocation_timeout : float
        Seconds to wait for coordinates before continuing without them.
    refresh_hour : int
        Local hour after which a state last updated before that hour is
        considered stale on load.
    subject_key : str
        Lowercase name fragment identifying the highlighted entity.
    time_zone : str
        IANA zone whose calendar decides "new day" for history recording
        and the daily refresh rule.
    maps_search_url : str
        Prefix for generated map search links.
    """

    location_hint: str = DEFAULT_LOCATION_HINT
    lookup_url: str | None = None
    roster: tuple[RosterEntity, ...] = dataclasses.field(default_factory=_default_roster)
    stop_words: tuple[str, ...] = DEFAULT_STOP_WORDS
    history_limit: int = HISTORY_LIMIT
    record_interval: timedelta = RECORD_INTERVAL
    geolocation_timeout: float = GEOLOCATION_TIMEOUT_S
    refresh_hour: int = DAILY_REFRESH_HOUR
    subject_key: str = SUBJECT_KEY
    time_zone: str = "UTC"
    maps_search_url: str = MAPS_SEARCH_URL

    def __post_init__(self) -> None:
        if not self.roster:
            raise RosterConfigError("roster must contain at least one entity")
        seen: set[str] = set()
        for entity in self.roster:
            if entity.external_id in seen:
                raise RosterConfigError(f"duplicate roster external id: {entity.external_id}")
            seen.add(entity.external_id)
        if self.history_limit <= 0:
            raise RosterConfigError(f"history_limit must be positive, got {self.history_limit}")
        if not 0 <= self.refresh_hour <= 23:
            raise RosterConfigError(f"refresh_hour must be between 0 and 23, got {self.refresh_hour}")

    @classmethod
    def from_env(cls, **overrides: Any) -> RosterConfig:
        """Create configuration from environment variables.

        Reads optional ``ROSTER_*`` variables. Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        RosterConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "ROSTER_LOCATION_HINT": "location_hint",
            "ROSTER_LOOKUP_URL": "lookup_url",
            "ROSTER_SUBJECT_KEY": "subject_key",
            "ROSTER_TIME_ZONE": "time_zone",
            "ROSTER_MAPS_SEARCH_URL": "maps_search_url",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        # Numeric values, handled separately
        try:
            limit_env = env.get("ROSTER_HISTORY_LIMIT")
            if limit_env is not None and "history_limit" not in overrides:
                config_kwargs["history_limit"] = int(limit_env)

            interval_env = env.get("ROSTER_RECORD_INTERVAL_HOURS")
            if interval_env is not None and "record_interval" not in overrides:
                config_kwargs["record_interval"] = timedelta(hours=float(interval_env))

            timeout_env = env.get("ROSTER_GEOLOCATION_TIMEOUT")
            if timeout_env is not None and "geolocation_timeout" not in overrides:
                config_kwargs["geolocation_timeout"] = float(timeout_env)

            hour_env = env.get("ROSTER_REFRESH_HOUR")
            if hour_env is not None and "refresh_hour" not in overrides:
                config_kwargs["refresh_hour"] = int(hour_env)
        except ValueError as exc:
            raise RosterConfigError(f"invalid numeric environment value: {exc}") from exc

        words_env = env.get("ROSTER_STOP_WORDS")
        if words_env is not None and "stop_words" not in overrides:
            config_kwargs["stop_words"] = _split_words(words_env)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
