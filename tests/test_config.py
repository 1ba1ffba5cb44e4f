from __future__ import annotations

from datetime import timedelta

import pytest

from pyroster._constants import DEFAULT_ROSTER
from pyroster.config import RosterConfig
from pyroster.exceptions import RosterConfigError
from pyroster.models.entity import RosterEntity


def test_defaults() -> None:
    config = RosterConfig()

    assert len(config.roster) == len(DEFAULT_ROSTER)
    assert config.roster[0].name == "Casino International"
    assert config.history_limit == 1000
    assert config.record_interval == timedelta(hours=6)
    assert config.stop_words == ("casino", "batumi")


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROSTER_LOCATION_HINT", "Tbilisi, Georgia")
    monkeypatch.setenv("ROSTER_HISTORY_LIMIT", "50")
    monkeypatch.setenv("ROSTER_RECORD_INTERVAL_HOURS", "1.5")
    monkeypatch.setenv("ROSTER_STOP_WORDS", "Casino, Tbilisi ,")

    config = RosterConfig.from_env(refresh_hour=7)

    assert config.location_hint == "Tbilisi, Georgia"
    assert config.history_limit == 50
    assert config.record_interval == timedelta(minutes=90)
    assert config.stop_words == ("casino", "tbilisi")
    assert config.refresh_hour == 7


def test_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROSTER_HISTORY_LIMIT", "50")

    assert RosterConfig.from_env(history_limit=10).history_limit == 10


def test_bad_numeric_env_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROSTER_GEOLOCATION_TIMEOUT", "soon")

    with pytest.raises(RosterConfigError):
        RosterConfig.from_env()


def test_duplicate_roster_ids_rejected() -> None:
    roster = (RosterEntity(name="A", external_id="X"), RosterEntity(name="B", external_id="X"))

    with pytest.raises(RosterConfigError, match="duplicate"):
        RosterConfig(roster=roster)


@pytest.mark.parametrize("kwargs", [{"roster": ()}, {"history_limit": 0}, {"refresh_hour": 24}])
def test_invalid_values_rejected(kwargs: dict[str, object]) -> None:
    with pytest.raises(RosterConfigError):
        RosterConfig(**kwargs)  # type: ignore[arg-type]
