from __future__ import annotations

from datetime import UTC, datetime

import pytest

from pyroster.config import RosterConfig
from pyroster.models.entity import RosterEntity
from pyroster.registry.merge import Registry, seed_registry


@pytest.fixture
def roster() -> tuple[RosterEntity, ...]:
    return (
        RosterEntity(name="Casino International", external_id="ID-INTL"),
        RosterEntity(name="Casino Soho", external_id="ID-SOHO"),
        RosterEntity(name="Royal Casino", external_id="ID-ROYAL"),
        RosterEntity(name="Casino Otium", external_id="ID-OTIUM"),
    )


@pytest.fixture
def config(roster: tuple[RosterEntity, ...]) -> RosterConfig:
    return RosterConfig(roster=roster)


@pytest.fixture
def registry(roster: tuple[RosterEntity, ...]) -> Registry:
    return seed_registry(None, roster)


@pytest.fixture
def t0() -> datetime:
    return datetime(2026, 3, 10, 8, 0, tzinfo=UTC)
