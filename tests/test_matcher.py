from __future__ import annotations

from pyroster.models.entity import LiveRecord, RosterEntity
from pyroster.registry.matcher import keys_overlap, match_entity
from pyroster.registry.merge import Registry, seed_registry


def test_known_identifier_wins_over_better_name_match(roster: tuple[RosterEntity, ...], registry: Registry) -> None:
    live = LiveRecord(name="Royal Casino", external_id="ID-SOHO", rating=4.0, rating_count=10)

    assert match_entity(live, roster, registry) == "ID-SOHO"


def test_unknown_identifier_falls_back_to_name(roster: tuple[RosterEntity, ...], registry: Registry) -> None:
    live = LiveRecord(name="Soho Casino Batumi", external_id="SOMETHING-ELSE")

    assert match_entity(live, roster, registry) == "ID-SOHO"


def test_live_key_containing_roster_key_matches(roster: tuple[RosterEntity, ...], registry: Registry) -> None:
    live = LiveRecord(name="Casino Soho - Batumi Georgia")

    assert match_entity(live, roster, registry) == "ID-SOHO"


def test_live_key_contained_in_roster_key_matches(roster: tuple[RosterEntity, ...], registry: Registry) -> None:
    live = LiveRecord(name="Intern")

    assert match_entity(live, roster, registry) == "ID-INTL"


def test_first_roster_entry_wins_for_ambiguous_names() -> None:
    roster = (
        RosterEntity(name="Royal Palace Casino", external_id="A"),
        RosterEntity(name="Casino Royal", external_id="B"),
    )
    registry = seed_registry(None, roster)

    assert match_entity(LiveRecord(name="Royal"), roster, registry) == "A"
    assert match_entity(LiveRecord(name="Royal"), tuple(reversed(roster)), registry) == "B"


def test_stop_word_only_name_matches_nothing(roster: tuple[RosterEntity, ...], registry: Registry) -> None:
    assert match_entity(LiveRecord(name="Casino Batumi"), roster, registry) is None


def test_unrelated_name_is_discarded(roster: tuple[RosterEntity, ...], registry: Registry) -> None:
    assert match_entity(LiveRecord(name="Sheraton Hotel"), roster, registry) is None


def test_keys_overlap_rules() -> None:
    assert keys_overlap("soho", "soho")
    assert keys_overlap("sohogeorgia", "soho")
    assert keys_overlap("so", "soho")
    assert not keys_overlap("", "soho")
    assert not keys_overlap("otium", "soho")
