"""Tests for Pydantic model parsing with RosterBaseModel."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from pyroster.models import AggregateState, EntityRecord, LiveRecord, RosterEntity, Theme, parse_timestamp


class TestLiveRecord:
    def test_sentinels_fall_back_to_defaults(self) -> None:
        record = LiveRecord.model_validate(
            {"name": "Casino Soho", "externalId": "", "rating": "--", "ratingCount": None, "locationLabel": "  "}
        )

        assert record.external_id is None
        assert record.rating == 0.0
        assert record.rating_count == 0
        assert record.location_label is None

    def test_numbers_coerced_from_strings(self) -> None:
        record = LiveRecord.model_validate({"name": "Royal Casino", "rating": "4.4", "ratingCount": "321"})

        assert record.rating == 4.4
        assert record.rating_count == 321

    def test_negative_count_clamped(self) -> None:
        assert LiveRecord(name="x", rating_count=-5).rating_count == 0

    def test_legacy_keys_accepted(self) -> None:
        record = LiveRecord.model_validate(
            {
                "name": "Casino Otium",
                "placeId": "ID-OTIUM",
                "userRatingsTotal": 12,
                "vicinity": "Sherif Khimshiashvili St",
                "googleMapsUri": "https://maps.example/otium",
            }
        )

        assert record.external_id == "ID-OTIUM"
        assert record.rating_count == 12
        assert record.location_label == "Sherif Khimshiashvili St"
        assert record.map_link == "https://maps.example/otium"

    def test_name_required(self) -> None:
        with pytest.raises(ValidationError):
            LiveRecord.model_validate({"rating": 4.0})


class TestEntityRecord:
    def test_id_and_external_id_fill_each_other(self) -> None:
        assert EntityRecord.model_validate({"externalId": "A", "name": "n"}).id == "A"
        assert EntityRecord.model_validate({"id": "B", "name": "n"}).external_id == "B"

    def test_placeholder_flag(self) -> None:
        assert EntityRecord(id="A", external_id="A", name="n").is_placeholder
        assert not EntityRecord(id="A", external_id="A", name="n", rating_count=1).is_placeholder

    def test_records_are_frozen(self) -> None:
        record = EntityRecord(id="A", external_id="A", name="n")
        with pytest.raises(ValidationError):
            record.rating = 5.0  # type: ignore[misc]


class TestAggregateState:
    def test_wire_round_trip(self) -> None:
        record = EntityRecord(id="A", external_id="A", name="Casino A", rating=4.0, rating_count=3)
        state = AggregateState(registry={"A": record}, last_updated=datetime(2026, 1, 2, tzinfo=UTC))

        restored = AggregateState.model_validate_json(state.model_dump_json(by_alias=True))

        assert restored == state
        assert "lastUpdated" in state.to_wire()

    def test_registry_list_keyed_by_identifier(self) -> None:
        state = AggregateState.model_validate(
            {"casinos": [{"id": "A", "placeId": "A", "name": "Casino A"}, {"externalId": "B", "name": "Casino B"}]}
        )

        assert list(state.registry) == ["A", "B"]
        assert not state.has_live_data


def test_roster_entity_wire_keys() -> None:
    assert RosterEntity(name="Casino Peace", external_id="P").to_wire() == {"name": "Casino Peace", "externalId": "P"}


def test_parse_timestamp_variants() -> None:
    expected = datetime(2026, 3, 10, 9, 30, tzinfo=UTC)
    assert parse_timestamp("2026-03-10T09:30:00.000Z") == expected
    assert parse_timestamp("2026-03-10T09:30:00") == expected
    assert parse_timestamp(expected.timestamp()) == expected
    assert parse_timestamp(expected.timestamp() * 1000) == expected
    assert parse_timestamp(None) is None


def test_theme_parse_defaults_to_dark() -> None:
    assert Theme.parse("light") == Theme.LIGHT
    assert Theme.parse("sepia") == Theme.DARK
    assert Theme.parse(None, Theme.LIGHT) == Theme.LIGHT
