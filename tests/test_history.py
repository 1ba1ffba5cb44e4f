from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

from pyroster.models.entity import LiveRecord, RosterEntity
from pyroster.models.state import HistorySnapshot
from pyroster.registry.merge import Registry, merge_registry
from pyroster.state.history import append_snapshot, ensure_aware, rating_counts, should_record, take_snapshot


def _registry_with_counts(roster: tuple[RosterEntity, ...], *counts: int) -> Registry:
    live = [
        LiveRecord(name=entity.name, external_id=entity.external_id, rating=4.0, rating_count=count)
        for entity, count in zip(roster, counts, strict=False)
    ]
    return merge_registry(None, roster, live)


def _history(registry: Registry, at: datetime) -> tuple[HistorySnapshot, ...]:
    return (take_snapshot(registry, at),)


def test_nothing_recorded_without_live_data(registry: Registry, t0: datetime) -> None:
    assert not should_record((), registry, t0)


def test_first_snapshot_recorded_unconditionally(roster: tuple[RosterEntity, ...], t0: datetime) -> None:
    assert should_record((), _registry_with_counts(roster, 10), t0)


def test_unchanged_counts_recorded_after_six_hours(roster: tuple[RosterEntity, ...], t0: datetime) -> None:
    registry = _registry_with_counts(roster, 10, 20)
    history = _history(registry, t0)

    assert should_record(history, registry, t0 + timedelta(hours=7))


def test_unchanged_counts_skipped_within_six_hours(roster: tuple[RosterEntity, ...], t0: datetime) -> None:
    registry = _registry_with_counts(roster, 10, 20)
    history = _history(registry, t0)

    assert not should_record(history, registry, t0 + timedelta(hours=2))


def test_exactly_six_hours_is_not_enough(roster: tuple[RosterEntity, ...], t0: datetime) -> None:
    registry = _registry_with_counts(roster, 10, 20)
    history = _history(registry, t0)

    assert not should_record(history, registry, t0 + timedelta(hours=6))


def test_changed_counts_recorded_immediately(roster: tuple[RosterEntity, ...], t0: datetime) -> None:
    history = _history(_registry_with_counts(roster, 10, 20), t0)

    assert should_record(history, _registry_with_counts(roster, 10, 21), t0 + timedelta(minutes=1))


def test_count_order_matters(roster: tuple[RosterEntity, ...], t0: datetime) -> None:
    history = _history(_registry_with_counts(roster, 10, 20), t0)
    swapped = _registry_with_counts(roster, 20, 10)

    assert rating_counts(swapped)[:2] == (20, 10)
    assert should_record(history, swapped, t0 + timedelta(minutes=1))


def test_new_calendar_day_recorded(roster: tuple[RosterEntity, ...]) -> None:
    registry = _registry_with_counts(roster, 10, 20)
    late = datetime(2026, 3, 10, 23, 0, tzinfo=UTC)
    history = _history(registry, late)

    assert should_record(history, registry, late + timedelta(minutes=90))


def test_calendar_day_follows_time_zone(roster: tuple[RosterEntity, ...]) -> None:
    registry = _registry_with_counts(roster, 10, 20)
    tbilisi = timezone(timedelta(hours=4))
    last = datetime(2026, 3, 10, 19, 0, tzinfo=UTC)  # 23:00 local
    now = last + timedelta(minutes=90)  # 00:30 local, next day

    history = _history(registry, last)

    assert not should_record(history, registry, now)
    assert should_record(history, registry, now, tz=tbilisi)


def test_custom_record_interval(roster: tuple[RosterEntity, ...], t0: datetime) -> None:
    registry = _registry_with_counts(roster, 10, 20)
    history = _history(registry, t0)

    assert should_record(history, registry, t0 + timedelta(hours=2), record_interval=timedelta(hours=1))


def test_append_keeps_most_recent_entries(roster: tuple[RosterEntity, ...], t0: datetime) -> None:
    registry = _registry_with_counts(roster, 1)
    history: tuple[HistorySnapshot, ...] = ()
    for hour in range(5):
        history = append_snapshot(history, take_snapshot(registry, t0 + timedelta(hours=hour)), limit=3)

    assert len(history) == 3
    assert [snapshot.timestamp for snapshot in history] == [t0 + timedelta(hours=h) for h in (2, 3, 4)]


def test_default_buffer_caps_at_one_thousand(roster: tuple[RosterEntity, ...], t0: datetime) -> None:
    registry = _registry_with_counts(roster, 1)
    history = tuple(take_snapshot(registry, t0 + timedelta(minutes=i)) for i in range(1000))
    newest = take_snapshot(registry, t0 + timedelta(days=2))

    appended = append_snapshot(history, newest)

    assert len(appended) == 1000
    assert appended[0] is history[1]
    assert appended[-1] is newest


def test_append_does_not_mutate_input(roster: tuple[RosterEntity, ...], t0: datetime) -> None:
    registry = _registry_with_counts(roster, 1)
    history = (take_snapshot(registry, t0),)

    append_snapshot(history, take_snapshot(registry, t0 + timedelta(hours=1)))

    assert len(history) == 1


def test_snapshot_copies_registry_order(roster: tuple[RosterEntity, ...], t0: datetime) -> None:
    registry = _registry_with_counts(roster, 5, 6, 7, 8)

    snapshot = take_snapshot(registry, t0)

    assert [record.external_id for record in snapshot.entities] == [e.external_id for e in roster]
    assert snapshot.rating_counts == (5, 6, 7, 8)


def test_naive_now_is_taken_as_utc(roster: tuple[RosterEntity, ...], t0: datetime) -> None:
    registry = _registry_with_counts(roster, 3)
    history = _history(registry, t0)

    assert not should_record(history, registry, datetime(2026, 3, 10, 10, 0))
    assert should_record(history, registry, datetime(2026, 3, 10, 14, 30))


def test_ensure_aware_keeps_existing_offset() -> None:
    moment = datetime(2026, 3, 10, 10, 0, tzinfo=timezone(timedelta(hours=4)))

    assert ensure_aware(moment) is moment
    assert ensure_aware(datetime(2026, 3, 10, 10, 0)) == datetime(2026, 3, 10, 10, 0, tzinfo=UTC)
