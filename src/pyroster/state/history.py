"""Bounded history recording.

Policy:
- Nothing is recorded until at least one entity carries live data.
- With no prior snapshot, the first registry with live data is recorded.
- Otherwise a snapshot is recorded when the rating-count vector changed,
  the calendar date changed, or the newest snapshot is older than the
  record interval. Unchanged registries within the same day are skipped
  so that repeated cycles do not fill the buffer.
- The buffer keeps the most recent ``limit`` snapshots, oldest dropped first.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import UTC, date, datetime, timedelta, tzinfo

from pyroster._constants import HISTORY_LIMIT, RECORD_INTERVAL
from pyroster.models.entity import EntityRecord
from pyroster.models.state import HistorySnapshot

_logger = logging.getLogger(__name__)


def ensure_aware(moment: datetime) -> datetime:
    """Naive datetimes are taken as UTC."""
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=UTC)


def calendar_date(moment: datetime, tz: tzinfo = UTC) -> date:
    return ensure_aware(moment).astimezone(tz).date()


def rating_counts(registry: Mapping[str, EntityRecord]) -> tuple[int, ...]:
    """Rating counts in registry iteration order."""
    return tuple(record.rating_count for record in registry.values())


def should_record(
    history: Sequence[HistorySnapshot],
    registry: Mapping[str, EntityRecord],
    now: datetime,
    *,
    record_interval: timedelta = RECORD_INTERVAL,
    tz: tzinfo = UTC,
) -> bool:
    """Decide whether *registry* observed at *now* is appended to *history*."""
    now = ensure_aware(now)
    if not any(record.rating_count > 0 for record in registry.values()):
        return False
    if not history:
        return True

    last = history[-1]
    if last.rating_counts != rating_counts(registry):
        return True
    if calendar_date(last.timestamp, tz) != calendar_date(now, tz):
        return True
    return now - last.timestamp > record_interval


def take_snapshot(registry: Mapping[str, EntityRecord], now: datetime) -> HistorySnapshot:
    return HistorySnapshot(timestamp=now, entities=tuple(registry.values()))


def append_snapshot(
    history: Sequence[HistorySnapshot],
    snapshot: HistorySnapshot,
    *,
    limit: int = HISTORY_LIMIT,
) -> tuple[HistorySnapshot, ...]:
    """Return a new history with *snapshot* appended, capped at *limit* entries."""
    appended = (*history, snapshot)
    dropped = len(appended) - limit
    if dropped > 0:
        _logger.debug("History full, dropping %d oldest snapshot(s)", dropped)
        return appended[dropped:]
    return appended
