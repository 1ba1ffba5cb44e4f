"""Reconciliation engine.

One cycle: acquire coordinates, query the lookup source, merge, decide on a
history append, persist, swap in the new state. Every cycle builds a fresh
:class:`AggregateState`; nothing is mutated in place.

Cycles may overlap when a caller triggers a refresh while another is still
awaiting the source. Each cycle carries a monotonically increasing token
and only the newest token's result is applied; older results are dropped.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, tzinfo
from enum import StrEnum
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pyroster.config import RosterConfig
from pyroster.exceptions import (
    LookupSourceError,
    RosterConfigError,
    SnapshotDecodeError,
    StateCorruptionError,
)
from pyroster.ingestion.location import GeolocationProvider, NoGeolocation, acquire_coordinates
from pyroster.ingestion.source import LookupSource
from pyroster.models.entity import EntityRecord, LiveRecord
from pyroster.models.report import Theme
from pyroster.models.state import AggregateState
from pyroster.projection import SortState, find_subject_id, project
from pyroster.registry.merge import merge_registry, seed_registry
from pyroster.snapshot import build_snapshot_link, decode_snapshot, extract_fragment_payload, registry_from_payload
from pyroster.state.history import append_snapshot, ensure_aware, should_record, take_snapshot
from pyroster.state.store import StateRepository

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def resolve_time_zone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise RosterConfigError(f"unknown time zone {name!r}") from exc


class CycleOutcome(StrEnum):
    RECORDED = "recorded"
    UPDATED = "updated"
    STALE = "stale"


class StateOrigin(StrEnum):
    REPORT = "report"
    PERSISTED = "persisted"
    FRESH = "fresh"


@dataclass(frozen=True, slots=True)
class CycleResult:
    """What a refresh did. ``state`` is the engine state after the cycle."""

    cycle: int
    outcome: CycleOutcome
    state: AggregateState


@dataclass(frozen=True, slots=True)
class BootstrapResult:
    origin: StateOrigin
    state: AggregateState
    needs_refresh: bool


def needs_refresh(
    last_updated: datetime | None,
    now: datetime,
    *,
    refresh_hour: int,
    tz: tzinfo = UTC,
) -> bool:
    """True once *now* is past today's refresh hour and the last update predates it."""
    local_now = ensure_aware(now).astimezone(tz)
    threshold = local_now.replace(hour=refresh_hour, minute=0, second=0, microsecond=0)
    if local_now <= threshold:
        return False
    return last_updated is None or ensure_aware(last_updated) < threshold


def reconcile(
    previous: AggregateState | None,
    live_records: Iterable[LiveRecord],
    now: datetime,
    *,
    config: RosterConfig,
    tz: tzinfo = UTC,
) -> tuple[AggregateState, bool]:
    """Pure reconciliation step. Returns the new state and whether history grew.

    States rebuilt from a shared report keep their origin and are never
    recorded against.
    """
    registry = merge_registry(
        previous.registry if previous is not None else None,
        config.roster,
        live_records,
        stop_words=config.stop_words,
        maps_search_url=config.maps_search_url,
    )
    history = previous.history if previous is not None else ()
    externally_sourced = previous is not None and previous.externally_sourced

    recorded = False
    if not externally_sourced and should_record(
        history, registry, now, record_interval=config.record_interval, tz=tz
    ):
        history = append_snapshot(history, take_snapshot(registry, now), limit=config.history_limit)
        recorded = True

    state = AggregateState(
        registry=registry,
        last_updated=now,
        history=history,
        externally_sourced=externally_sourced,
    )
    return state, recorded


class ReconciliationEngine:
    """Holds the current aggregate state and runs reconciliation cycles.

    Usage::

        engine = ReconciliationEngine(config, source, repository)
        engine.bootstrap(page_url)
        result = await engine.refresh()
    """

    def __init__(
        self,
        config: RosterConfig,
        source: LookupSource,
        repository: StateRepository | None = None,
        *,
        geolocation: GeolocationProvider | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config
        self._source = source
        self._repository = repository
        self._geolocation = geolocation if geolocation is not None else NoGeolocation()
        self._clock = clock
        self._tz = resolve_time_zone(config.time_zone)
        self._latest_cycle = 0
        self._state = self.fresh_state()
        self._theme = self._load_theme()

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def config(self) -> RosterConfig:
        return self._config

    @property
    def state(self) -> AggregateState:
        return self._state

    @property
    def theme(self) -> Theme:
        return self._theme

    @property
    def is_external_report(self) -> bool:
        return self._state.externally_sourced

    def fresh_state(self) -> AggregateState:
        """All-placeholder state for the configured roster."""
        registry = seed_registry(None, self._config.roster, maps_search_url=self._config.maps_search_url)
        return AggregateState(registry=registry)

    def _load_theme(self) -> Theme:
        if self._repository is None:
            return Theme.DARK
        try:
            return self._repository.load_theme()
        except StateCorruptionError as exc:
            _logger.warning("Ignoring unreadable theme preference: %s", exc)
            return Theme.DARK

    def set_theme(self, theme: Theme) -> None:
        self._theme = theme
        if self._repository is not None:
            self._repository.save_theme(theme)

    def toggle_theme(self) -> Theme:
        self.set_theme(Theme.LIGHT if self._theme == Theme.DARK else Theme.DARK)
        return self._theme

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _load_local(self) -> AggregateState | None:
        if self._repository is None:
            return None
        try:
            loaded = self._repository.load_state()
        except StateCorruptionError as exc:
            _logger.warning("Ignoring corrupt persisted state: %s", exc)
            return None
        if loaded is None:
            return None
        # Keep the registry aligned with the roster deployed now.
        registry = seed_registry(loaded.registry, self._config.roster, maps_search_url=self._config.maps_search_url)
        return loaded.model_copy(update={"registry": registry})

    def bootstrap(self, url: str | None = None) -> BootstrapResult:
        """Pick the initial state.

        A report link in *url* wins; an undecodable one is logged and
        ignored. Otherwise persisted state is used, then a fresh
        all-placeholder state.
        """
        now = self._clock()
        encoded = extract_fragment_payload(url) if url else None
        if encoded is not None:
            try:
                payload = decode_snapshot(encoded)
            except SnapshotDecodeError as exc:
                _logger.warning("Failed to parse report URL, falling back to local state: %s", exc)
            else:
                self._state = registry_from_payload(payload, maps_search_url=self._config.maps_search_url)
                if payload.theme_hint:
                    self._theme = Theme.parse(payload.theme_hint, self._theme)
                return BootstrapResult(StateOrigin.REPORT, self._state, needs_refresh=False)

        local = self._load_local()
        if local is not None:
            self._state = local
            stale = needs_refresh(local.last_updated, now, refresh_hour=self._config.refresh_hour, tz=self._tz)
            return BootstrapResult(StateOrigin.PERSISTED, local, needs_refresh=stale)

        self._state = self.fresh_state()
        return BootstrapResult(StateOrigin.FRESH, self._state, needs_refresh=True)

    async def start(self, url: str | None = None) -> AggregateState:
        """Bootstrap, then run a cycle when the loaded state calls for one."""
        result = self.bootstrap(url)
        if result.needs_refresh:
            await self.refresh()
        return self._state

    def discard_report(self) -> AggregateState:
        """Leave a shared report and return to local state."""
        self._state = self._load_local() or self.fresh_state()
        return self._state

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    async def refresh(self) -> CycleResult:
        """Run one reconciliation cycle.

        Raises :class:`LookupSourceError` when the source fails; the current
        state is left untouched and the call can simply be retried.
        """
        self._latest_cycle += 1
        cycle = self._latest_cycle

        coordinates = await acquire_coordinates(self._geolocation, self._config.geolocation_timeout)
        lat = coordinates.latitude if coordinates is not None else None
        lng = coordinates.longitude if coordinates is not None else None

        try:
            live_records = await self._source.query(self._config.location_hint, lat, lng, self._config.roster)
        except Exception as exc:
            if cycle != self._latest_cycle:
                _logger.info("Cycle %d failed after being superseded: %s", cycle, exc)
                return CycleResult(cycle, CycleOutcome.STALE, self._state)
            if isinstance(exc, LookupSourceError):
                exc.cycle = cycle
                raise
            raise LookupSourceError(f"Market lookup failed: {exc}", cycle=cycle) from exc

        if cycle != self._latest_cycle:
            _logger.info("Discarding result of cycle %d; cycle %d is newer", cycle, self._latest_cycle)
            return CycleResult(cycle, CycleOutcome.STALE, self._state)

        state, recorded = reconcile(self._state, live_records, self._clock(), config=self._config, tz=self._tz)
        if self._repository is not None and not state.externally_sourced:
            self._repository.save_state(state)
        self._state = state

        outcome = CycleOutcome.RECORDED if recorded else CycleOutcome.UPDATED
        _logger.info(
            "Cycle %d %s: %d/%d entities with live data, %d snapshot(s) in history",
            cycle,
            outcome.value,
            sum(1 for record in state.registry.values() if not record.is_placeholder),
            len(state.registry),
            len(state.history),
        )
        return CycleResult(cycle, outcome, state)

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------

    def table(self, search_term: str = "", sort: SortState | None = None) -> list[EntityRecord]:
        sort = sort if sort is not None else SortState()
        return project(self._state.registry, search_term, sort.key, sort.direction)

    def subject_id(self) -> str | None:
        return find_subject_id(self._state.registry, self._config.subject_key)

    def snapshot_link(self, url: str) -> str:
        return build_snapshot_link(url, self._state, self._theme)
