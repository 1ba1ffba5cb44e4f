"""pyroster - Roster reconciliation against a noisy market lookup source."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyroster")
except PackageNotFoundError:
    __version__ = "0+local"
from pyroster.config import RosterConfig
from pyroster.engine import (
    BootstrapResult,
    CycleOutcome,
    CycleResult,
    ReconciliationEngine,
    StateOrigin,
    needs_refresh,
    reconcile,
)
from pyroster.exceptions import (
    LookupSourceError,
    LookupTransportError,
    ReadOnlyStateError,
    RosterConfigError,
    RosterError,
    SnapshotDecodeError,
    StateCorruptionError,
)
from pyroster.ingestion.normalize import canonical_key
from pyroster.models import (
    AggregateState,
    EntityRecord,
    HistorySnapshot,
    LiveRecord,
    PortableReportPayload,
    RosterEntity,
    Theme,
)
from pyroster.projection import SortDirection, SortState, project
from pyroster.registry import match_entity, merge_registry
from pyroster.snapshot import decode_snapshot, encode_snapshot
from pyroster.state.history import append_snapshot, should_record
from pyroster.state.store import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore, StateRepository

__all__ = [
    "__version__",
    "AggregateState",
    "BootstrapResult",
    "CycleOutcome",
    "CycleResult",
    "EntityRecord",
    "HistorySnapshot",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "LiveRecord",
    "LookupSourceError",
    "LookupTransportError",
    "PortableReportPayload",
    "ReadOnlyStateError",
    "ReconciliationEngine",
    "RosterConfig",
    "RosterConfigError",
    "RosterEntity",
    "RosterError",
    "SnapshotDecodeError",
    "SortDirection",
    "SortState",
    "StateCorruptionError",
    "StateOrigin",
    "StateRepository",
    "Theme",
    "append_snapshot",
    "canonical_key",
    "decode_snapshot",
    "encode_snapshot",
    "match_entity",
    "merge_registry",
    "needs_refresh",
    "project",
    "reconcile",
    "should_record",
]
