"""Pydantic models for roster data.

All models are frozen: every reconciliation cycle builds new instances
rather than mutating existing ones.
"""

from pyroster.models._base import RosterBaseModel, Timestamp, parse_timestamp
from pyroster.models.entity import EntityRecord, LiveRecord, RosterEntity
from pyroster.models.report import PAYLOAD_SCHEMA_VERSION, PortableEntity, PortableReportPayload, Theme
from pyroster.models.state import AggregateState, HistorySnapshot

__all__ = [
    "AggregateState",
    "EntityRecord",
    "HistorySnapshot",
    "LiveRecord",
    "PAYLOAD_SCHEMA_VERSION",
    "PortableEntity",
    "PortableReportPayload",
    "RosterBaseModel",
    "RosterEntity",
    "Theme",
    "Timestamp",
    "parse_timestamp",
]
