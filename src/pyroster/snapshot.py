"""Portable snapshot codec.

A snapshot link carries a lossy copy of the registry in its URL fragment::

    https://host/path#rpt=<base64(percent-encoded(JSON))>

Encoding pipeline:

1. project each record to ``{"n": name, "r": rating, "v": rating_count, "p": external_id}``
2. wrap as ``{"c": records, "u": last_updated, "t": theme_hint}``
3. compact JSON, percent-encode (``encodeURIComponent`` rules) so the text is
   single-byte safe, then base64

Decoding reverses the pipeline and validates the result. Payloads written by
earlier releases used verbose record keys; they are detected and migrated to
the current schema before validation instead of being patched field by field.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import re
import secrets
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote, unquote, urlsplit, urlunsplit

from pydantic import ValidationError

from pyroster._constants import (
    FRAGMENT_KEY,
    LEGACY_FRAGMENT_KEY,
    MAPS_SEARCH_URL,
    SNAPSHOT_LOCATION,
    URI_COMPONENT_SAFE,
)
from pyroster.exceptions import SnapshotDecodeError
from pyroster.ingestion.normalize import maps_search_link
from pyroster.models.entity import EntityRecord
from pyroster.models.report import PAYLOAD_SCHEMA_VERSION, PortableEntity, PortableReportPayload, Theme
from pyroster.models.state import AggregateState

_logger = logging.getLogger(__name__)

_FRAGMENT_RE = re.compile(rf"#(?:{LEGACY_FRAGMENT_KEY}|{FRAGMENT_KEY})=(.+)")

_COMPACT_KEYS = frozenset({"n", "r", "v", "p"})
_VERBOSE_KEYS = frozenset({"name", "rating", "userRatingsTotal", "placeId"})


# ------------------------------------------------------------------
# Encoding
# ------------------------------------------------------------------


def to_payload(state: AggregateState, theme_hint: Theme | str | None = None) -> PortableReportPayload:
    entities = tuple(
        PortableEntity(
            name=record.name,
            rating=record.rating,
            rating_count=record.rating_count,
            external_id=record.external_id,
        )
        for record in state.registry.values()
    )
    return PortableReportPayload(
        entities=entities,
        last_updated=state.last_updated,
        theme_hint=str(theme_hint) if theme_hint is not None else None,
    )


def encode_payload(payload: PortableReportPayload) -> str:
    text = json.dumps(payload.to_wire(), separators=(",", ":"), ensure_ascii=False)
    escaped = quote(text, safe=URI_COMPONENT_SAFE)
    return base64.b64encode(escaped.encode("ascii")).decode("ascii")


def encode_snapshot(state: AggregateState, theme_hint: Theme | str | None = None) -> str:
    """Encode *state* as a portable fragment value."""
    return encode_payload(to_payload(state, theme_hint))


# ------------------------------------------------------------------
# Schema versions
# ------------------------------------------------------------------


def detect_schema_version(raw: Mapping[str, Any]) -> int:
    """Version 1 payloads use verbose record keys; version 2 the single-letter ones."""
    entities = raw.get("c")
    if isinstance(entities, list):
        keys: set[str] = set()
        for entity in entities:
            if isinstance(entity, dict):
                keys.update(entity)
        if keys & _VERBOSE_KEYS and not keys & _COMPACT_KEYS:
            return 1
    if "u" not in raw and "updated" in raw:
        return 1
    return PAYLOAD_SCHEMA_VERSION


def _migrate_entity_v1(entity: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "n": entity.get("name"),
        "r": entity.get("rating"),
        "v": entity.get("userRatingsTotal"),
        "p": entity.get("placeId") or entity.get("id"),
    }


def migrate_payload(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Bring a decoded payload dict to the current schema.

    Version 2 records may still carry an ``id`` key instead of ``p``; it is
    used as the identifier when ``p`` is absent.

    Raises :class:`SnapshotDecodeError` when the entity list is not a list.
    """
    records = raw.get("c")
    if records is not None and not isinstance(records, list):
        raise SnapshotDecodeError(f"Snapshot entities must be a list, got {type(records).__name__}")
    version = detect_schema_version(raw)
    entities = [entity for entity in records or [] if isinstance(entity, dict)]
    if version == 1:
        return {
            "c": [_migrate_entity_v1(entity) for entity in entities],
            "u": raw.get("u", raw.get("updated")),
            "t": raw.get("t"),
        }
    migrated: list[dict[str, Any]] = []
    for entity in entities:
        current = {key: entity[key] for key in _COMPACT_KEYS if key in entity}
        if not current.get("p") and entity.get("id"):
            current["p"] = entity["id"]
        migrated.append(current)
    return {"c": migrated, "u": raw.get("u"), "t": raw.get("t")}


# ------------------------------------------------------------------
# Decoding
# ------------------------------------------------------------------


def decode_snapshot(encoded: str) -> PortableReportPayload:
    """Decode a fragment value produced by :func:`encode_snapshot`.

    Raises :class:`SnapshotDecodeError` for malformed transport encoding,
    invalid JSON or a payload of the wrong shape.
    """
    value = encoded.strip()
    value += "=" * (-len(value) % 4)
    try:
        escaped = base64.b64decode(value, validate=True).decode("ascii")
        text = unquote(escaped, errors="strict")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise SnapshotDecodeError(f"Snapshot is not valid transport encoding: {exc}") from exc

    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SnapshotDecodeError(f"Snapshot is not JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise SnapshotDecodeError(f"Snapshot payload must be an object, got {type(raw).__name__}")

    try:
        return PortableReportPayload.model_validate(migrate_payload(raw))
    except ValidationError as exc:
        raise SnapshotDecodeError(f"Snapshot payload is invalid: {exc.error_count()} error(s)") from exc


def registry_from_payload(
    payload: PortableReportPayload,
    *,
    maps_search_url: str = MAPS_SEARCH_URL,
) -> AggregateState:
    """Rebuild an externally sourced aggregate from a decoded payload.

    Map links are regenerated from names and location labels are the fixed
    snapshot placeholder; the payload carries neither. Entities without an
    identifier, or repeating one already seen, get a random identifier so
    that every entity in the report is kept.
    """
    registry: dict[str, EntityRecord] = {}
    for entity in payload.entities:
        external_id = entity.external_id
        if not external_id or external_id in registry:
            external_id = secrets.token_hex(8)
        registry[external_id] = EntityRecord(
            id=external_id,
            external_id=external_id,
            name=entity.name,
            rating=entity.rating,
            rating_count=entity.rating_count,
            location_label=SNAPSHOT_LOCATION,
            map_link=maps_search_link(entity.name, maps_search_url),
        )
    return AggregateState(
        registry=registry,
        last_updated=payload.last_updated,
        history=(),
        externally_sourced=True,
    )


# ------------------------------------------------------------------
# Links
# ------------------------------------------------------------------


def live_link(url: str) -> str:
    """The page URL without query string or fragment."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def build_snapshot_link(url: str, state: AggregateState, theme_hint: Theme | str | None = None) -> str:
    return f"{live_link(url)}#{FRAGMENT_KEY}={encode_snapshot(state, theme_hint)}"


def extract_fragment_payload(url_or_fragment: str) -> str | None:
    """Return the encoded snapshot in a ``#rpt=`` or legacy ``#report=`` fragment."""
    match = _FRAGMENT_RE.search(url_or_fragment)
    if match is None:
        return None
    return unquote(match.group(1))
