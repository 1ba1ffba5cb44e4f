"""Resolve live lookup records to roster identities.

Two tiers, in order:

1. Exact identifier: a live record whose ``external_id`` is already in the
   registry binds to it, regardless of what its name says.
2. Canonical key containment: the live name's :func:`canonical_key` is
   compared with each roster name's key in roster order; the first key that
   equals, contains or is contained in the live key wins.

Containment is a coarse approximation. A short key contained in several
roster keys binds to the first of them in roster order, and an empty key
(a name made only of stop-words or punctuation) never matches.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

from pyroster._constants import DEFAULT_STOP_WORDS
from pyroster.ingestion.normalize import canonical_key
from pyroster.models.entity import EntityRecord, LiveRecord, RosterEntity

_logger = logging.getLogger(__name__)


def keys_overlap(live_key: str, roster_key: str) -> bool:
    if not live_key or not roster_key:
        return False
    return live_key == roster_key or roster_key in live_key or live_key in roster_key


def match_entity(
    live: LiveRecord,
    roster: Sequence[RosterEntity],
    registry: Mapping[str, EntityRecord],
    *,
    stop_words: Iterable[str] = DEFAULT_STOP_WORDS,
) -> str | None:
    """Return the roster ``external_id`` *live* refers to, or ``None``."""
    if live.external_id and live.external_id in registry:
        return live.external_id

    words = tuple(stop_words)
    live_key = canonical_key(live.name, words)
    for entity in roster:
        if keys_overlap(live_key, canonical_key(entity.name, words)):
            _logger.debug("Matched %r to %s by name", live.name, entity.external_id)
            return entity.external_id

    _logger.debug("Discarding %r: no roster entity matches", live.name)
    return None
