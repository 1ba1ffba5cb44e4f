"""Lookup source protocol and the HTTP JSON adapter."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any, Protocol

import aiohttp
from pydantic import ValidationError

from pyroster.exceptions import LookupTransportError
from pyroster.models.entity import LiveRecord, RosterEntity

_logger = logging.getLogger(__name__)

# Envelope keys a lookup response may wrap its result list in.
_RESULT_KEYS: tuple[str, ...] = ("results", "entities", "casinos", "data")


class LookupSource(Protocol):
    """Structural interface for the external lookup collaborator.

    Any exception raised by ``query`` aborts the reconciliation cycle.
    Partial results are not distinguished from full failure.
    """

    async def query(
        self,
        location_hint: str,
        lat: float | None,
        lng: float | None,
        roster: Sequence[RosterEntity],
    ) -> Sequence[LiveRecord]: ...


def parse_live_records(decoded: Any) -> list[LiveRecord]:
    """Parse a decoded lookup response into live records.

    Accepts a bare list or an object wrapping the list under one of the
    usual envelope keys. Rows that fail validation are dropped one by one.
    """
    rows: Any = decoded
    if isinstance(decoded, dict):
        rows = next((decoded[key] for key in _RESULT_KEYS if isinstance(decoded.get(key), list)), [])
    if not isinstance(rows, list):
        return []

    records: list[LiveRecord] = []
    for row in rows:
        try:
            records.append(LiveRecord.model_validate(row))
        except ValidationError as exc:
            _logger.debug("Dropping unparseable lookup row: %s", exc.errors(include_url=False))
    return records


class HttpLookupSource:
    """POST the roster to a JSON endpoint and parse the returned rows."""

    def __init__(
        self,
        url: str,
        http_session: aiohttp.ClientSession,
        *,
        timeout: float = 60.0,
    ) -> None:
        self._url = url
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    def build_request(
        self,
        location_hint: str,
        lat: float | None,
        lng: float | None,
        roster: Sequence[RosterEntity],
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "location": location_hint,
            "entities": [entity.to_wire() for entity in roster],
        }
        if lat is not None and lng is not None:
            body["lat"] = lat
            body["lng"] = lng
        return body

    async def query(
        self,
        location_hint: str,
        lat: float | None,
        lng: float | None,
        roster: Sequence[RosterEntity],
    ) -> list[LiveRecord]:
        body = self.build_request(location_hint, lat, lng, roster)

        _logger.debug("POST %s", self._url)

        try:
            async with self._http.post(self._url, json=body, timeout=self._timeout) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise LookupTransportError(
                        f"HTTP {resp.status} from lookup source: {text[:200]}",
                        status_code=resp.status,
                        url=self._url,
                    )
        except LookupTransportError:
            raise
        except TimeoutError as exc:
            raise LookupTransportError("Lookup source timed out", url=self._url) from exc
        except aiohttp.ClientError as exc:
            raise LookupTransportError(f"Lookup request failed: {exc}", url=self._url) from exc

        try:
            decoded = json.loads(text)
        except json.JSONDecodeError as exc:
            raise LookupTransportError(
                f"Invalid JSON from lookup source: {text[:200]}",
                url=self._url,
            ) from exc

        records = parse_live_records(decoded)
        _logger.debug("Lookup source returned %d usable record(s)", len(records))
        return records
