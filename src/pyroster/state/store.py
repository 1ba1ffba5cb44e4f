"""Persistence of the aggregate state through a key-value store.

The engine never touches storage directly: it hands finished states to a
:class:`StateRepository`, which is the single point where durable state is
written.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from pyroster._constants import STORAGE_KEY, THEME_KEY
from pyroster.exceptions import ReadOnlyStateError, StateCorruptionError
from pyroster.models.report import Theme
from pyroster.models.state import AggregateState

_logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Structural string key-value store interface.

    Having a protocol here makes it easy to pass test doubles or a
    browser/local-storage bridge while keeping the provided stores concrete.
    """

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class InMemoryKeyValueStore:
    """Process-local store, mainly for tests and one-shot runs."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileKeyValueStore:
    """Store all keys in one JSON object file.

    Writes go to a sibling temporary file first and are moved into place,
    so a crash mid-write never leaves a truncated file behind.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)

    def _read_all(self) -> dict[str, str]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise StateCorruptionError(f"Store file {self._path} is not JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise StateCorruptionError(f"Store file {self._path} does not hold a JSON object")
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except StateCorruptionError:
            _logger.warning("Overwriting unreadable store file %s", self._path)
            data = {}
        data[key] = value
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(f"{self._path.name}.tmp")
        tmp_path.write_text(json.dumps(data, separators=(",", ":")), encoding="utf-8")
        os.replace(tmp_path, self._path)


class StateRepository:
    """Typed access to the two fixed storage keys."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        state_key: str = STORAGE_KEY,
        theme_key: str = THEME_KEY,
    ) -> None:
        self._store = store
        self._state_key = state_key
        self._theme_key = theme_key

    def load_state(self) -> AggregateState | None:
        """Load the persisted aggregate, or ``None`` when nothing is stored.

        Raises :class:`StateCorruptionError` when the stored value is not
        valid JSON or does not describe an aggregate state.
        """
        raw = self._store.get(self._state_key)
        if raw is None:
            return None
        try:
            state = AggregateState.model_validate_json(raw)
        except ValidationError as exc:
            raise StateCorruptionError(
                f"Persisted state under {self._state_key!r} is invalid: {exc.error_count()} error(s)",
                key=self._state_key,
            ) from exc
        # Externally sourced reports are never persisted as local state.
        return state.model_copy(update={"externally_sourced": False})

    def save_state(self, state: AggregateState) -> None:
        if state.externally_sourced:
            raise ReadOnlyStateError("refusing to persist an externally sourced report as local state")
        self._store.set(self._state_key, state.model_dump_json(by_alias=True))

    def load_theme(self) -> Theme:
        return Theme.parse(self._store.get(self._theme_key))

    def save_theme(self, theme: Theme) -> None:
        self._store.set(self._theme_key, theme.value)
