"""Custom exception hierarchy for pyroster."""

from __future__ import annotations


class RosterError(Exception):
    """Base exception for all pyroster errors."""


class RosterConfigError(RosterError):
    """Invalid or missing configuration."""


class LookupSourceError(RosterError):
    """The external lookup source failed.

    The reconciliation cycle is aborted and the previous state is kept.
    The error is always retryable: triggering another cycle is safe.
    """

    retryable = True

    def __init__(self, message: str, *, cycle: int | None = None) -> None:
        self.cycle = cycle
        super().__init__(message)


class LookupTransportError(LookupSourceError):
    """HTTP-level failure (network, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class SnapshotDecodeError(RosterError):
    """A portable report payload could not be decoded.

    Callers fall back to persisted state or a fresh cycle.
    """


class StateCorruptionError(RosterError):
    """Persisted aggregate state is not valid JSON or fails validation."""

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class ReadOnlyStateError(RosterError):
    """An externally sourced report was handed to persistence."""
