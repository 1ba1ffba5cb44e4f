"""Best-effort geolocation."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Coordinates:
    latitude: float
    longitude: float


class GeolocationProvider(Protocol):
    async def locate(self) -> Coordinates | None: ...


class NoGeolocation:
    """Provider for deployments without location access."""

    async def locate(self) -> Coordinates | None:
        return None


@dataclass(frozen=True, slots=True)
class FixedGeolocation:
    """Provider returning configured coordinates."""

    coordinates: Coordinates

    async def locate(self) -> Coordinates | None:
        return self.coordinates


async def acquire_coordinates(provider: GeolocationProvider, timeout: float) -> Coordinates | None:
    """Ask *provider* for coordinates, giving up after *timeout* seconds.

    Denial, timeout and provider errors all yield ``None``; location is a
    hint for the lookup source and never fails a cycle.
    """
    try:
        return await asyncio.wait_for(provider.locate(), timeout=timeout)
    except TimeoutError:
        _logger.debug("Geolocation timed out after %.1fs", timeout)
    except Exception as exc:
        _logger.debug("Geolocation unavailable: %s", exc)
    return None
