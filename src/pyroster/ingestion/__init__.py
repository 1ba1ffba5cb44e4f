"""Ingestion layer.

This package contains the lookup-source and geolocation adapters and the
defensive parsing helpers that turn their output into typed records.
"""

__all__: list[str] = []
