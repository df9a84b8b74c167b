"""Exception types shared by the tracker and aggregator services."""

from __future__ import annotations


class ChronosError(RuntimeError):
    """Base class for telemetry failures."""


class PersistenceError(ChronosError):
    """Raised when a persisted document cannot be read or written."""


__all__ = ["ChronosError", "PersistenceError"]
