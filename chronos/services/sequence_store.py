"""Persisted TICK counter for a working context."""

from __future__ import annotations

from pydantic import ValidationError

from ..logging_config import logger
from ..models import SequenceCounter
from ..utils.timestamps import Clock, iso_now, now_ns
from .errors import PersistenceError
from .storage import DocumentStorage


class SequenceStore:
    """Monotonic counter that survives process restarts.

    The read-increment-write cycle is not atomic across processes: two writers
    sharing a working context race and the last one to save wins. A single
    agent process per context is assumed.
    """

    FALLBACK_VALUE = 1

    def __init__(self, storage: DocumentStorage, clock: Clock = now_ns) -> None:
        self._storage = storage
        self._clock = clock

    def _read(self) -> SequenceCounter:
        data = self._storage.load()
        if data is None:
            return SequenceCounter()
        try:
            counter = SequenceCounter.model_validate(data)
        except ValidationError as exc:
            raise PersistenceError(f"Invalid sequence counter: {exc}") from exc
        if counter.value < 0:
            raise PersistenceError("Sequence counter must not be negative")
        return counter

    def current(self) -> int:
        """Last issued value, 0 when nothing was issued or the counter is unreadable."""
        try:
            return self._read().value
        except PersistenceError as exc:
            logger.warning("sequence counter unreadable", extra={"error": str(exc)})
            return 0

    def next(self) -> int:
        try:
            value = self._read().value + 1
            counter = SequenceCounter(value=value, updated_at=iso_now(self._clock))
            self._storage.save(counter.to_document())
        except PersistenceError as exc:
            logger.warning(
                "sequence counter unavailable; using fallback",
                extra={"error": str(exc), "fallback": self.FALLBACK_VALUE},
            )
            return self.FALLBACK_VALUE
        return value


__all__ = ["SequenceStore"]
