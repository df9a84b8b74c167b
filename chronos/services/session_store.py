"""Stable per-working-context session identifiers."""

from __future__ import annotations

import uuid
from typing import Optional

from pydantic import ValidationError

from ..logging_config import logger
from ..models import Session
from ..utils.timestamps import Clock, iso_now, now_ns
from .errors import PersistenceError
from .storage import DocumentStorage


class SessionStore:
    """Creates the session marker once and returns its id on every later call."""

    def __init__(self, storage: DocumentStorage, agent_name: str, clock: Clock = now_ns) -> None:
        self._storage = storage
        self._agent_name = agent_name
        self._clock = clock

    def load(self) -> Optional[Session]:
        data = self._storage.load()
        if data is None:
            return None
        try:
            return Session.model_validate(data)
        except ValidationError as exc:
            raise PersistenceError(f"Invalid session marker: {exc}") from exc

    def get_or_create(self) -> str:
        try:
            existing = self.load()
            if existing is not None and existing.session_id:
                return existing.session_id

            session = Session(
                session_id=str(uuid.uuid4()),
                created_at=iso_now(self._clock),
                agent_name=self._agent_name,
            )
            self._storage.save(session.to_document())
        except PersistenceError as exc:
            fallback = f"temp-{self._clock() // 1_000_000}"
            logger.warning(
                "session marker unavailable; using temporary id",
                extra={"error": str(exc), "session_id": fallback},
            )
            return fallback

        logger.info("created session", extra={"session_id": session.session_id})
        return session.session_id


__all__ = ["SessionStore"]
