"""Merged store of event logs submitted by remote agents, keyed by session."""

from __future__ import annotations

import threading
from functools import lru_cache
from typing import List, Optional

from pydantic import ValidationError

from ..config import get_settings
from ..logging_config import logger
from ..models import (
    AgentEntry,
    AgentSummary,
    AggregateDocument,
    AggregateStats,
    EventRecord,
    RecordSubmission,
    SubmissionResult,
)
from ..utils.timestamps import Clock, iso_now, now_ns
from .errors import PersistenceError
from .storage import DocumentStorage, JsonFileStorage


def _summarize(entry: AgentEntry) -> AgentSummary:
    return AgentSummary(
        session_id=entry.session_id,
        agent_name=entry.agent_name,
        record_count=len(entry.records),
        first_seen=entry.first_seen,
        last_seen=entry.last_seen,
    )


class AggregateStore:
    """Append-only merge of agent submissions.

    A lock serializes merges inside one process; separate processes sharing
    the same file are last-writer-wins.
    """

    def __init__(self, storage: DocumentStorage, clock: Clock = now_ns) -> None:
        self._storage = storage
        self._clock = clock
        self._lock = threading.Lock()
        self._ensure_document()

    def _ensure_document(self) -> None:
        if self._storage.exists():
            return
        try:
            self._storage.save(self._empty().to_document())
        except PersistenceError as exc:
            logger.warning("aggregate store initialization failed", extra={"error": str(exc)})

    def _empty(self) -> AggregateDocument:
        return AggregateDocument(created_at=iso_now(self._clock))

    def _load(self) -> AggregateDocument:
        data = self._storage.load()
        if data is None:
            return self._empty()
        try:
            return AggregateDocument.model_validate(data)
        except ValidationError as exc:
            raise PersistenceError(f"Invalid aggregate store: {exc}") from exc

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def submit(self, submission: RecordSubmission) -> SubmissionResult:
        """Merge a batch, skipping records whose content hash the session already holds."""
        with self._lock:
            document = self._load()
            now = iso_now(self._clock)

            entry = document.agents.get(submission.session_id)
            if entry is None:
                entry = AgentEntry(
                    session_id=submission.session_id,
                    agent_name=submission.agent_name,
                    first_seen=now,
                    last_seen=now,
                )
                document.agents[submission.session_id] = entry
                logger.info(
                    "registered agent session",
                    extra={"session_id": submission.session_id, "agent": submission.agent_name},
                )

            seen = {record.content_hash for record in entry.records}
            added = 0
            for record in submission.records:
                if record.content_hash in seen:
                    continue
                seen.add(record.content_hash)
                entry.records.append(record)
                added += 1

            entry.last_seen = now
            self._storage.save(document.to_document())

        received = len(submission.records)
        logger.info(
            "merged submission",
            extra={"session_id": submission.session_id, "received": received, "added": added},
        )
        return SubmissionResult(
            received_count=received,
            added_count=added,
            duplicate_count=received - added,
        )

    def records(self, session_id: Optional[str] = None, limit: Optional[int] = None) -> List[EventRecord]:
        """Records for one session, or every session concatenated; ``limit`` keeps the tail."""
        document = self._load()
        if session_id:
            entry = document.agents.get(session_id)
            merged = list(entry.records) if entry else []
        else:
            merged = [record for entry in document.agents.values() for record in entry.records]

        if limit is not None:
            merged = merged[-limit:] if limit > 0 else []
        return merged

    def agents(self) -> List[AgentSummary]:
        return [_summarize(entry) for entry in self._load().agents.values()]

    def stats(self) -> AggregateStats:
        document = self._load()
        summaries = [_summarize(entry) for entry in document.agents.values()]
        return AggregateStats(
            total_record_count=sum(summary.record_count for summary in summaries),
            agent_count=len(summaries),
            created_at=document.created_at,
            per_agent_summary=summaries,
        )


@lru_cache(maxsize=1)
def get_aggregate_store() -> AggregateStore:
    """Get the process-wide aggregate store rooted at the configured data dir."""
    return AggregateStore(JsonFileStorage(get_settings().aggregate_path))


__all__ = ["AggregateStore", "get_aggregate_store"]
