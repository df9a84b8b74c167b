"""Append-only cognitive-state log for one agent and working context."""

from __future__ import annotations

import csv
import io
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from ..config import Settings, get_settings
from ..logging_config import logger
from ..models import (
    EventLogStats,
    EventRecord,
    ExportResult,
    InitResult,
    LatestResult,
    LogDocument,
    QueryResult,
    RecordResult,
    StateCount,
    StatsResult,
    TimeRange,
)
from ..utils.timestamps import Clock, iso_now, now_ns
from .errors import PersistenceError
from .sequence_store import SequenceStore
from .session_store import SessionStore
from .stamp import generate_stamp
from .storage import DocumentStorage, JsonFileStorage, atomic_write_text


CSV_HEADER = [
    "sequence",
    "timestamp",
    "state",
    "action",
    "description",
    "workingContext",
    "sessionId",
    "stamp",
]
TOP_STATES_LIMIT = 10


class EventLog:
    """Records stamped events and answers queries over them.

    Each ``record`` rewrites the whole log document atomically. Duplicate
    detection is a linear scan over stored content hashes.
    """

    def __init__(
        self,
        storage: DocumentStorage,
        *,
        sessions: SessionStore,
        sequence: SequenceStore,
        working_context: str,
        agent_name: str,
        clock: Clock = now_ns,
    ) -> None:
        self._storage = storage
        self._sessions = sessions
        self._sequence = sequence
        self._working_context = working_context
        self._agent_name = agent_name
        self._clock = clock
        self._session_id: Optional[str] = None

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    @property
    def agent_name(self) -> str:
        return self._agent_name

    @property
    def working_context(self) -> str:
        return self._working_context

    @property
    def session_store(self) -> SessionStore:
        return self._sessions

    @property
    def sequence_store(self) -> SequenceStore:
        return self._sequence

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------
    def init(self) -> InitResult:
        try:
            self._session_id = self._sessions.get_or_create()
            if not self._storage.exists():
                self._storage.save(self._new_document().to_document())
                logger.info(
                    "initialized event log",
                    extra={"session_id": self._session_id, "working_context": self._working_context},
                )
        except PersistenceError as exc:
            logger.error("event log initialization failed", extra={"error": str(exc)})
            return InitResult(ok=False, error=str(exc))
        return InitResult(ok=True, session_id=self._session_id)

    def record(self, state: str = "Unknown", action: str = "event", description: str = "") -> RecordResult:
        """Stamp and append one event.

        A duplicate is a record whose full stamp hash already exists, so the
        same (state, action, description) only repeats when sequence and
        timestamp repeat too.
        """
        if self._session_id is None:
            initialized = self.init()
            if not initialized.ok:
                return RecordResult(ok=False, error=initialized.error)

        try:
            document = self._load_document() or self._new_document()
            stamp = generate_stamp(
                agent_name=self._agent_name,
                working_context=self._working_context,
                sequence_store=self._sequence,
                session_store=self._sessions,
                state=state,
                action=action,
                description=description,
                session_id=self._session_id,
                clock=self._clock,
            )
            record = EventRecord(
                sequence=stamp.fields.sequence,
                timestamp=stamp.fields.timestamp,
                timestamp_ns=stamp.fields.timestamp_ns,
                state=state,
                action=action,
                description=description,
                working_context=self._working_context,
                stamp=stamp.text,
                content_hash=stamp.content_hash,
            )

            original = next((r for r in document.records if r.content_hash == record.content_hash), None)
            if original is not None:
                logger.debug("duplicate event skipped", extra={"content_hash": record.content_hash})
                return RecordResult(ok=True, duplicate=True, record=original)

            document.records.append(record)
            self._storage.save(document.to_document())
        except PersistenceError as exc:
            logger.error("event record failed", extra={"error": str(exc), "state": state})
            return RecordResult(ok=False, error=str(exc))

        return RecordResult(ok=True, duplicate=False, record=record)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------
    def latest(self) -> LatestResult:
        try:
            document = self._load_document()
        except PersistenceError as exc:
            logger.error("event log read failed", extra={"error": str(exc)})
            return LatestResult(ok=False, error=str(exc))
        if document is None or not document.records:
            return LatestResult(ok=True)
        return LatestResult(ok=True, record=document.records[-1])

    def query(
        self,
        *,
        state: Optional[str] = None,
        action: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> QueryResult:
        """Filter records; ``limit`` keeps the most recent N in append order."""
        if limit is not None and limit < 0:
            raise ValueError("limit must be non-negative")

        try:
            document = self._load_document()
        except PersistenceError as exc:
            logger.error("event log query failed", extra={"error": str(exc)})
            return QueryResult(ok=False, error=str(exc))
        records = list(document.records) if document else []

        if state:
            needle = state.lower()
            records = [r for r in records if needle in r.state.lower()]
        if action:
            records = [r for r in records if r.action == action]
        if limit is not None:
            records = records[-limit:] if limit > 0 else []
        return QueryResult(ok=True, records=records)

    def stats(self) -> StatsResult:
        try:
            document = self._load_document()
        except PersistenceError as exc:
            logger.error("event log stats failed", extra={"error": str(exc)})
            return StatsResult(ok=False, error=str(exc))
        if document is None:
            empty = EventLogStats(session_id=self._session_id, working_context=self._working_context)
            return StatsResult(ok=True, stats=empty)

        records = document.records
        state_counts = Counter(r.state for r in records)
        action_counts = Counter(r.action for r in records)
        time_range = None
        if records:
            time_range = TimeRange(first=records[0].timestamp, last=records[-1].timestamp)

        stats = EventLogStats(
            total_count=len(records),
            unique_state_count=len(state_counts),
            per_action_count=dict(action_counts),
            top_states=[
                StateCount(state=name, count=count)
                for name, count in state_counts.most_common(TOP_STATES_LIMIT)
            ],
            time_range=time_range,
            session_id=document.session_id,
            working_context=document.working_context,
            created_at=document.created_at,
        )
        return StatsResult(ok=True, stats=stats)

    def export_csv(self, path: Union[str, Path]) -> ExportResult:
        target = Path(path)
        try:
            document = self._load_document()
            records = document.records if document else []
            if not records:
                return ExportResult(ok=False, path=str(target), error="No records to export")

            buffer = io.StringIO()
            csv.writer(buffer).writerow(CSV_HEADER)
            rows = csv.writer(buffer, quoting=csv.QUOTE_ALL)
            for r in records:
                rows.writerow(
                    [
                        r.sequence,
                        r.timestamp,
                        r.state,
                        r.action,
                        r.description,
                        r.working_context,
                        document.session_id,
                        r.stamp,
                    ]
                )
            atomic_write_text(target, buffer.getvalue())
        except PersistenceError as exc:
            logger.error("csv export failed", extra={"error": str(exc), "path": str(target)})
            return ExportResult(ok=False, path=str(target), error=str(exc))

        logger.info("exported event log", extra={"path": str(target), "count": len(records)})
        return ExportResult(ok=True, path=str(target), count=len(records))

    def payload(self) -> Dict[str, Any]:
        """Submission body for an aggregator: identity plus every stored record."""
        document = self._load_document()
        if document is None:
            document = self._new_document()
        return {
            "sessionId": document.session_id,
            "agentName": document.agent_name,
            "records": [r.to_document() for r in document.records],
        }

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _new_document(self) -> LogDocument:
        session_id = self._session_id or self._sessions.get_or_create()
        return LogDocument(
            session_id=session_id,
            agent_name=self._agent_name,
            created_at=iso_now(self._clock),
            working_context=self._working_context,
        )

    def _load_document(self) -> Optional[LogDocument]:
        data = self._storage.load()
        if data is None:
            return None
        try:
            return LogDocument.model_validate(data)
        except ValidationError as exc:
            raise PersistenceError(f"Invalid event log document: {exc}") from exc


def build_event_log(
    working_dir: Optional[Union[str, Path]] = None,
    *,
    agent_name: Optional[str] = None,
    settings: Optional[Settings] = None,
    clock: Clock = now_ns,
) -> EventLog:
    """Wire an EventLog to the JSON files under ``<working_dir>/.cognitive``."""
    settings = settings or get_settings()
    root = (Path(working_dir) if working_dir is not None else Path.cwd()).resolve()
    state_dir = root / settings.state_dir_name
    name = agent_name or settings.agent_name

    sessions = SessionStore(JsonFileStorage(state_dir / "session.json"), name, clock=clock)
    sequence = SequenceStore(JsonFileStorage(state_dir / "tick.json"), clock=clock)
    return EventLog(
        JsonFileStorage(state_dir / "states.json"),
        sessions=sessions,
        sequence=sequence,
        working_context=str(root),
        agent_name=name,
        clock=clock,
    )


__all__ = ["CSV_HEADER", "EventLog", "build_event_log"]
