from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exchanged as camelCase JSON on disk and over HTTP."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_document(self) -> Dict[str, object]:
        return self.model_dump(by_alias=True, mode="json")


class EventRecord(CamelModel):
    """One recorded cognitive-state event."""

    model_config = ConfigDict(frozen=True)

    sequence: int = Field(..., ge=0)
    timestamp: str
    timestamp_ns: Optional[int] = None
    state: str
    action: str
    description: str = ""
    working_context: str
    stamp: str
    content_hash: str = Field(..., min_length=1)


class Session(CamelModel):
    session_id: str
    created_at: str
    agent_name: str


class SequenceCounter(CamelModel):
    value: int = 0
    updated_at: Optional[str] = None


class LogDocument(CamelModel):
    """Persisted layout of a working context's event log."""

    session_id: str
    agent_name: str
    created_at: str
    working_context: str
    records: List[EventRecord] = Field(default_factory=list)


class StateCount(CamelModel):
    state: str
    count: int


class TimeRange(CamelModel):
    first: str
    last: str


class EventLogStats(CamelModel):
    total_count: int = 0
    unique_state_count: int = 0
    per_action_count: Dict[str, int] = Field(default_factory=dict)
    top_states: List[StateCount] = Field(default_factory=list)
    time_range: Optional[TimeRange] = None
    session_id: Optional[str] = None
    working_context: Optional[str] = None
    created_at: Optional[str] = None


class InitResult(CamelModel):
    ok: bool
    session_id: Optional[str] = None
    error: Optional[str] = None


class RecordResult(CamelModel):
    ok: bool
    duplicate: bool = False
    record: Optional[EventRecord] = None
    error: Optional[str] = None


class ExportResult(CamelModel):
    ok: bool
    path: Optional[str] = None
    count: int = 0
    error: Optional[str] = None


class LatestResult(CamelModel):
    ok: bool
    record: Optional[EventRecord] = None
    error: Optional[str] = None


class QueryResult(CamelModel):
    ok: bool
    records: List[EventRecord] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def count(self) -> int:
        return len(self.records)


class StatsResult(CamelModel):
    ok: bool
    stats: Optional[EventLogStats] = None
    error: Optional[str] = None


__all__ = [
    "CamelModel",
    "EventLogStats",
    "EventRecord",
    "ExportResult",
    "InitResult",
    "LatestResult",
    "LogDocument",
    "QueryResult",
    "RecordResult",
    "SequenceCounter",
    "Session",
    "StateCount",
    "StatsResult",
    "TimeRange",
]
