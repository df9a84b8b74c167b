from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from .records import CamelModel, EventRecord


class RecordSubmission(CamelModel):
    """Batch of records pushed by a remote agent."""

    session_id: str = Field(..., min_length=1)
    agent_name: str = Field(..., min_length=1)
    records: List[EventRecord]

    @field_validator("session_id", "agent_name", mode="before")
    @classmethod
    def _strip_identity(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value


class SubmissionResult(CamelModel):
    ok: bool = True
    received_count: int
    added_count: int
    duplicate_count: int


class AgentEntry(CamelModel):
    session_id: str
    agent_name: str
    first_seen: str
    last_seen: str
    records: List[EventRecord] = Field(default_factory=list)


class AggregateDocument(CamelModel):
    """Persisted layout of the aggregator store."""

    created_at: str
    agents: Dict[str, AgentEntry] = Field(default_factory=dict)


class AgentSummary(CamelModel):
    session_id: str
    agent_name: str
    record_count: int
    first_seen: str
    last_seen: str


class RecordsResponse(CamelModel):
    count: int
    records: List[EventRecord] = Field(default_factory=list)


class AgentsResponse(CamelModel):
    count: int
    agents: List[AgentSummary] = Field(default_factory=list)


class AggregateStats(CamelModel):
    total_record_count: int
    agent_count: int
    created_at: Optional[str] = None
    per_agent_summary: List[AgentSummary] = Field(default_factory=list)


__all__ = [
    "AgentEntry",
    "AgentSummary",
    "AgentsResponse",
    "AggregateDocument",
    "AggregateStats",
    "RecordSubmission",
    "RecordsResponse",
    "SubmissionResult",
]
