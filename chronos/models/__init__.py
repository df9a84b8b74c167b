from .aggregate import (
    AgentEntry,
    AgentSummary,
    AgentsResponse,
    AggregateDocument,
    AggregateStats,
    RecordSubmission,
    RecordsResponse,
    SubmissionResult,
)
from .meta import HealthResponse
from .records import (
    CamelModel,
    EventLogStats,
    EventRecord,
    ExportResult,
    InitResult,
    LatestResult,
    LogDocument,
    QueryResult,
    RecordResult,
    SequenceCounter,
    Session,
    StateCount,
    StatsResult,
    TimeRange,
)

__all__ = [
    "AgentEntry",
    "AgentSummary",
    "AgentsResponse",
    "AggregateDocument",
    "AggregateStats",
    "CamelModel",
    "EventLogStats",
    "EventRecord",
    "ExportResult",
    "HealthResponse",
    "InitResult",
    "LatestResult",
    "LogDocument",
    "QueryResult",
    "RecordResult",
    "RecordSubmission",
    "RecordsResponse",
    "SequenceCounter",
    "Session",
    "StateCount",
    "StatsResult",
    "SubmissionResult",
    "TimeRange",
]
