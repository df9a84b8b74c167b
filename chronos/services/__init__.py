"""Service layer components."""

from .aggregator import AggregateStore, get_aggregate_store
from .errors import ChronosError, PersistenceError
from .event_log import CSV_HEADER, EventLog, build_event_log
from .sequence_store import SequenceStore
from .session_store import SessionStore
from .stamp import Stamp, StampFields, content_hash, format_stamp, generate_stamp
from .storage import DocumentStorage, JsonFileStorage, atomic_write_text


__all__ = [
    "AggregateStore",
    "get_aggregate_store",
    "ChronosError",
    "PersistenceError",
    "CSV_HEADER",
    "EventLog",
    "build_event_log",
    "SequenceStore",
    "SessionStore",
    "Stamp",
    "StampFields",
    "content_hash",
    "format_stamp",
    "generate_stamp",
    "DocumentStorage",
    "JsonFileStorage",
    "atomic_write_text",
]
