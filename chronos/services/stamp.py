"""Deterministic CHRONOS stamp rendering.

A stamp is a single line carrying every identity field of an event::

    [CHRONOS] <timestamp>::<agent>::<state>::TICK-<sequence>::[<session>]::[<context>] → <action> - <description>

The timestamp is UTC with nine fractional digits and the sequence is
zero-padded to ten digits, so identical inputs always produce an identical
line and therefore an identical content hash.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional

from ..utils.timestamps import Clock, format_iso_ns, now_ns

if TYPE_CHECKING:
    from .sequence_store import SequenceStore
    from .session_store import SessionStore


STAMP_PREFIX = "[CHRONOS]"
SEQUENCE_WIDTH = 10
FIELD_DELIMITER = "::"
ACTION_ARROW = " → "


def _single_line(value: str) -> str:
    # Escape backslashes before newlines
    normalized = value.replace("\\", "\\\\").replace("\r\n", "\n").replace("\r", "\n")
    return normalized.replace("\n", "\\n")


def format_sequence(sequence: int) -> str:
    if sequence < 0:
        raise ValueError("sequence must be non-negative")
    return f"TICK-{sequence:0{SEQUENCE_WIDTH}d}"


@dataclass(frozen=True)
class StampFields:
    agent_name: str
    state: str
    sequence: int
    session_id: str
    working_context: str
    action: str
    description: str
    timestamp_ns: int

    @property
    def timestamp(self) -> str:
        return format_iso_ns(self.timestamp_ns)


def format_stamp(fields: StampFields) -> str:
    """Render ``fields`` as a stamp line. Pure; raises ValueError on a negative sequence."""
    head = FIELD_DELIMITER.join(
        [
            fields.timestamp,
            _single_line(fields.agent_name),
            _single_line(fields.state),
            format_sequence(fields.sequence),
            f"[{_single_line(fields.session_id)}]",
            f"[{_single_line(fields.working_context)}]",
        ]
    )
    tail = f"{_single_line(fields.action)} - {_single_line(fields.description)}"
    return f"{STAMP_PREFIX} {head}{ACTION_ARROW}{tail}"


def content_hash(stamp: str) -> str:
    return hashlib.sha256(stamp.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class Stamp:
    fields: StampFields
    text: str

    @property
    def content_hash(self) -> str:
        return content_hash(self.text)

    def as_dict(self) -> Dict[str, Any]:
        fields = self.fields
        return {
            "stamp": self.text,
            "sequence": fields.sequence,
            "timestamp": fields.timestamp,
            "timestampNs": fields.timestamp_ns,
            "agentName": fields.agent_name,
            "state": fields.state,
            "sessionId": fields.session_id,
            "workingContext": fields.working_context,
            "action": fields.action,
            "description": fields.description,
            "contentHash": self.content_hash,
        }


def generate_stamp(
    *,
    agent_name: str,
    working_context: str,
    sequence_store: "SequenceStore",
    session_store: "SessionStore",
    state: str = "Unknown",
    action: str = "event",
    description: str = "",
    sequence: Optional[int] = None,
    session_id: Optional[str] = None,
    clock: Clock = now_ns,
) -> Stamp:
    """Capture the current instant and render a stamp.

    Missing ``sequence`` and ``session_id`` values are drawn from the stores.
    """
    timestamp_ns = clock()
    tick = sequence if sequence is not None else sequence_store.next()
    session = session_id or session_store.get_or_create()
    fields = StampFields(
        agent_name=agent_name,
        state=state,
        sequence=tick,
        session_id=session,
        working_context=working_context,
        action=action,
        description=description,
        timestamp_ns=timestamp_ns,
    )
    return Stamp(fields=fields, text=format_stamp(fields))


__all__ = [
    "STAMP_PREFIX",
    "SEQUENCE_WIDTH",
    "Stamp",
    "StampFields",
    "content_hash",
    "format_sequence",
    "format_stamp",
    "generate_stamp",
]
