"""Shared helpers for wall-clock timestamps."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Callable

UTC = timezone.utc
NANOS_PER_SECOND = 1_000_000_000

# Returns integer nanoseconds since the Unix epoch.
Clock = Callable[[], int]


def now_ns() -> int:
    """Current wall-clock time as integer nanoseconds since the epoch."""
    return time.time_ns()


def format_iso_ns(timestamp_ns: int) -> str:
    """Render epoch nanoseconds as ``YYYY-MM-DDTHH:MM:SS.nnnnnnnnnZ`` in UTC."""
    if timestamp_ns < 0:
        raise ValueError("timestamp must not precede the epoch")
    seconds, nanos = divmod(timestamp_ns, NANOS_PER_SECOND)
    moment = datetime.fromtimestamp(seconds, tz=UTC)
    return f"{moment.strftime('%Y-%m-%dT%H:%M:%S')}.{nanos:09d}Z"


def iso_now(clock: Clock = now_ns) -> str:
    """Millisecond-precision ISO timestamp used for bookkeeping fields."""
    seconds, nanos = divmod(clock(), NANOS_PER_SECOND)
    moment = datetime.fromtimestamp(seconds, tz=UTC).replace(microsecond=nanos // 1000)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


__all__ = ["UTC", "Clock", "NANOS_PER_SECOND", "format_iso_ns", "iso_now", "now_ns"]
