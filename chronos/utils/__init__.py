from .responses import error_response
from .timestamps import UTC, Clock, format_iso_ns, iso_now, now_ns

__all__ = [
    "error_response",
    "UTC",
    "Clock",
    "format_iso_ns",
    "iso_now",
    "now_ns",
]
