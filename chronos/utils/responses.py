"""JSON error envelopes returned by the aggregator."""

from typing import Any, Dict

from fastapi.responses import JSONResponse


def error_response(message: str, *, status_code: int, detail: Any = None) -> JSONResponse:
    """Build an ``{ok: false, error}`` body, adding ``detail`` when given."""
    payload: Dict[str, Any] = {"ok": False, "error": message}
    if detail is not None:
        payload["detail"] = detail
    return JSONResponse(payload, status_code=status_code)
