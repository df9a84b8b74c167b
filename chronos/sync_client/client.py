from __future__ import annotations

import json
from typing import Any, Dict, Optional

import httpx

from ..models import SubmissionResult
from ..services.errors import ChronosError


class SyncError(ChronosError):
    """Raised when an aggregator rejects or cannot receive a submission."""


def _headers() -> Dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Accept": "application/json",
    }


def _handle_response_error(exc: httpx.HTTPStatusError) -> None:
    response = exc.response
    detail: str
    try:
        payload = response.json()
        if isinstance(payload, dict):
            detail = payload.get("error") or payload.get("detail") or json.dumps(payload)
        else:
            detail = json.dumps(payload)
    except ValueError:
        detail = response.text
    raise SyncError(f"Sync request failed ({response.status_code}): {detail}") from exc


def push_records(
    server_url: str,
    payload: Dict[str, Any],
    *,
    timeout: float = 10.0,
    transport: Optional[httpx.BaseTransport] = None,
) -> SubmissionResult:
    """Submit an event log payload to ``<server_url>/records`` and return the merge counts."""
    if not server_url:
        raise SyncError("Missing aggregator URL")

    url = f"{server_url.rstrip('/')}/records"

    with httpx.Client(timeout=timeout, transport=transport) as client:
        try:
            response = client.post(url, headers=_headers(), json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            _handle_response_error(exc)
        except httpx.HTTPError as exc:
            raise SyncError(f"Sync request failed: {exc}") from exc

    try:
        return SubmissionResult.model_validate(response.json())
    except ValueError as exc:
        raise SyncError(f"Unexpected aggregator response: {exc}") from exc


__all__ = ["SyncError", "push_records"]
