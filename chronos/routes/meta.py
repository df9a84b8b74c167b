from __future__ import annotations

import time
from html import escape
from typing import Callable, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import HTMLResponse

from ..config import Settings, get_settings
from ..models import HealthResponse

router = APIRouter(tags=["meta"])

_HTTP_METHODS = ("get", "post", "put", "patch", "delete")


def mark_started(app: FastAPI, clock: Callable[[], float] = time.monotonic) -> None:
    """Record the moment the app began serving; ``/health`` measures uptime from here."""
    app.state.started_at = clock()


def _uptime(app: FastAPI) -> float:
    started_at: Optional[float] = getattr(app.state, "started_at", None)
    if started_at is None:
        return 0.0
    return round(max(time.monotonic() - started_at, 0.0), 3)


@router.get("/health", response_model=HealthResponse)
# Return service liveness and uptime for monitoring
def health(request: Request, settings: Settings = Depends(get_settings)) -> HealthResponse:
    return HealthResponse(
        ok=True,
        status="ok",
        service="chronos-sync",
        version=settings.app_version,
        uptime=_uptime(request.app),
    )


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
# Render a short HTML index of the API endpoints
def index(request: Request, settings: Settings = Depends(get_settings)) -> HTMLResponse:
    rows = []
    for path, operations in request.app.openapi().get("paths", {}).items():
        for method in _HTTP_METHODS:
            operation = operations.get(method)
            if operation is None:
                continue
            summary = operation.get("summary") or ""
            rows.append(
                f"<li><b>{method.upper()}</b> <code>{escape(path)}</code> {escape(summary)}</li>"
            )
    body = (
        "<!DOCTYPE html><html><head>"
        f"<title>{escape(settings.app_name)}</title></head><body>"
        f"<h1>{escape(settings.app_name)}</h1>"
        "<p>Cognitive telemetry aggregation</p>"
        f"<ul>{''.join(rows)}</ul>"
        "</body></html>"
    )
    return HTMLResponse(body)
