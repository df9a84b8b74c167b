from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    ok: bool
    status: str
    service: str
    version: str
    uptime: float
