from __future__ import annotations

from fastapi import APIRouter

from .agents import router as agents_router
from .meta import router as meta_router
from .records import router as records_router

api_router = APIRouter()
api_router.include_router(meta_router)
api_router.include_router(records_router)
api_router.include_router(agents_router)

__all__ = ["api_router"]
