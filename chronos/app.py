from __future__ import annotations

import json
from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import get_settings
from .logging_config import configure_logging, logger
from .routes import api_router
from .routes.meta import mark_started
from .services import PersistenceError, get_aggregate_store
from .utils import error_response


def _describe_validation_errors(errors: List[Dict[str, Any]]) -> str:
    parts = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query"))
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"


# Register global exception handlers so every non-200 body carries an error message
def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def _validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = jsonable_encoder(exc.errors())
        logger.debug("validation error", extra={"errors": errors, "path": str(request.url)})
        return error_response(
            _describe_validation_errors(errors),
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=errors,
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.debug(
            "http error",
            extra={"detail": exc.detail, "status": exc.status_code, "path": str(request.url)},
        )
        detail = exc.detail
        if not isinstance(detail, str):
            detail = json.dumps(detail)
        return error_response(detail, status_code=exc.status_code)

    @app.exception_handler(PersistenceError)
    async def _persistence_exception_handler(request: Request, exc: PersistenceError):
        logger.error("storage failure", extra={"error": str(exc), "path": str(request.url)})
        return error_response(str(exc), status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error", extra={"path": str(request.url)})
        return error_response("Internal server error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


configure_logging()
_settings = get_settings()

app = FastAPI(
    title=_settings.app_name,
    version=_settings.app_version,
    docs_url=_settings.resolved_docs_url,
    redoc_url=None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_allow_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

register_exception_handlers(app)
app.include_router(api_router)


@app.on_event("startup")
# Start the uptime clock and create the aggregate store file before the first submission
async def _open_aggregate_store() -> None:
    settings = get_settings()
    mark_started(app)
    get_aggregate_store()
    logger.info("aggregate store ready", extra={"path": str(settings.aggregate_path)})


__all__ = ["app", "register_exception_handlers"]
