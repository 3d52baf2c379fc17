"""Map application errors onto the response envelope.

Client errors carry their own message; anything unexpected becomes a
generic 500 and is logged with its traceback.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from projetrack.api.envelope import failure
from projetrack.errors import (
    ProjeTrackError,
    RateLimitedError,
    ReferentialConflictError,
    StoreError,
)

logger = logging.getLogger(__name__)

SERVER_ERROR = "Server error"


async def _app_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, ProjeTrackError)
    headers: dict[str, str] = {}

    if isinstance(exc, StoreError):
        logger.error("Store error on %s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=failure(SERVER_ERROR))

    data = None
    if isinstance(exc, ReferentialConflictError):
        data = {"dependents": exc.dependents}
    if isinstance(exc, RateLimitedError):
        headers["Retry-After"] = str(exc.retry_after)
    if exc.status_code == 401:
        headers["WWW-Authenticate"] = "Bearer"

    return JSONResponse(
        status_code=exc.status_code,
        content=failure(exc.message, data),
        headers=headers or None,
    )


async def _request_validation_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, RequestValidationError)
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"Invalid value for {field}" if field else "Invalid request"
    return JSONResponse(status_code=400, content=failure(message))


async def _http_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, StarletteHTTPException)
    return JSONResponse(
        status_code=exc.status_code,
        content=failure(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=failure(SERVER_ERROR))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ProjeTrackError, _app_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(Exception, _unhandled_error)
