"""
Error envelope and app-wide exception handlers.

Every error leaves the API as:
    {"error": {"code", "message", "status", "retriable", "request_id"}}
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shopfloor_shared.schemas.common import ErrorDetail, ErrorResponse

log = structlog.get_logger()

RETRIABLE_STATUSES = {408, 409, 425, 429}


def service_unavailable(code: str, message: str) -> HTTPException:
    """A transient store failure surfaced to the caller (never swallowed)."""
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail={"code": code, "message": message, "retriable": True},
    )


def _is_retriable(status_code: int) -> bool:
    return status_code in RETRIABLE_STATUSES or status_code >= 500


def _error_response(
    request: Request,
    *,
    status_code: int,
    code: str,
    message: str,
    retriable: bool,
) -> JSONResponse:
    body = ErrorResponse(
        error=ErrorDetail(
            code=code,
            message=message,
            status=status_code,
            retriable=retriable,
            request_id=getattr(request.state, "request_id", None),
        )
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        code = str(detail.get("code") or f"http_{exc.status_code}")
        message = str(detail.get("message") or "Request failed")
        retriable = bool(detail.get("retriable", _is_retriable(exc.status_code)))
    else:
        code = f"http_{exc.status_code}"
        message = str(detail)
        retriable = _is_retriable(exc.status_code)

    return _error_response(
        request,
        status_code=exc.status_code,
        code=code,
        message=message,
        retriable=retriable,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    first = errors[0]["msg"] if errors else "Request validation failed"
    return _error_response(
        request,
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        code="validation_error",
        message=str(first),
        retriable=False,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("http.unhandled_error", path=request.url.path)
    return _error_response(
        request,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code="internal_error",
        message="Unexpected server error",
        retriable=True,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
