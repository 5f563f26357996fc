from __future__ import annotations

"""
Problem+JSON exception handlers (RFC 7807).

Registered by `subhub.main.create_app`. `AppException` bodies are extended
with the structured fields from `AppException.to_problem()`.
"""

import logging
from typing import Any, Dict

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from subhub.core.exceptions import AppException

log = logging.getLogger(__name__)


def _problem(title: str, detail: str, status_code: int, request: Request, **fields: Any) -> JSONResponse:
    content: Dict[str, Any] = {
        "type": "about:blank",
        "title": title,
        "detail": detail,
        "status": status_code,
        "instance": str(request.url),
    }
    content.update(fields)
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(content),
        media_type="application/problem+json",
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:  # type: ignore
    rid = getattr(request.state, "request_id", None)
    problem = exc.to_problem(fallback_request_id=rid)
    problem.pop("message", None)
    problem.pop("error", None)
    response = _problem(exc.__class__.__name__, exc.message, exc.status_code, request, **problem)
    for k, v in (exc.headers or {}).items():
        response.headers[k] = v
    return response


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:  # type: ignore
    title = exc.__class__.__name__.replace("Exception", "").strip() or "Error"
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    response = _problem(title, detail, exc.status_code, request)
    for k, v in (getattr(exc, "headers", None) or {}).items():
        response.headers[k] = v
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:  # type: ignore
    return _problem(
        "Validation error",
        "Validation error",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        request,
        errors=exc.errors(),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # type: ignore
    log.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _problem(
        "Internal Server Error",
        "An unexpected error occurred.",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        request,
    )


__all__ = [
    "app_exception_handler",
    "http_exception_handler",
    "validation_exception_handler",
    "global_exception_handler",
]
