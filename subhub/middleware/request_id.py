# subhub/middleware/request_id.py
from __future__ import annotations

"""
# SubHub SL — Request ID Middleware (pure ASGI)

- Reuses a client-supplied `X-Request-ID` / `X-Correlation-ID` when it is a
  valid UUIDv4, otherwise generates one.
- Exposes it as `request.state.request_id` and echoes it on the response.
- Binds `request_id` into the loguru context for the whole request.
"""

import os
import uuid

from loguru import logger
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Receive, Scope, Send

HEADER_NAME = os.getenv("REQUEST_ID_HEADER_NAME", "X-Request-ID")
TRUST_CLIENT_IDS = os.getenv("REQUEST_ID_TRUST_CLIENT_IDS", "true").lower() == "true"


def _client_request_id(headers: Headers, header_name: str) -> str | None:
    incoming = (headers.get(header_name) or headers.get("X-Correlation-ID") or "").strip()
    if not incoming or len(incoming) > 64:
        return None
    try:
        val = uuid.UUID(incoming)
    except ValueError:
        return None
    return str(val) if val.version == 4 else None


class RequestIDMiddleware:
    """Per-request correlation id, safe against log injection."""

    def __init__(self, app: ASGIApp, header_name: str = HEADER_NAME) -> None:
        self.app = app
        self.header_name = header_name

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            return await self.app(scope, receive, send)

        req_id = None
        if TRUST_CLIENT_IDS:
            req_id = _client_request_id(Headers(scope=scope), self.header_name)
        req_id = req_id or str(uuid.uuid4())
        scope.setdefault("state", {})["request_id"] = req_id
        name_bytes = self.header_name.encode("latin-1")

        async def _send_wrapper(message):
            if message.get("type") == "http.response.start":
                raw = message.setdefault("headers", [])
                message["headers"] = [(k, v) for (k, v) in raw if k.lower() != name_bytes.lower()]
                message["headers"].append((name_bytes, req_id.encode("latin-1")))
            await send(message)

        with logger.contextualize(request_id=req_id):
            try:
                await self.app(scope, receive, _send_wrapper)
            except Exception:
                logger.exception("[RequestID] Unhandled exception during request processing")
                raise


__all__ = ["RequestIDMiddleware"]
