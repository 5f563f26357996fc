# subhub/main.py
from __future__ import annotations

"""
# SubHub SL — Application Entrypoint (FastAPI)

ASGI application factory and lifecycle for the SubHub SL catalog backend.

## Design Goals
- Deterministic, testable **app factory** (`create_app`) with explicit lifespan.
- Process-scoped state (`RateLimiter`, `UploadRegistry`) created per app and
  kept on `app.state`; the lifespan scheduler sweeps it.
- Explicit **middleware order** (outermost first):
  1) request id → 2) security headers → 3) CORS → 4) gzip →
  5) API rate limits → 6) access gate (viewer + protected-page redirects).
- Centralized problem+json exception handling.

## Probes
- `/healthz`: liveness (process up).
- `/readyz`: readiness (quick DB check).
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.gzip import GZipMiddleware

from subhub.api.v1.routers import router as site_router
from subhub.core.config import settings
from subhub.core.exception_handlers import (
    app_exception_handler,
    global_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from subhub.core.exceptions import AppException
from subhub.core.http import build_http_client
from subhub.core.limiter import RateLimiter, RateLimitMiddleware
from subhub.core.logger import configure_logging
from subhub.core.maintenance import start_maintenance_scheduler
from subhub.db.session import db_healthcheck, dispose_engine
from subhub.middleware.access_gate import AccessGateMiddleware
from subhub.middleware.request_id import RequestIDMiddleware
from subhub.middleware.security_headers import configure_cors, install_security
from subhub.services.drive.auth import DriveTokenProvider
from subhub.services.drive.uploads import UploadRegistry

logger = logging.getLogger("subhub")


# ─────────────────────────────────────────────────────────────────────────────
# 🔄 Lifespan: startup & shutdown
# ─────────────────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Startup:
        - Install loguru sinks.
        - Open the shared httpx client and the Drive token provider.
        - Start the maintenance scheduler (limiter / upload / token sweeps).

    Shutdown:
        - Stop the scheduler, close the client, dispose the DB engine.
    """
    configure_logging()
    logger.info("✅ %s starting up (env=%s)", settings.PROJECT_NAME, settings.ENV)

    client = build_http_client()
    app.state.http_client = client
    app.state.drive_tokens = DriveTokenProvider(client)
    scheduler = start_maintenance_scheduler(app)

    try:
        yield
    finally:
        scheduler.shutdown(wait=False)
        await client.aclose()
        await dispose_engine()
        logger.info("🛑 %s shutting down", settings.PROJECT_NAME)


# ─────────────────────────────────────────────────────────────────────────────
# 🏗️ App factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(*, rate_limiter: RateLimiter | None = None, upload_registry: UploadRegistry | None = None) -> FastAPI:
    """
    Build and configure the FastAPI app instance.

    Returns:
        FastAPI: application with middleware, exception handlers, routers and
        health/readiness endpoints.
    """
    enable_docs = settings.ENABLE_DOCS
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        docs_url="/docs" if enable_docs else None,
        redoc_url="/redoc" if enable_docs else None,
        openapi_url="/openapi.json" if enable_docs else None,
        lifespan=lifespan,
    )

    limiter = rate_limiter if rate_limiter is not None else RateLimiter.from_settings()
    app.state.rate_limiter = limiter
    app.state.upload_registry = upload_registry if upload_registry is not None else UploadRegistry()

    # ── Middlewares (last added runs first) ─────────────────────────────────
    app.add_middleware(AccessGateMiddleware)            # 6) viewer + redirects
    app.add_middleware(RateLimitMiddleware, limiter=limiter)  # 5) /api/ limits
    app.add_middleware(GZipMiddleware, minimum_size=1024)     # 4)
    configure_cors(app)                                       # 3)
    install_security(app)                                     # 2)
    app.add_middleware(RequestIDMiddleware)                   # 1)

    # ── Exception handlers ──────────────────────────────────────────────────
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)  # type: ignore[arg-type]

    # ── Meta endpoints ──────────────────────────────────────────────────────
    @app.get("/healthz", tags=["meta"])
    async def healthz() -> dict[str, bool]:
        """Liveness probe; no external checks."""
        return {"ok": True}

    @app.get("/readyz", tags=["meta"])
    async def readyz() -> dict[str, object]:
        db_ok = await db_healthcheck()
        return {"ready": db_ok, "checks": {"db": db_ok}}

    # ── Routes ──────────────────────────────────────────────────────────────
    app.include_router(site_router)

    return app


# ─────────────────────────────────────────────────────────────────────────────
# 🚀 Module-level ASGI app for Uvicorn
# ─────────────────────────────────────────────────────────────────────────────
app = create_app()
__all__ = ["create_app", "app"]


# Local dev runner (prefer: `uvicorn subhub.main:app --reload`)
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "subhub.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "1") == "1",
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
