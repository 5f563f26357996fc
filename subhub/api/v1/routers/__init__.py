"""
SubHub SL • Router aggregator
=============================

Composes the page routes, the public JSON APIs and the admin APIs into one
`APIRouter`.

    from subhub.api.v1.routers import router
    app.include_router(router)

Auth redirects for protected pages happen in `AccessGateMiddleware`; rate
limits for `/api/` live in `RateLimitMiddleware`. Routers only add the
per-endpoint guards.
"""

from fastapi import APIRouter

from .admin import router as admin_router
from .chat import router as chat_router
from .contact import router as contact_router
from .cron import router as cron_router
from .pages import router as pages_router
from .profile import router as profile_router
from .watchlist import router as watchlist_router


def build_router() -> APIRouter:
    r = APIRouter()
    r.include_router(watchlist_router)
    r.include_router(cron_router)
    r.include_router(chat_router)
    r.include_router(contact_router)
    r.include_router(admin_router, prefix="/api/admin")
    r.include_router(profile_router)
    r.include_router(pages_router)
    return r


router = build_router()

__all__ = [
    "router",
    "build_router",
    "pages_router",
    "profile_router",
    "watchlist_router",
    "cron_router",
    "chat_router",
    "contact_router",
    "admin_router",
]
