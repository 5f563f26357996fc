# subhub/middleware/security_headers.py
from __future__ import annotations

"""
# SubHub SL — Security Headers & CORS

- **Headers**: CSP (allows the ad-network, analytics and Supabase origins the
  site embeds), X-Frame-Options, X-Content-Type-Options, X-XSS-Protection,
  Referrer-Policy, Permissions-Policy, HSTS in production only.
- **Server header** replaced by a neutral product name.
- **Sensitive cache**: `set_sensitive_cache()` marks per-viewer pages
  (watchlist, profile) as `no-store`.
- **CORS installer**: allow-list from `FRONTEND_ORIGINS`.

## Quick start
    install_security(app)
    configure_cors(app)
"""

import os
from dataclasses import dataclass, field
from typing import List, Tuple, Union

from fastapi import Request, Response
from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send

from subhub.core.config import settings

_AD_SCRIPT_HOSTS = (
    "https://www.googletagmanager.com https://www.google-analytics.com "
    "https://vercel.live https://va.vercel-scripts.com https://preferencenail.com "
    "https://*.effectivegatecpm.com https://*.highperformanceformat.com "
    "https://al5sm.com https://*.show-sb.com https://*.creative-sb1.com"
)


def _default_csp() -> str:
    return "; ".join(
        [
            "default-src 'self'",
            f"script-src 'self' 'unsafe-eval' 'unsafe-inline' {_AD_SCRIPT_HOSTS}",
            "style-src 'self' 'unsafe-inline' https://fonts.googleapis.com",
            "img-src 'self' data: https: blob:",
            "font-src 'self' https://fonts.gstatic.com data:",
            "connect-src 'self' https: wss: *.supabase.co",
            "frame-src 'self' https: blob:",
            "media-src 'self' https: blob:",
            "object-src 'none'",
            "base-uri 'self'",
            "form-action 'self'",
            "frame-ancestors 'none'",
            "upgrade-insecure-requests",
        ]
    )


# ─────────────────────────────────────────────────────────────
# ⚙️ Configuration
# ─────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class SecurityHeadersConfig:
    csp: str = field(default_factory=lambda: os.getenv("CSP_POLICY") or _default_csp())
    referrer_policy: str = os.getenv("REFERRER_POLICY", "strict-origin-when-cross-origin")
    permissions_policy: str = os.getenv(
        "PERMISSIONS_POLICY", "camera=(), microphone=(), geolocation=(), interest-cohort=()"
    )
    hsts: bool = field(default_factory=lambda: settings.is_production)
    server_name: str = os.getenv("SERVER_HEADER", "SubHub")
    skip_paths_csv: str = os.getenv("SECURITY_SKIP_PATHS", "/docs,/redoc,/openapi.json")


def _has_header(raw: List[Tuple[bytes, bytes]], name: str) -> bool:
    lname = name.lower().encode("latin-1")
    return any(k.lower() == lname for k, _ in raw)


def _set_default(raw: List[Tuple[bytes, bytes]], name: str, value: str) -> None:
    if not _has_header(raw, name):
        raw.append((name.encode("latin-1"), value.encode("latin-1")))


class SecurityHeadersMiddleware:
    """Pure-ASGI middleware applying security headers idempotently."""

    def __init__(self, app: ASGIApp, cfg: SecurityHeadersConfig | None = None) -> None:
        self.app = app
        self.cfg = cfg or SecurityHeadersConfig()
        self._skip: Tuple[str, ...] = tuple(
            p.strip() for p in self.cfg.skip_paths_csv.split(",") if p.strip()
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            return await self.app(scope, receive, send)

        skipped = scope.get("path", "").startswith(self._skip) if self._skip else False
        state = scope.setdefault("state", {})
        cfg = self.cfg

        async def send_wrapper(message):
            if message.get("type") == "http.response.start":
                raw = [
                    (k, v) for (k, v) in message.setdefault("headers", [])
                    if k.lower() not in (b"server", b"x-powered-by")
                ]
                raw.append((b"server", cfg.server_name.encode("latin-1")))
                if not skipped:
                    _set_default(raw, "Content-Security-Policy", cfg.csp)
                    _set_default(raw, "X-Frame-Options", "DENY")
                    _set_default(raw, "X-Content-Type-Options", "nosniff")
                    _set_default(raw, "X-XSS-Protection", "1; mode=block")
                    _set_default(raw, "Referrer-Policy", cfg.referrer_policy)
                    _set_default(raw, "Permissions-Policy", cfg.permissions_policy)
                    if cfg.hsts:
                        _set_default(
                            raw, "Strict-Transport-Security", "max-age=31536000; includeSubDomains; preload"
                        )
                if state.get("_sensitive_cache"):
                    _set_default(raw, "Cache-Control", "no-store")
                    _set_default(raw, "Vary", "Authorization, Cookie")
                message["headers"] = raw
            await send(message)

        await self.app(scope, receive, send_wrapper)


def set_sensitive_cache(target: Union[Response, Request]) -> None:
    """Mark a per-viewer Response/Request as `no-store`."""
    if isinstance(target, Response):
        target.headers.setdefault("Cache-Control", "no-store")
        target.headers.setdefault("Vary", "Authorization, Cookie")
        return
    if isinstance(target, Request):
        target.state._sensitive_cache = True
        return
    raise TypeError("set_sensitive_cache expects a Response or Request")


# ─────────────────────────────────────────────────────────────
# 🌐 CORS installer (allow-list, not '*')
# ─────────────────────────────────────────────────────────────
def configure_cors(app) -> None:
    origins = settings.frontend_origins_list or [settings.SITE_URL]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["Location", "Retry-After", "X-Request-ID"],
        max_age=3600,
    )


def install_security(app) -> None:
    app.add_middleware(SecurityHeadersMiddleware)


__all__ = [
    "SecurityHeadersConfig",
    "SecurityHeadersMiddleware",
    "install_security",
    "configure_cors",
    "set_sensitive_cache",
]
