# subhub/api/http_utils.py
from __future__ import annotations

"""
# SubHub SL — HTTP helpers shared by routers and middleware

- `get_client_ip()`      → best-effort client address (rate-limit key)
- `get_viewer()`         → classified viewer placed on `request.state` by the gate
- `require_viewer()`     → page/API guard that redirects anonymous callers
- `require_admin()`      → admin JSON API guard (401/403 problem bodies)
"""

import ipaddress
import os
from typing import Optional

from fastapi import HTTPException, Request, status
from starlette.requests import HTTPConnection

from subhub.core.auth import Viewer, resolve_viewer
from subhub.core.config import settings
from subhub.core.exceptions import InvalidTokenException, PermissionDeniedException


# ─────────────────────────────────────────────────────────────────────────────
# 🌐 Client address
# ─────────────────────────────────────────────────────────────────────────────
def _parse_ip(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    candidate = value.strip().strip('"')
    if candidate.startswith("[") and "]" in candidate:
        candidate = candidate[1 : candidate.index("]")]
    try:
        return str(ipaddress.ip_address(candidate))
    except ValueError:
        return None


def get_client_ip(conn: HTTPConnection) -> str:
    """Best-guess client IP for rate limiting.

    Behind the hosting proxy the socket peer is the proxy itself, so the first
    hop of ``X-Forwarded-For`` wins, then ``X-Real-IP``, then the peer.
    Set ``TRUST_FORWARD_HEADERS=0`` to only ever use the socket peer.

    Returns
    -------
    str
        The client IP, or ``"unknown"`` when not determinable.
    """
    peer = _parse_ip(conn.client.host if conn.client else None)
    if os.environ.get("TRUST_FORWARD_HEADERS", "1").lower() in {"0", "false", "no"}:
        return peer or "unknown"

    xff = conn.headers.get("x-forwarded-for")
    if xff:
        first = _parse_ip(xff.split(",")[0])
        if first:
            return first
    return _parse_ip(conn.headers.get("x-real-ip")) or peer or "unknown"


# ─────────────────────────────────────────────────────────────────────────────
# 👤 Viewer dependencies
# ─────────────────────────────────────────────────────────────────────────────
def get_viewer(request: Request) -> Viewer:
    """Viewer classified by the access gate (resolved on demand when the gate is absent)."""
    viewer = getattr(request.state, "viewer", None)
    if isinstance(viewer, Viewer):
        return viewer
    viewer = resolve_viewer(request)
    request.state.viewer = viewer
    return viewer


class LoginRedirect(HTTPException):
    """Raised by guards to send an anonymous caller to the sign-in page."""

    def __init__(self, location: Optional[str] = None) -> None:
        super().__init__(
            status_code=status.HTTP_303_SEE_OTHER,
            detail="Authentication required",
            headers={"Location": location or settings.LOGIN_PATH},
        )


def require_viewer(request: Request) -> Viewer:
    viewer = get_viewer(request)
    if not viewer.is_authenticated:
        raise LoginRedirect()
    return viewer


def require_admin_page(request: Request) -> Viewer:
    """Page guard: anonymous → login, signed-in non-admin → home."""
    viewer = get_viewer(request)
    if not viewer.is_authenticated:
        raise LoginRedirect()
    if not viewer.is_admin:
        raise LoginRedirect("/")
    return viewer


def require_admin(request: Request) -> Viewer:
    viewer = get_viewer(request)
    if not viewer.is_authenticated:
        raise InvalidTokenException()
    if not viewer.is_admin:
        raise PermissionDeniedException(extra={"user_id": viewer.user_id})
    return viewer


__all__ = [
    "get_client_ip",
    "get_viewer",
    "require_viewer",
    "require_admin",
    "require_admin_page",
    "LoginRedirect",
]
