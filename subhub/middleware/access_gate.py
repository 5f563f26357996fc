# subhub/middleware/access_gate.py
from __future__ import annotations

"""
# SubHub SL — Access Control Gate (pure ASGI)

Classifies every HTTP request as anonymous / authenticated / admin and stores
the result on `request.state.viewer`, together with `request.state.show_ads`
(ads are never injected into the admin area).

Protected page prefixes (prefix match, as the site has always done it):
- `/profile`, `/my-list` → require a signed-in viewer, else redirect `/login`
- `/admin`               → anonymous → `/login`; signed-in non-admin → `/`

Unauthorized access is always a redirect, never an error body.
"""

import logging
from typing import Callable, Optional, Sequence, Tuple

from starlette.requests import HTTPConnection
from starlette.responses import RedirectResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from subhub.core.auth import Viewer, resolve_viewer
from subhub.core.config import settings

logger = logging.getLogger(__name__)

AUTH_PREFIXES: Tuple[str, ...] = ("/profile", "/my-list")
ADMIN_PREFIXES: Tuple[str, ...] = ("/admin",)


def redirect_target(path: str, viewer: Viewer, *, login_path: str = "/login") -> Optional[str]:
    """Where a request for `path` must be sent instead, or None when allowed."""
    is_admin_area = path.startswith(ADMIN_PREFIXES)
    if not viewer.is_authenticated and (is_admin_area or path.startswith(AUTH_PREFIXES)):
        return login_path
    if is_admin_area and not viewer.is_admin:
        return "/"
    return None


class AccessGateMiddleware:
    """Viewer classification + protected-route redirects."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        resolver: Callable[[HTTPConnection], Viewer] = resolve_viewer,
        login_path: Optional[str] = None,
        ad_free_prefixes: Sequence[str] = ADMIN_PREFIXES,
    ) -> None:
        self.app = app
        self.resolver = resolver
        self.login_path = login_path or settings.LOGIN_PATH
        self.ad_free_prefixes = tuple(ad_free_prefixes)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            return await self.app(scope, receive, send)

        conn = HTTPConnection(scope)
        viewer = self.resolver(conn)
        path = conn.url.path

        state = scope.setdefault("state", {})
        state["viewer"] = viewer
        state["show_ads"] = not path.startswith(self.ad_free_prefixes)

        target = redirect_target(path, viewer, login_path=self.login_path)
        if target is not None:
            logger.info("Access gate redirect %s → %s (role=%s)", path, target, viewer.role.value)
            response = RedirectResponse(target, status_code=307)
            return await response(scope, receive, send)

        await self.app(scope, receive, send)


__all__ = ["AccessGateMiddleware", "redirect_target", "AUTH_PREFIXES", "ADMIN_PREFIXES"]
