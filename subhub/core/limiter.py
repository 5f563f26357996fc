# subhub/core/limiter.py
from __future__ import annotations

"""
SubHub SL — Fixed-window API rate limiting (limits)
---------------------------------------------------
- Applies to `/api/` paths only, keyed by client address.
- Two tiers: `RATE_LIMIT_DEFAULT` (100/minute) and `RATE_LIMIT_SENSITIVE`
  (30/minute) for chat/analytics-style endpoints.
- Counters live in an in-process `limits` MemoryStorage owned by a
  `RateLimiter` instance. The app creates one in `create_app()`, keeps it on
  `app.state.rate_limiter` and hands it to `RateLimitMiddleware`; the lifespan
  scheduler calls `sweep()` to drop windows that have rolled over.
- Rejections are `429 {"error": "Too many requests. Please try again later."}`
  with `Retry-After` set to the window length.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from limits import RateLimitItem, parse
from limits.storage import MemoryStorage, Storage
from limits.strategies import FixedWindowRateLimiter
from starlette.requests import HTTPConnection
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from subhub.api.http_utils import get_client_ip
from subhub.core.config import settings

logger = logging.getLogger(__name__)

TOO_MANY_REQUESTS = "Too many requests. Please try again later."
SENSITIVE_MARKERS: Tuple[str, ...] = ("/chat", "/analytics")


@dataclass(frozen=True)
class RateDecision:
    allowed: bool
    limit: int
    remaining: int
    retry_after: int


class RateLimiter:
    """Process-scoped fixed-window limiter. Create one per app."""

    def __init__(
        self,
        *,
        default: str = "100/minute",
        sensitive: str = "30/minute",
        enabled: bool = True,
        namespace: str = "subhub",
        storage: Optional[Storage] = None,
        api_prefix: str = "/api/",
        sensitive_markers: Iterable[str] = SENSITIVE_MARKERS,
    ) -> None:
        self.enabled = enabled
        self.namespace = namespace
        self.api_prefix = api_prefix
        self.sensitive_markers = tuple(sensitive_markers)
        self.storage = storage or MemoryStorage()
        self._strategy = FixedWindowRateLimiter(self.storage)
        self.default_item: RateLimitItem = parse(default)
        self.sensitive_item: RateLimitItem = parse(sensitive)
        self._active: Dict[str, Tuple[RateLimitItem, str]] = {}

    @classmethod
    def from_settings(cls) -> "RateLimiter":
        return cls(
            default=settings.RATE_LIMIT_DEFAULT,
            sensitive=settings.RATE_LIMIT_SENSITIVE,
            enabled=settings.RATE_LIMIT_ENABLED,
        )

    # ── Policy ──────────────────────────────────────────────────────────────
    def applies_to(self, path: str) -> bool:
        return self.enabled and path.startswith(self.api_prefix)

    def item_for(self, path: str) -> RateLimitItem:
        if any(marker in path for marker in self.sensitive_markers):
            return self.sensitive_item
        return self.default_item

    # ── Counting ────────────────────────────────────────────────────────────
    def hit(self, path: str, client: str) -> RateDecision:
        item = self.item_for(path)
        identity = f"{self.namespace}:{client}"
        allowed = self._strategy.hit(item, identity)
        self._active[item.key_for(identity)] = (item, identity)
        stats = self._strategy.get_window_stats(item, identity)
        return RateDecision(
            allowed=allowed,
            limit=item.amount,
            remaining=max(0, int(stats.remaining)),
            retry_after=int(item.get_expiry()),
        )

    def sweep(self) -> int:
        """Forget counters whose window has reset. Returns how many were dropped."""
        dropped = 0
        for key, (item, identity) in list(self._active.items()):
            stats = self._strategy.get_window_stats(item, identity)
            if stats.remaining >= item.amount:
                self.storage.clear(key)
                self._active.pop(key, None)
                dropped += 1
        if dropped:
            logger.debug("Rate limiter sweep dropped %s idle windows", dropped)
        return dropped

    def reset(self) -> None:
        self.storage.reset()
        self._active.clear()


# ─────────────────────────────────────────────────────────────
# 🚦 Middleware
# ─────────────────────────────────────────────────────────────
class RateLimitMiddleware:
    """Pure-ASGI gate that consults an injected `RateLimiter`."""

    def __init__(self, app: ASGIApp, limiter: RateLimiter) -> None:
        self.app = app
        self.limiter = limiter

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http" or not self.limiter.applies_to(scope.get("path", "")):
            return await self.app(scope, receive, send)

        conn = HTTPConnection(scope)
        client = get_client_ip(conn)
        decision = self.limiter.hit(conn.url.path, client)
        if not decision.allowed:
            logger.warning("Rate limit exceeded for %s on %s", client, conn.url.path)
            response = JSONResponse(
                {"error": TOO_MANY_REQUESTS},
                status_code=429,
                headers={
                    "Retry-After": str(decision.retry_after),
                    "X-RateLimit-Limit": str(decision.limit),
                    "X-RateLimit-Remaining": "0",
                },
            )
            return await response(scope, receive, send)

        await self.app(scope, receive, send)


__all__ = ["RateLimiter", "RateDecision", "RateLimitMiddleware", "TOO_MANY_REQUESTS"]
