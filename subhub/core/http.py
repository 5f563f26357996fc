# subhub/core/http.py
from __future__ import annotations

"""
Shared outbound HTTP client (httpx).

One `httpx.AsyncClient` per process, opened in the app lifespan and stored on
`app.state.http_client`. Services take the client as an argument so tests can
hand them one built on `httpx.MockTransport`.
"""

import httpx
from fastapi import Request

from subhub.core.config import settings

USER_AGENT = "SubHubSL/1.0"


def build_http_client(**kwargs) -> httpx.AsyncClient:
    kwargs.setdefault("timeout", httpx.Timeout(settings.HTTP_TIMEOUT_SECONDS))
    kwargs.setdefault("follow_redirects", True)
    headers = {"User-Agent": USER_AGENT, **(kwargs.pop("headers", None) or {})}
    return httpx.AsyncClient(headers=headers, **kwargs)


def get_http_client(request: Request) -> httpx.AsyncClient:
    """FastAPI dependency returning the lifespan-managed client."""
    client = getattr(request.app.state, "http_client", None)
    if client is None:
        client = build_http_client()
        request.app.state.http_client = client
    return client


__all__ = ["build_http_client", "get_http_client", "USER_AGENT"]
