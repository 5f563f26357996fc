# subhub/api/deps.py
from __future__ import annotations

"""
FastAPI providers for repositories and services.

Process-scoped objects (`UploadRegistry`, `DriveTokenProvider`, the shared
httpx client) live on `app.state`; everything else is cheap and built per
request from the session factory / client. Tests swap any of these through
`app.dependency_overrides`.
"""

import httpx
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from subhub.core.http import get_http_client
from subhub.db.session import get_session_factory
from subhub.repositories.content import ContentRepository
from subhub.repositories.external_updates import ExternalUpdateRepository
from subhub.repositories.profiles import ProfileRepository
from subhub.repositories.watchlist import WatchlistRepository
from subhub.services.chat_service import ChatService
from subhub.services.drive.auth import DriveTokenProvider
from subhub.services.drive.uploads import UploadOrchestrator, UploadRegistry
from subhub.services.feeds import FeedFetcher
from subhub.services.monitor_service import UpdateMonitor
from subhub.services.notification_service import NotificationDispatcher
from subhub.services.tmdb_service import TMDBClient


# ── Repositories ─────────────────────────────────────────────────────────────
def get_content_repo(sf: async_sessionmaker[AsyncSession] = Depends(get_session_factory)) -> ContentRepository:
    return ContentRepository(sf)


def get_watchlist_repo(sf: async_sessionmaker[AsyncSession] = Depends(get_session_factory)) -> WatchlistRepository:
    return WatchlistRepository(sf)


def get_profile_repo(sf: async_sessionmaker[AsyncSession] = Depends(get_session_factory)) -> ProfileRepository:
    return ProfileRepository(sf)


def get_seen_log(sf: async_sessionmaker[AsyncSession] = Depends(get_session_factory)) -> ExternalUpdateRepository:
    return ExternalUpdateRepository(sf)


# ── Outbound services ────────────────────────────────────────────────────────
def get_notifier(client: httpx.AsyncClient = Depends(get_http_client)) -> NotificationDispatcher:
    return NotificationDispatcher(client)


def get_tmdb(client: httpx.AsyncClient = Depends(get_http_client)) -> TMDBClient:
    return TMDBClient(client)


def get_chat_service(client: httpx.AsyncClient = Depends(get_http_client)) -> ChatService:
    return ChatService(client)


def get_update_monitor(
    client: httpx.AsyncClient = Depends(get_http_client),
    seen_log: ExternalUpdateRepository = Depends(get_seen_log),
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> UpdateMonitor:
    return UpdateMonitor(fetcher=FeedFetcher(client), seen_log=seen_log, notifier=notifier)


# ── Process-scoped state ─────────────────────────────────────────────────────
def get_upload_registry(request: Request) -> UploadRegistry:
    registry = getattr(request.app.state, "upload_registry", None)
    if registry is None:
        registry = UploadRegistry()
        request.app.state.upload_registry = registry
    return registry


def get_token_provider(
    request: Request, client: httpx.AsyncClient = Depends(get_http_client)
) -> DriveTokenProvider:
    provider = getattr(request.app.state, "drive_tokens", None)
    if provider is None:
        provider = DriveTokenProvider(client)
        request.app.state.drive_tokens = provider
    return provider


def get_upload_orchestrator(
    registry: UploadRegistry = Depends(get_upload_registry),
    client: httpx.AsyncClient = Depends(get_http_client),
    repo: ContentRepository = Depends(get_content_repo),
) -> UploadOrchestrator:
    return UploadOrchestrator(registry, client, links=repo)


__all__ = [
    "get_content_repo",
    "get_watchlist_repo",
    "get_profile_repo",
    "get_seen_log",
    "get_notifier",
    "get_tmdb",
    "get_chat_service",
    "get_update_monitor",
    "get_upload_registry",
    "get_token_provider",
    "get_upload_orchestrator",
]
