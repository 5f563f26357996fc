# subhub/services/drive/auth.py
from __future__ import annotations

"""
SubHub SL — Google Drive credentials
====================================

Token resolution order for an upload:

1. **Server refresh**: exchange the long-lived `GOOGLE_REFRESH_TOKEN` at the
   Google token endpoint.
2. **Cached client token**: an access token obtained through the consent flow
   (or handed over by the admin's browser), kept ~1 hour per admin.
3. **Interactive consent**: with neither available, raise `DriveAuthRequired` with the
   consent URL. Callers must not start an upload in that case.
"""

import logging
import secrets
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from subhub.core.cache import TTLMap
from subhub.core.config import settings
from subhub.core.exceptions import DriveAuthRequired, UpstreamError

logger = logging.getLogger(__name__)

TOKEN_URL = "https://oauth2.googleapis.com/token"
CONSENT_URL = "https://accounts.google.com/o/oauth2/v2/auth"
DRIVE_SCOPE = "https://www.googleapis.com/auth/drive.file"
PROVIDER = "google_oauth"


class DriveTokenProvider:
    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        cache: Optional[TTLMap] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        refresh_token: Optional[str] = None,
        redirect_uri: Optional[str] = None,
        ttl_seconds: Optional[int] = None,
    ) -> None:
        self._client = client
        self.cache = cache if cache is not None else TTLMap(maxsize=256)
        self.client_id = settings.GOOGLE_CLIENT_ID if client_id is None else client_id
        self.client_secret = settings.google_client_secret if client_secret is None else client_secret
        self.refresh_token = settings.google_refresh_token if refresh_token is None else refresh_token
        self.redirect_uri = redirect_uri or settings.google_redirect_uri
        self.ttl_seconds = settings.DRIVE_TOKEN_TTL_SECONDS if ttl_seconds is None else ttl_seconds

    @property
    def can_refresh(self) -> bool:
        return bool(self.client_id and self.client_secret and self.refresh_token)

    # ── Resolution ──────────────────────────────────────────────────────────
    async def get_token(self, owner: str) -> str:
        """Access token for `owner` (admin user id) or `DriveAuthRequired`."""
        if self.can_refresh:
            token = await self._refresh()
            if token:
                return token

        cached = self.cache.get(owner)
        if cached:
            return cached

        raise DriveAuthRequired(self.consent_url(state=owner))

    async def _refresh(self) -> Optional[str]:
        form = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": self.refresh_token,
            "grant_type": "refresh_token",
        }
        try:
            data = await self._token_request(form)
        except UpstreamError as exc:
            logger.warning("Drive refresh-token exchange failed: %s", exc.message)
            return None
        return data.get("access_token")

    # ── Consent flow ────────────────────────────────────────────────────────
    def consent_url(self, *, state: Optional[str] = None) -> str:
        params = {
            "client_id": self.client_id or "",
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": DRIVE_SCOPE,
            "access_type": "offline",
            "include_granted_scopes": "true",
            "prompt": "consent",
            "state": state or secrets.token_urlsafe(16),
        }
        return f"{CONSENT_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str, owner: str) -> str:
        """Finish the consent flow and cache the resulting access token for `owner`."""
        form = {
            "code": code,
            "client_id": self.client_id or "",
            "client_secret": self.client_secret or "",
            "redirect_uri": self.redirect_uri,
            "grant_type": "authorization_code",
        }
        data = await self._token_request(form)
        token = data.get("access_token")
        if not token:
            raise UpstreamError("Google returned no access token", provider=PROVIDER)
        self.remember(owner, token, expires_in=data.get("expires_in"))
        return token

    def remember(self, owner: str, token: str, *, expires_in: Optional[Any] = None) -> None:
        """Cache a client-obtained token, never longer than the configured TTL."""
        ttl = float(self.ttl_seconds)
        try:
            if expires_in is not None:
                ttl = min(ttl, float(expires_in))
        except (TypeError, ValueError):
            pass
        self.cache.set(owner, token, ttl)

    def forget(self, owner: str) -> None:
        self.cache.pop(owner)

    def sweep(self) -> int:
        return self.cache.sweep()

    async def _token_request(self, form: Dict[str, str]) -> Dict[str, Any]:
        try:
            resp = await self._client.post(TOKEN_URL, data=form)
        except httpx.HTTPError as exc:
            raise UpstreamError("Google token endpoint unreachable", provider=PROVIDER) from exc
        try:
            data = resp.json()
        except ValueError:
            data = {}
        if resp.is_error or "error" in data:
            reason = data.get("error_description") or data.get("error") or f"HTTP {resp.status_code}"
            raise UpstreamError(f"Google token request failed: {reason}", provider=PROVIDER)
        return data


__all__ = ["DriveTokenProvider", "TOKEN_URL", "CONSENT_URL", "DRIVE_SCOPE"]
