# subhub/core/auth.py
from __future__ import annotations

"""
SubHub SL — Viewer identity
===========================
Sessions are issued by Supabase Auth; this service only *verifies* them.

- Token source: `Authorization: Bearer <jwt>` or the `sb-access-token` cookie.
- Verification: HS256 with `SUPABASE_JWT_SECRET`, audience `authenticated`.
- Classification: anonymous → authenticated → admin (email in `ADMIN_EMAILS`).

Invalid or expired tokens never raise here; the viewer is simply anonymous and
the access gate decides whether that means a redirect.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from jose import ExpiredSignatureError, JWTError, jwt
from starlette.requests import HTTPConnection

from subhub.core.config import settings
from subhub.schemas.enums import ViewerRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Viewer:
    """The classified identity behind a request."""

    role: ViewerRole = ViewerRole.ANONYMOUS
    user_id: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.role in (ViewerRole.AUTHENTICATED, ViewerRole.ADMIN)

    @property
    def is_admin(self) -> bool:
        return self.role is ViewerRole.ADMIN

    @property
    def user_uuid(self) -> Optional[uuid.UUID]:
        if not self.user_id:
            return None
        try:
            return uuid.UUID(str(self.user_id))
        except ValueError:
            return None


ANONYMOUS = Viewer()


def is_admin_email(email: Optional[str], allow_list: Optional[Sequence[str]] = None) -> bool:
    if not email:
        return False
    allowed = allow_list if allow_list is not None else settings.admin_emails
    return email.strip().lower() in {a.lower() for a in allowed}


def extract_token(conn: HTTPConnection) -> Optional[str]:
    """Case-insensitive Bearer extraction, falling back to the session cookie."""
    auth = conn.headers.get("authorization") or ""
    scheme, _, value = auth.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    cookie = conn.cookies.get(settings.AUTH_COOKIE_NAME)
    return cookie.strip() if cookie else None


def decode_session_token(token: str, *, secret: Optional[str] = None) -> Dict[str, Any]:
    """Verify a Supabase access token and return its claims (raises JWTError)."""
    key = secret if secret is not None else settings.jwt_secret
    if not key:
        raise JWTError("SUPABASE_JWT_SECRET is not configured")
    return jwt.decode(
        token,
        key,
        algorithms=["HS256"],
        audience=settings.SUPABASE_JWT_AUDIENCE,
    )


def classify_claims(claims: Dict[str, Any], allow_list: Optional[Sequence[str]] = None) -> Viewer:
    user_id = claims.get("sub")
    if not user_id:
        return ANONYMOUS
    email = claims.get("email")
    role = ViewerRole.ADMIN if is_admin_email(email, allow_list) else ViewerRole.AUTHENTICATED
    return Viewer(role=role, user_id=str(user_id), email=email)


def resolve_viewer(conn: HTTPConnection) -> Viewer:
    """Classify the caller of a request or websocket connection."""
    token = extract_token(conn)
    if not token:
        return ANONYMOUS
    try:
        claims = decode_session_token(token)
    except ExpiredSignatureError:
        logger.debug("Session token expired")
        return ANONYMOUS
    except JWTError as exc:
        logger.info("Rejected session token: %s", exc)
        return ANONYMOUS
    return classify_claims(claims)


__all__ = [
    "Viewer",
    "ANONYMOUS",
    "is_admin_email",
    "extract_token",
    "decode_session_token",
    "classify_claims",
    "resolve_viewer",
]
