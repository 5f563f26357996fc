# subhub/core/exceptions.py
from __future__ import annotations

"""
SubHub SL — Application Exceptions
==================================
A thin layer over FastAPI's `HTTPException` carrying structured metadata that
`subhub.core.exception_handlers` renders as problem+json.

Taxonomy
--------
- `NotFoundException`      → terminal 404 (missing content record)
- `ContentFetchError`      → store unreachable; callers render an error state,
                             never an empty list
- `UpstreamError`          → third-party API failure (TMDB, Drive, Gemini)
- `DriveAuthRequired`      → no Drive token; carries the consent URL
- `UploadInProgress`       → single-flight conflict for an upload job id
- `PermissionDeniedException` / `InvalidTokenException` → admin JSON APIs
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

__all__ = [
    "AppException",
    "NotFoundException",
    "ContentFetchError",
    "UpstreamError",
    "DriveAuthRequired",
    "UploadInProgress",
    "PermissionDeniedException",
    "InvalidTokenException",
]


# ──────────────────────────────────────────────────────────────
# 📦 Core: AppException
# ──────────────────────────────────────────────────────────────
class AppException(HTTPException):
    """Base application-level exception with optional metadata.

    Attributes
    -----------
    status_code : int
        HTTP status code.
    message : str
        Human-readable error message (also serialized as `detail`).
    code : str
        Stable machine-readable error code (e.g. ``"content_fetch_error"``).
    details : Any
        Machine-readable details.
    extra : dict
        Additional non-sensitive fields merged into the problem body.
    """

    default_status: int = status.HTTP_400_BAD_REQUEST
    default_code: str = "error"

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        request_id: Optional[str] = None,
        details: Optional[Any] = None,
        extra: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        status_code = int(status_code or self.default_status)
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.code: str = code or self.default_code
        self.message: str = message
        self.request_id: Optional[str] = request_id
        self.details: Optional[Any] = details
        self.extra: Dict[str, Any] = extra or {}

    def __str__(self) -> str:
        return self.message

    def to_problem(self, *, fallback_request_id: Optional[str] = None) -> Dict[str, Any]:
        """Return a dict matching our problem-like JSON shape."""
        body: Dict[str, Any] = {
            "error": True,
            "message": self.message,
            "code": self.code,
            "request_id": self.request_id or fallback_request_id or "N/A",
        }
        if self.details is not None:
            body["details"] = self.details
        extra_sanitized = dict(self.extra) if self.extra else {}
        for k in ("token", "access_token", "authorization", "password", "secret"):
            extra_sanitized.pop(k, None)
        body.update(extra_sanitized)
        return body


# ──────────────────────────────────────────────────────────────
# 🔎 Content / store
# ──────────────────────────────────────────────────────────────
class NotFoundException(AppException):
    default_status = status.HTTP_404_NOT_FOUND
    default_code = "not_found"


class ContentFetchError(AppException):
    """The content store could not be reached or the query failed."""

    default_status = status.HTTP_503_SERVICE_UNAVAILABLE
    default_code = "content_fetch_error"


# ──────────────────────────────────────────────────────────────
# 🌐 Third-party providers
# ──────────────────────────────────────────────────────────────
class UpstreamError(AppException):
    default_status = status.HTTP_502_BAD_GATEWAY
    default_code = "upstream_error"

    def __init__(self, message: str, *, provider: str, **kwargs: Any) -> None:
        extra = dict(kwargs.pop("extra", None) or {})
        extra.setdefault("provider", provider)
        super().__init__(message, extra=extra, **kwargs)
        self.provider = provider


class DriveAuthRequired(AppException):
    """No usable Google Drive token; the admin must complete the consent flow."""

    default_status = status.HTTP_401_UNAUTHORIZED
    default_code = "drive_auth_required"

    def __init__(self, consent_url: str, message: str = "Google Drive authorization required") -> None:
        super().__init__(message, extra={"consent_url": consent_url})
        self.consent_url = consent_url


class UploadInProgress(AppException):
    default_status = status.HTTP_409_CONFLICT
    default_code = "upload_in_progress"


# ──────────────────────────────────────────────────────────────
# 🔐 Auth
# ──────────────────────────────────────────────────────────────
class PermissionDeniedException(AppException):
    """Raised when a signed-in viewer lacks admin rights on an admin API."""

    default_status = status.HTTP_403_FORBIDDEN
    default_code = "forbidden"

    def __init__(self, message: str = "Admin access required", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class InvalidTokenException(AppException):
    """Raised for missing, invalid or expired session tokens (401)."""

    default_status = status.HTTP_401_UNAUTHORIZED
    default_code = "unauthorized"

    def __init__(self, message: str = "Authentication required", **kwargs: Any) -> None:
        kwargs.setdefault("headers", {"WWW-Authenticate": "Bearer"})
        super().__init__(message, **kwargs)
