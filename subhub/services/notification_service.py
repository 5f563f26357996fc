# subhub/services/notification_service.py
from __future__ import annotations

"""
SubHub SL — Notification Dispatcher (Resend)
============================================

Two transactional emails:

- `notify_new_title()`     → "🎬 New {type} Added: {title}" when an admin adds content
- `notify_external_item()` → "🔔 New on {site}: {title}" for the update monitor

Contract
--------
Senders never raise. Every call returns a `SendResult`:

- no `RESEND_API_KEY`            → `SendResult(success=False, error="API Key missing")`
- provider/network failure       → `SendResult(success=False, error=<message>)`
- accepted by the provider       → `SendResult(success=True, id=<message id>)`

HTML bodies are Jinja2 templates under `subhub/templates/emails/`.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

from subhub.core.config import settings

logger = logging.getLogger(__name__)

API_KEY_MISSING = "API Key missing"
TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "emails"

_jinja_env: Optional[Environment] = None


def _jinja() -> Environment:
    global _jinja_env
    if _jinja_env is None:
        _jinja_env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(enabled_extensions=("html", "xml")),
        )
    return _jinja_env


def render_template(name: str, **context: Any) -> str:
    base = {
        "site_name": settings.SITE_NAME,
        "site_url": settings.SITE_URL,
        "year": datetime.now(timezone.utc).year,
    }
    base.update(context)
    return _jinja().get_template(name).render(**base)


@dataclass
class SendResult:
    success: bool
    error: Optional[str] = None
    id: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"success": self.success}
        if self.error is not None:
            out["error"] = self.error
        if self.id is not None:
            out["id"] = self.id
        return out


class NotificationDispatcher:
    """Formats and sends transactional email through the Resend REST API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        api_key: Optional[str] = None,
        sender: Optional[str] = None,
        recipients: Optional[Sequence[str]] = None,
        api_url: Optional[str] = None,
    ) -> None:
        self._client = client
        self.api_key = settings.resend_api_key if api_key is None else api_key
        self.sender = sender or settings.EMAIL_FROM
        self.recipients: List[str] = list(recipients) if recipients is not None else settings.notify_recipients
        self.api_url = api_url or settings.RESEND_API_URL

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    # ── Templates ───────────────────────────────────────────────────────────
    async def notify_new_title(
        self,
        *,
        title: str,
        type_label: str,
        year: Optional[int] = None,
        category: Optional[str] = None,
        link: Optional[str] = None,
    ) -> SendResult:
        subject = f"🎬 New {type_label} Added: {title}"
        html = render_template(
            "new_title.html",
            title=title,
            type_label=type_label,
            content_year=year,
            category=category,
            link=link,
        )
        return await self.send(subject=subject, html=html)

    async def notify_external_item(self, *, site_name: str, title: str, link: Optional[str]) -> SendResult:
        subject = f"🔔 New on {site_name}: {title}"
        html = render_template("external_update.html", source=site_name, title=title, link=link or "")
        return await self.send(subject=subject, html=html)

    # ── Transport ───────────────────────────────────────────────────────────
    async def send(self, *, subject: str, html: str, to: Optional[Sequence[str]] = None) -> SendResult:
        if not self.enabled:
            logger.warning("RESEND_API_KEY is not set. Email not sent: %s", subject)
            return SendResult(success=False, error=API_KEY_MISSING)

        recipients = list(to or self.recipients)
        if not recipients:
            return SendResult(success=False, error="No recipients configured")

        payload = {"from": self.sender, "to": recipients, "subject": subject, "html": html}
        try:
            resp = await self._client.post(
                self.api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        except httpx.HTTPError as exc:
            logger.error("Resend request failed: %s", exc)
            return SendResult(success=False, error=str(exc) or type(exc).__name__)

        body = _json_or_empty(resp)
        if resp.is_error:
            message = body.get("message") or body.get("error") or f"HTTP {resp.status_code}"
            logger.error("Resend rejected %r: %s", subject, message)
            return SendResult(success=False, error=str(message), data=body)

        logger.info("Email sent: %s", subject)
        return SendResult(success=True, id=body.get("id"), data=body)


def _json_or_empty(resp: httpx.Response) -> Dict[str, Any]:
    try:
        body = resp.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


__all__ = ["NotificationDispatcher", "SendResult", "API_KEY_MISSING", "render_template"]
