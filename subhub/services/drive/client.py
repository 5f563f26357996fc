# subhub/services/drive/client.py
from __future__ import annotations

"""
Minimal Google Drive v3 client (httpx) covering what the upload flow needs:
folder lookup/creation, resumable session start, streamed PUT, public-read
permission and the share link. Every non-2xx answer raises `UpstreamError`.
"""

import logging
from typing import Any, AsyncIterable, Dict, Optional

import httpx

from subhub.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)

DRIVE_API = "https://www.googleapis.com/drive/v3"
DRIVE_UPLOAD_API = "https://www.googleapis.com/upload/drive/v3"
FOLDER_MIME = "application/vnd.google-apps.folder"
PROVIDER = "google_drive"


def share_link(file_id: str) -> str:
    return f"https://drive.google.com/file/d/{file_id}/view"


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


class DriveClient:
    def __init__(self, client: httpx.AsyncClient, token: str) -> None:
        self._client = client
        self._auth = {"Authorization": f"Bearer {token}"}

    async def _call(self, method: str, url: str, step: str, **kwargs: Any) -> httpx.Response:
        headers = {**self._auth, **(kwargs.pop("headers", None) or {})}
        try:
            resp = await self._client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Drive {step} failed: {exc}", provider=PROVIDER) from exc
        if resp.is_error:
            logger.error("Drive %s answered %s: %s", step, resp.status_code, resp.text[:300])
            raise UpstreamError(
                f"Drive {step} failed (HTTP {resp.status_code})",
                provider=PROVIDER,
                details={"status": resp.status_code},
            )
        return resp

    # ── Folders ─────────────────────────────────────────────────────────────
    async def find_folder(self, name: str) -> Optional[str]:
        q = f"mimeType='{FOLDER_MIME}' and name='{_quote(name)}' and trashed=false"
        resp = await self._call(
            "GET",
            f"{DRIVE_API}/files",
            "folder lookup",
            params={"q": q, "fields": "files(id,name)", "spaces": "drive"},
        )
        for f in resp.json().get("files") or []:
            if f.get("name") == name:
                return f["id"]
        return None

    async def create_folder(self, name: str) -> str:
        resp = await self._call(
            "POST",
            f"{DRIVE_API}/files",
            "folder creation",
            params={"fields": "id"},
            json={"name": name, "mimeType": FOLDER_MIME},
        )
        return resp.json()["id"]

    async def ensure_folder(self, name: str) -> str:
        return await self.find_folder(name) or await self.create_folder(name)

    # ── Upload ──────────────────────────────────────────────────────────────
    async def start_resumable(
        self, *, filename: str, mime_type: str, size: int, parent_id: Optional[str] = None
    ) -> str:
        metadata: Dict[str, Any] = {"name": filename, "mimeType": mime_type}
        if parent_id:
            metadata["parents"] = [parent_id]
        resp = await self._call(
            "POST",
            f"{DRIVE_UPLOAD_API}/files",
            "upload session",
            params={"uploadType": "resumable", "fields": "id"},
            json=metadata,
            headers={"X-Upload-Content-Type": mime_type, "X-Upload-Content-Length": str(size)},
        )
        location = resp.headers.get("location")
        if not location:
            raise UpstreamError("Drive did not return an upload session URL", provider=PROVIDER)
        return location

    async def upload(
        self, session_url: str, body: AsyncIterable[bytes], *, size: int, mime_type: str
    ) -> Dict[str, Any]:
        resp = await self._call(
            "PUT",
            session_url,
            "upload",
            content=body,
            headers={"Content-Length": str(size), "Content-Type": mime_type},
            timeout=None,
        )
        return resp.json()

    # ── Sharing ─────────────────────────────────────────────────────────────
    async def make_public(self, file_id: str) -> None:
        await self._call(
            "POST",
            f"{DRIVE_API}/files/{file_id}/permissions",
            "permission update",
            json={"role": "reader", "type": "anyone"},
        )


__all__ = ["DriveClient", "share_link", "FOLDER_MIME", "DRIVE_API", "DRIVE_UPLOAD_API"]
