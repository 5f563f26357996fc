# subhub/services/drive/uploads.py
from __future__ import annotations

"""
SubHub SL — Upload Orchestrator
===============================

Server-side counterpart of the admin "upload to Drive" widget.

Lifecycle of one `UploadJob`::

    preparing ──► uploading ──► complete
        │             │
        └─────────────┴──────► error   (terminal, no retry)

Steps, each of which can fail the job:

a. find the Drive folder named after the title, or create it
b. open a resumable upload session
c. stream the file; progress is coalesced by `ProgressThrottle`
d. grant anyone-reader permission and build the share link
e. (optional) write the link into the content record's `video_url`

`UploadRegistry` is the process-scoped job table: single-flight per job id,
pub/sub for progress streams, and a `sweep()` for finished jobs.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Protocol
from uuid import UUID

from anyio import to_thread
import httpx

from subhub.core.config import settings
from subhub.core.exceptions import UploadInProgress
from subhub.schemas.enums import UploadStatus
from subhub.services.drive.client import DriveClient, share_link
from subhub.services.drive.progress import ProgressSnapshot, ProgressThrottle

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class UploadJob:
    id: str
    filename: str
    folder_name: str
    total_bytes: int
    mime_type: str = "video/mp4"
    content_table: Optional[str] = None
    content_id: Optional[UUID] = None
    status: UploadStatus = UploadStatus.PREPARING
    bytes_sent: int = 0
    percent: int = 0
    rate_bps: float = 0.0
    file_id: Optional[str] = None
    link: Optional[str] = None
    error: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    finished_at: Optional[float] = None

    def snapshot(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "filename": self.filename,
            "folder_name": self.folder_name,
            "status": self.status.value,
            "bytes_sent": self.bytes_sent,
            "total_bytes": self.total_bytes,
            "percent": self.percent,
            "rate_bps": round(self.rate_bps, 1),
            "file_id": self.file_id,
            "link": self.link,
            "error": self.error,
            "content_table": self.content_table,
            "content_id": str(self.content_id) if self.content_id else None,
            "updated_at": self.updated_at.isoformat(),
        }


# ─────────────────────────────────────────────────────────────────────────────
# 📋 Registry
# ─────────────────────────────────────────────────────────────────────────────
class UploadRegistry:
    def __init__(
        self,
        *,
        retention_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.retention_seconds = settings.UPLOAD_JOB_RETENTION_SECONDS if retention_seconds is None else retention_seconds
        self._clock = clock
        self._jobs: Dict[str, UploadJob] = {}
        self._subscribers: Dict[str, List[asyncio.Queue]] = {}

    def __len__(self) -> int:
        return len(self._jobs)

    def get(self, job_id: str) -> Optional[UploadJob]:
        return self._jobs.get(job_id)

    def register(self, job: UploadJob) -> UploadJob:
        """Claim `job.id`; a live job with the same id raises `UploadInProgress`."""
        current = self._jobs.get(job.id)
        if current is not None and not current.status.is_terminal:
            raise UploadInProgress(
                "An upload with this id is already running",
                details={"job_id": job.id, "status": current.status.value},
            )
        self._jobs[job.id] = job
        return job

    # ── Progress fan-out ────────────────────────────────────────────────────
    def subscribe(self, job_id: str) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue()
        self._subscribers.setdefault(job_id, []).append(queue)
        return queue

    def unsubscribe(self, job_id: str, queue: asyncio.Queue) -> None:
        queues = self._subscribers.get(job_id)
        if not queues:
            return
        if queue in queues:
            queues.remove(queue)
        if not queues:
            self._subscribers.pop(job_id, None)

    def publish(self, job: UploadJob) -> None:
        job.updated_at = _utcnow()
        if job.status.is_terminal and job.finished_at is None:
            job.finished_at = self._clock()
        snap = job.snapshot()
        for queue in self._subscribers.get(job.id, []):
            queue.put_nowait(snap)

    def sweep(self) -> int:
        """Forget terminal jobs older than the retention window."""
        now = self._clock()
        stale = [
            job_id
            for job_id, job in self._jobs.items()
            if job.finished_at is not None and now - job.finished_at >= self.retention_seconds
        ]
        for job_id in stale:
            self._jobs.pop(job_id, None)
        return len(stale)


# ─────────────────────────────────────────────────────────────────────────────
# 🚚 Orchestrator
# ─────────────────────────────────────────────────────────────────────────────
class VideoLinkWriter(Protocol):
    async def set_video_url(self, table: str, content_id: UUID, url: str) -> bool: ...


async def iter_file(path: Path, chunk_size: Optional[int] = None) -> AsyncIterator[bytes]:
    """Read a spooled upload in chunks without blocking the event loop."""
    size = chunk_size or settings.UPLOAD_CHUNK_BYTES
    fh = await to_thread.run_sync(open, path, "rb")
    try:
        while True:
            chunk = await to_thread.run_sync(fh.read, size)
            if not chunk:
                break
            yield chunk
    finally:
        await to_thread.run_sync(fh.close)


class UploadOrchestrator:
    def __init__(
        self,
        registry: UploadRegistry,
        client: httpx.AsyncClient,
        *,
        links: Optional[VideoLinkWriter] = None,
        progress_interval: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.registry = registry
        self._client = client
        self.links = links
        self.progress_interval = (
            progress_interval if progress_interval is not None else settings.UPLOAD_PROGRESS_INTERVAL_MS / 1000
        )
        self._clock = clock

    def _set(self, job: UploadJob, status: UploadStatus) -> None:
        job.status = status
        self.registry.publish(job)

    def _apply(self, job: UploadJob, snap: ProgressSnapshot) -> None:
        job.bytes_sent = snap.bytes_sent
        job.percent = snap.percent
        job.rate_bps = snap.rate_bps
        self.registry.publish(job)

    async def run(self, job: UploadJob, token: str, source: AsyncIterator[bytes]) -> UploadJob:
        """Drive `job` to a terminal state. Never raises; failures land in `job.error`."""
        drive = DriveClient(self._client, token)
        try:
            folder_id = await drive.ensure_folder(job.folder_name)
            session_url = await drive.start_resumable(
                filename=job.filename, mime_type=job.mime_type, size=job.total_bytes, parent_id=folder_id
            )
            self._set(job, UploadStatus.UPLOADING)

            throttle = ProgressThrottle(interval=self.progress_interval, clock=self._clock)
            result = await drive.upload(
                session_url, self._counting(job, source, throttle), size=job.total_bytes, mime_type=job.mime_type
            )
            self._apply(job, throttle.final(job.bytes_sent, job.total_bytes))

            file_id = result["id"]
            await drive.make_public(file_id)
            job.file_id = file_id
            job.link = share_link(file_id)

            if self.links is not None and job.content_table and job.content_id:
                updated = await self.links.set_video_url(job.content_table, job.content_id, job.link)
                if not updated:
                    raise LookupError("Database update failed: content record not found")
        except Exception as exc:
            logger.exception("Upload %s failed", job.id)
            job.error = getattr(exc, "message", None) or str(exc) or type(exc).__name__
            self._set(job, UploadStatus.ERROR)
            return job

        job.percent = 100
        logger.info("Upload %s complete: %s", job.id, job.link)
        self._set(job, UploadStatus.COMPLETE)
        return job

    async def _counting(
        self, job: UploadJob, source: AsyncIterator[bytes], throttle: ProgressThrottle
    ) -> AsyncIterator[bytes]:
        async for chunk in source:
            job.bytes_sent += len(chunk)
            snap = throttle.update(job.bytes_sent, job.total_bytes)
            if snap is not None:
                self._apply(job, snap)
            yield chunk


__all__ = ["UploadJob", "UploadRegistry", "UploadOrchestrator", "iter_file", "VideoLinkWriter"]
