# ╔══════════════════════════════════════════════════════════════════════════╗
# ║ SubHub SL · Admin Google Drive uploads                                    ║
# ╠──────────────────────────────────────────────────────────────────────────╣
# ║  - GET  /api/admin/drive/auth             → connection state + consent URL║
# ║  - GET  /api/admin/drive/callback         → finish consent, cache token   ║
# ║  - POST /api/admin/drive/token            → hand over a browser token     ║
# ║  - DELETE /api/admin/drive/token          → drop the cached token         ║
# ║  - POST /api/admin/uploads                → start a job (multipart file)  ║
# ║  - GET  /api/admin/uploads/{job_id}        → job snapshot                  ║
# ║  - GET  /api/admin/uploads/{job_id}/events → progress as server-sent events║
# ╠──────────────────────────────────────────────────────────────────────────╣
# ║ A token is resolved before any job is registered; without one the caller  ║
# ║ gets 401 `drive_auth_required` with the consent URL and nothing uploads.  ║
# ╚══════════════════════════════════════════════════════════════════════════╝
import asyncio
import json
import logging
import shutil
import tempfile
import uuid
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from subhub.api.deps import get_content_repo, get_token_provider, get_upload_orchestrator, get_upload_registry
from subhub.api.http_utils import require_admin
from subhub.core.auth import Viewer
from subhub.core.exceptions import DriveAuthRequired, NotFoundException, UpstreamError
from subhub.repositories.content import COLLECTIONS, ContentRepository
from subhub.schemas.enums import UploadStatus
from subhub.services.drive.auth import DriveTokenProvider
from subhub.services.drive.uploads import UploadJob, UploadOrchestrator, UploadRegistry, iter_file

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Admin · Drive"])

SSE_KEEPALIVE_SECONDS = 15.0


class TokenHandoff(BaseModel):
    access_token: str = Field(..., min_length=10, max_length=4096)
    expires_in: Optional[int] = Field(None, ge=1)


# ─────────────────────────────────────────────────────────────────────────────
# 🔑 Drive authorization
# ─────────────────────────────────────────────────────────────────────────────
@router.get("/drive/auth")
async def drive_auth_state(
    viewer: Viewer = Depends(require_admin),
    tokens: DriveTokenProvider = Depends(get_token_provider),
) -> Dict[str, Any]:
    try:
        await tokens.get_token(viewer.user_id)
    except DriveAuthRequired as exc:
        return {"connected": False, "consent_url": exc.consent_url}
    return {"connected": True, "consent_url": None}


@router.get("/drive/callback")
async def drive_callback(
    code: str = Query(..., min_length=1),
    state: Optional[str] = Query(None),
    viewer: Viewer = Depends(require_admin),
    tokens: DriveTokenProvider = Depends(get_token_provider),
) -> Dict[str, Any]:
    if state and state != viewer.user_id:
        logger.warning("Drive consent state mismatch for %s", viewer.user_id)
        raise UpstreamError("Consent response does not belong to this session", provider="google_oauth")
    await tokens.exchange_code(code, viewer.user_id)
    return {"connected": True}


@router.post("/drive/token")
async def drive_token_handoff(
    payload: TokenHandoff,
    viewer: Viewer = Depends(require_admin),
    tokens: DriveTokenProvider = Depends(get_token_provider),
) -> Dict[str, Any]:
    tokens.remember(viewer.user_id, payload.access_token, expires_in=payload.expires_in)
    return {"connected": True}


@router.delete("/drive/token")
async def drive_disconnect(
    viewer: Viewer = Depends(require_admin),
    tokens: DriveTokenProvider = Depends(get_token_provider),
) -> Dict[str, Any]:
    tokens.forget(viewer.user_id)
    return {"connected": False}


# ─────────────────────────────────────────────────────────────────────────────
# 📤 Upload jobs
# ─────────────────────────────────────────────────────────────────────────────
def _spool(upload: UploadFile) -> Path:
    suffix = Path(upload.filename or "").suffix
    with tempfile.NamedTemporaryFile(prefix="subhub-upload-", suffix=suffix, delete=False) as tmp:
        upload.file.seek(0)
        shutil.copyfileobj(upload.file, tmp)
        return Path(tmp.name)


async def _run_and_clean(orchestrator: UploadOrchestrator, job: UploadJob, token: str, path: Path) -> None:
    try:
        await orchestrator.run(job, token, iter_file(path))
    finally:
        await run_in_threadpool(path.unlink, missing_ok=True)


@router.post("/uploads", status_code=status.HTTP_202_ACCEPTED)
async def start_upload(
    background: BackgroundTasks,
    file: UploadFile = File(...),
    folder_name: Optional[str] = Form(None, max_length=255),
    section: Optional[str] = Form(None, max_length=32),
    content_id: Optional[uuid.UUID] = Form(None),
    job_id: Optional[str] = Form(None, max_length=128),
    viewer: Viewer = Depends(require_admin),
    tokens: DriveTokenProvider = Depends(get_token_provider),
    registry: UploadRegistry = Depends(get_upload_registry),
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
    repo: ContentRepository = Depends(get_content_repo),
) -> Dict[str, Any]:
    token = await tokens.get_token(viewer.user_id)

    table: Optional[str] = None
    if content_id is not None:
        collection = COLLECTIONS.get(section or "movies")
        if collection is None:
            raise NotFoundException("Unknown section", details={"section": section})
        item = await repo.get(collection, content_id)
        if item is None:
            raise NotFoundException("Content not found", details={"id": str(content_id)})
        table = collection.table
        folder_name = folder_name or item.title

    filename = file.filename or "upload.bin"
    job = UploadJob(
        id=job_id or (f"{table}:{content_id}" if content_id else uuid.uuid4().hex),
        filename=filename,
        folder_name=folder_name or Path(filename).stem,
        total_bytes=0,
        mime_type=file.content_type or "video/mp4",
        content_table=table,
        content_id=content_id,
    )
    registry.register(job)

    try:
        path = await run_in_threadpool(_spool, file)
    except OSError as exc:
        job.error = f"Could not stage upload: {exc}"
        job.status = UploadStatus.ERROR
        registry.publish(job)
        raise
    job.total_bytes = path.stat().st_size
    registry.publish(job)

    background.add_task(_run_and_clean, orchestrator, job, token, path)
    logger.info("Upload %s queued (%s bytes → %s)", job.id, job.total_bytes, job.folder_name)
    return job.snapshot()


@router.get("/uploads/{job_id}")
async def upload_status(
    job_id: str,
    _: Viewer = Depends(require_admin),
    registry: UploadRegistry = Depends(get_upload_registry),
) -> Dict[str, Any]:
    job = registry.get(job_id)
    if job is None:
        raise NotFoundException("Upload job not found", details={"job_id": job_id})
    return job.snapshot()


def _sse(snapshot: Dict[str, Any]) -> str:
    return f"event: progress\ndata: {json.dumps(snapshot)}\n\n"


@router.get("/uploads/{job_id}/events")
async def upload_events(
    job_id: str,
    _: Viewer = Depends(require_admin),
    registry: UploadRegistry = Depends(get_upload_registry),
) -> StreamingResponse:
    job = registry.get(job_id)
    if job is None:
        raise NotFoundException("Upload job not found", details={"job_id": job_id})

    async def stream() -> AsyncIterator[str]:
        queue = registry.subscribe(job_id)
        try:
            snap = job.snapshot()
            yield _sse(snap)
            while snap["status"] not in ("complete", "error"):
                try:
                    snap = await asyncio.wait_for(queue.get(), timeout=SSE_KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    yield ": keep-alive\n\n"
                    continue
                yield _sse(snap)
        finally:
            registry.unsubscribe(job_id, queue)

    return StreamingResponse(
        stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-store", "X-Accel-Buffering": "no"},
    )
