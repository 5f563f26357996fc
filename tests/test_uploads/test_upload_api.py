# tests/test_uploads/test_upload_api.py

import pytest
from httpx import AsyncClient

from subhub.db.models import Movie
from subhub.schemas.enums import UploadStatus
from subhub.services.drive.uploads import UploadJob, UploadRegistry
from tests.fixtures.mocks.drive import FakeDrive

UPLOADS = "/api/admin/uploads"
CLIP = b"\x00\x01" * 4096


def video(name: str = "dune.mp4"):
    return {"file": (name, CLIP, "video/mp4")}


@pytest.fixture()
def drive_online(app, fake_drive: FakeDrive) -> FakeDrive:
    app.state.http_client = fake_drive.http
    return fake_drive


async def connect(async_client: AsyncClient, headers) -> None:
    res = await async_client.post("/api/admin/drive/token", json={"access_token": "ya29.browser-token"}, headers=headers)
    assert res.status_code == 200


# ─────────────────────────────────────────────────────────────
# Authorization
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_without_drive_token_nothing_uploads(
    async_client: AsyncClient, admin_auth, upload_registry: UploadRegistry
):
    _, headers = admin_auth
    res = await async_client.post(UPLOADS, files=video(), data={"job_id": "job-1"}, headers=headers)

    assert res.status_code == 401
    body = res.json()
    assert body["code"] == "drive_auth_required"
    assert body["consent_url"].startswith("https://accounts.google.com/o/oauth2/v2/auth?")
    assert len(upload_registry) == 0


@pytest.mark.anyio
async def test_auth_state_reports_consent_url(async_client: AsyncClient, admin_auth):
    _, headers = admin_auth
    res = await async_client.get("/api/admin/drive/auth", headers=headers)
    assert res.status_code == 200
    assert res.json()["connected"] is False
    assert "state=" in res.json()["consent_url"]


@pytest.mark.anyio
async def test_token_handoff_and_disconnect(async_client: AsyncClient, admin_auth, drive_online: FakeDrive):
    _, headers = admin_auth
    await connect(async_client, headers)
    assert (await async_client.get("/api/admin/drive/auth", headers=headers)).json() == {
        "connected": True,
        "consent_url": None,
    }

    res = await async_client.delete("/api/admin/drive/token", headers=headers)
    assert res.json() == {"connected": False}
    assert (await async_client.get("/api/admin/drive/auth", headers=headers)).json()["connected"] is False


@pytest.mark.anyio
async def test_uploads_are_admin_only(async_client: AsyncClient, viewer_auth):
    _, headers = viewer_auth
    res = await async_client.post(UPLOADS, files=video(), headers=headers)
    assert res.status_code == 403


# ─────────────────────────────────────────────────────────────
# Jobs
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_upload_job_runs_to_completion(async_client: AsyncClient, admin_auth, drive_online: FakeDrive):
    _, headers = admin_auth
    await connect(async_client, headers)

    res = await async_client.post(
        UPLOADS, files=video(), data={"job_id": "job-1", "folder_name": "Dune"}, headers=headers
    )
    assert res.status_code == 202
    queued = res.json()
    assert queued["id"] == "job-1"
    assert queued["status"] == "preparing"
    assert queued["total_bytes"] == len(CLIP)

    status = await async_client.get(f"{UPLOADS}/job-1", headers=headers)
    assert status.status_code == 200
    snap = status.json()
    assert snap["status"] == "complete"
    assert snap["percent"] == 100
    assert snap["link"] == "https://drive.google.com/file/d/file-9/view"
    assert drive_online.uploaded == CLIP


@pytest.mark.anyio
async def test_upload_linked_to_content_updates_video_url(
    async_client: AsyncClient, admin_auth, drive_online: FakeDrive, seed, session_factory
):
    _, headers = admin_auth
    (film,) = await seed(Movie, {"title": "Dune"})
    await connect(async_client, headers)

    res = await async_client.post(
        UPLOADS, files=video(), data={"section": "movies", "content_id": str(film.id)}, headers=headers
    )
    assert res.status_code == 202
    assert res.json()["folder_name"] == "Dune"

    async with session_factory() as session:
        row = await session.get(Movie, film.id)
    assert row.video_url == "https://drive.google.com/file/d/file-9/view"


@pytest.mark.anyio
async def test_live_job_id_is_rejected(
    async_client: AsyncClient, admin_auth, drive_online: FakeDrive, upload_registry: UploadRegistry
):
    _, headers = admin_auth
    await connect(async_client, headers)
    upload_registry.register(UploadJob(id="job-1", filename="a.mp4", folder_name="A", total_bytes=1))

    res = await async_client.post(UPLOADS, files=video(), data={"job_id": "job-1"}, headers=headers)

    assert res.status_code == 409
    assert res.json()["code"] == "upload_in_progress"
    assert upload_registry.get("job-1").status is UploadStatus.PREPARING


@pytest.mark.anyio
async def test_events_stream_for_a_finished_job(async_client: AsyncClient, admin_auth, drive_online: FakeDrive):
    _, headers = admin_auth
    await connect(async_client, headers)
    await async_client.post(UPLOADS, files=video(), data={"job_id": "job-2"}, headers=headers)

    res = await async_client.get(f"{UPLOADS}/job-2/events", headers=headers)

    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/event-stream")
    assert res.text.startswith("event: progress\ndata: ")
    assert '"status": "complete"' in res.text


@pytest.mark.anyio
async def test_unknown_job_is_404(async_client: AsyncClient, admin_auth):
    _, headers = admin_auth
    res = await async_client.get(f"{UPLOADS}/missing", headers=headers)
    assert res.status_code == 404
