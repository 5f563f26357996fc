# ╔══════════════════════════════════════════════════════════════════════════╗
# ║ SubHub SL · Profile (signed in)                                           ║
# ║  - GET  /profile  → display name + avatar                                 ║
# ║  - POST /profile  → upsert display name + avatar                          ║
# ╚══════════════════════════════════════════════════════════════════════════╝
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Request

from subhub.api.deps import get_profile_repo
from subhub.api.http_utils import require_viewer
from subhub.core.auth import Viewer
from subhub.core.exceptions import NotFoundException
from subhub.middleware.security_headers import set_sensitive_cache
from subhub.repositories.profiles import ProfileRepository
from subhub.schemas.profile import ProfileOut, ProfileUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["Profile"])


def _uid(viewer: Viewer) -> UUID:
    user_id = viewer.user_uuid
    if user_id is None:
        raise NotFoundException("Unknown user")
    return user_id


@router.get("", response_model=ProfileOut)
async def read_profile(
    request: Request,
    viewer: Viewer = Depends(require_viewer),
    profiles: ProfileRepository = Depends(get_profile_repo),
) -> ProfileOut:
    set_sensitive_cache(request)
    profile = await profiles.get(_uid(viewer))
    if profile is None:
        return ProfileOut(user_id=viewer.user_id, email=viewer.email)
    return ProfileOut(
        user_id=viewer.user_id,
        email=viewer.email,
        full_name=profile.full_name,
        avatar_url=profile.avatar_url,
        updated_at=profile.updated_at,
    )


@router.post("", response_model=ProfileOut)
async def update_profile(
    payload: ProfileUpdate,
    request: Request,
    viewer: Viewer = Depends(require_viewer),
    profiles: ProfileRepository = Depends(get_profile_repo),
) -> ProfileOut:
    set_sensitive_cache(request)
    profile = await profiles.upsert(_uid(viewer), full_name=payload.full_name, avatar_url=payload.avatar_url)
    logger.info("Profile updated for %s", viewer.user_id)
    return ProfileOut(
        user_id=viewer.user_id,
        email=viewer.email,
        full_name=profile.full_name,
        avatar_url=profile.avatar_url,
        updated_at=profile.updated_at,
    )
