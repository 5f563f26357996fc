"""
Admin router package
====================

Aggregates the admin JSON APIs under one router guarded by `require_admin`
(401 for anonymous callers, 403 for signed-in non-admins):

- content  → create / update / delete per section
- tmdb     → metadata lookups for the editor
- drive    → Google Drive authorization and upload jobs

Mount with `prefix="/api/admin"`.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from subhub.api.http_utils import require_admin

from .content import router as content_router
from .drive import router as drive_router
from .tmdb import router as tmdb_router

COMMON_ADMIN_RESPONSES: Dict[int, Dict[str, Any]] = {
    status.HTTP_401_UNAUTHORIZED: {"description": "Not signed in"},
    status.HTTP_403_FORBIDDEN: {"description": "Not an admin"},
    status.HTTP_429_TOO_MANY_REQUESTS: {"description": "Rate limit exceeded"},
}

router = APIRouter(dependencies=[Depends(require_admin)], responses=COMMON_ADMIN_RESPONSES)
router.include_router(content_router)
router.include_router(tmdb_router)
router.include_router(drive_router)

__all__ = ["router", "content_router", "tmdb_router", "drive_router", "COMMON_ADMIN_RESPONSES"]
