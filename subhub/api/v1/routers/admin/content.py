# ╔══════════════════════════════════════════════════════════════════════════╗
# ║ SubHub SL · Admin content management                                      ║
# ╠──────────────────────────────────────────────────────────────────────────╣
# ║  - POST   /api/admin/content/{section}       → create + "new title" mail  ║
# ║  - PATCH  /api/admin/content/{section}/{id}  → partial update             ║
# ║  - DELETE /api/admin/content/{section}/{id}  → delete                     ║
# ╚══════════════════════════════════════════════════════════════════════════╝
import logging
from typing import Any, Dict
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from subhub.api.deps import get_content_repo, get_notifier
from subhub.core.config import settings
from subhub.core.exceptions import NotFoundException
from subhub.repositories.content import COLLECTIONS, Collection, ContentRepository
from subhub.schemas.content import ContentItem, ContentPatch, ContentWrite
from subhub.services.notification_service import NotificationDispatcher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/content", tags=["Admin · Content"])


def get_section(section: str) -> Collection:
    collection = COLLECTIONS.get(section)
    if collection is None:
        raise NotFoundException("Unknown section", details={"section": section})
    return collection


@router.post("/{section}", status_code=status.HTTP_201_CREATED)
async def create_content(
    payload: ContentWrite,
    collection: Collection = Depends(get_section),
    repo: ContentRepository = Depends(get_content_repo),
    notifier: NotificationDispatcher = Depends(get_notifier),
) -> Dict[str, Any]:
    row = await repo.create(collection, payload.model_dump(exclude_unset=False))
    item = ContentItem.model_validate(row)
    logger.info("Created %s %s (%s)", collection.name, item.id, item.title)

    sent = await notifier.notify_new_title(
        title=item.title,
        type_label=item.type.value,
        year=item.year,
        category=item.category,
        link=f"{settings.SITE_URL}/{collection.name}/{item.id}",
    )
    return {"item": item.model_dump(mode="json"), "notification": sent.as_dict()}


@router.patch("/{section}/{content_id}", response_model=ContentItem)
async def update_content(
    content_id: UUID,
    payload: ContentPatch,
    collection: Collection = Depends(get_section),
    repo: ContentRepository = Depends(get_content_repo),
) -> ContentItem:
    row = await repo.update(collection, content_id, payload.model_dump(exclude_unset=True))
    if row is None:
        raise NotFoundException("Content not found", details={"id": str(content_id)})
    return ContentItem.model_validate(row)


@router.delete("/{section}/{content_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_content(
    content_id: UUID,
    collection: Collection = Depends(get_section),
    repo: ContentRepository = Depends(get_content_repo),
) -> Response:
    if not await repo.delete(collection, content_id):
        raise NotFoundException("Content not found", details={"id": str(content_id)})
    logger.info("Deleted %s %s", collection.name, content_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
