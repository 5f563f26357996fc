# ╔══════════════════════════════════════════════════════════════════════════╗
# ║ SubHub SL · Contact form                                                  ║
# ║  - POST /api/contact {name, email, subject?, message} → 201               ║
# ╚══════════════════════════════════════════════════════════════════════════╝
import logging

from fastapi import APIRouter, Depends, status

from subhub.api.deps import get_profile_repo
from subhub.repositories.profiles import ProfileRepository
from subhub.schemas.profile import ContactIn, ContactOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/contact", tags=["Contact"])


@router.post("", response_model=ContactOut, status_code=status.HTTP_201_CREATED)
async def submit_contact(
    payload: ContactIn,
    profiles: ProfileRepository = Depends(get_profile_repo),
) -> ContactOut:
    row = await profiles.add_contact_message(
        name=payload.name, email=str(payload.email), subject=payload.subject, message=payload.message
    )
    logger.info("Contact message %s received", row.id)
    return ContactOut.model_validate(row)
