# ╔══════════════════════════════════════════════════════════════════════════╗
# ║ SubHub SL · Scheduled jobs                                                ║
# ║  - GET /api/cron/check-updates → run the external update monitor          ║
# ║ Requires `Authorization: Bearer <CRON_SECRET>`; anything else is a 401    ║
# ║ and nothing runs.                                                         ║
# ╚══════════════════════════════════════════════════════════════════════════╝
import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from subhub.api.deps import get_update_monitor
from subhub.core.config import settings
from subhub.schemas.monitor import MonitorSummary
from subhub.services.monitor_service import UpdateMonitor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cron", tags=["Cron"])


def cron_authorized(authorization: Optional[str], secret: Optional[str] = None) -> bool:
    expected = settings.cron_secret if secret is None else secret
    if not expected or not authorization:
        return False
    return hmac.compare_digest(authorization.encode(), f"Bearer {expected}".encode())


@router.get("/check-updates", response_model=MonitorSummary)
async def check_updates(request: Request, monitor: UpdateMonitor = Depends(get_update_monitor)):
    if not cron_authorized(request.headers.get("authorization")):
        logger.warning("Rejected cron trigger from %s", request.client.host if request.client else "unknown")
        return PlainTextResponse("Unauthorized", status_code=401)
    return await monitor.run()
