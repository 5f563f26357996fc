# subhub/core/maintenance.py
from __future__ import annotations

"""
SubHub SL — periodic sweep of process-scoped state
--------------------------------------------------
- Rate-limiter windows that have rolled over
- Finished upload jobs past their retention
- Expired cached Drive tokens

Runs on an APScheduler `AsyncIOScheduler` started by the app lifespan.
"""

import logging
from datetime import timezone
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from fastapi import FastAPI

from subhub.core.config import settings

logger = logging.getLogger(__name__)

JOB_ID = "process_state_sweep"


def sweep_process_state(app: FastAPI) -> dict:
    """One sweep pass over everything on `app.state` that can go stale."""
    dropped = {"rate_limits": 0, "uploads": 0, "drive_tokens": 0}
    limiter = getattr(app.state, "rate_limiter", None)
    if limiter is not None:
        dropped["rate_limits"] = limiter.sweep()
    registry = getattr(app.state, "upload_registry", None)
    if registry is not None:
        dropped["uploads"] = registry.sweep()
    tokens = getattr(app.state, "drive_tokens", None)
    if tokens is not None:
        dropped["drive_tokens"] = tokens.sweep()
    if any(dropped.values()):
        logger.info("Maintenance sweep dropped %s", dropped)
    return dropped


def start_maintenance_scheduler(app: FastAPI, *, interval_seconds: Optional[int] = None) -> AsyncIOScheduler:
    seconds = settings.RATE_LIMIT_SWEEP_SECONDS if interval_seconds is None else interval_seconds
    scheduler = AsyncIOScheduler(timezone=timezone.utc)
    scheduler.add_job(
        sweep_process_state,
        IntervalTrigger(seconds=seconds, timezone=timezone.utc),
        args=[app],
        id=JOB_ID,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    logger.info("Maintenance scheduler started | interval=%ss", seconds)
    return scheduler


__all__ = ["sweep_process_state", "start_maintenance_scheduler"]
