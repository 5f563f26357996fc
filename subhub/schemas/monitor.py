from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from subhub.schemas.enums import MonitorStatus


class MonitorOutcome(BaseModel):
    site: str
    status: MonitorStatus
    title: Optional[str] = None
    guid: Optional[str] = None
    error: Optional[str] = None


class MonitorSummary(BaseModel):
    success: bool = True
    results: List[MonitorOutcome] = Field(default_factory=list)

    def count(self, status: MonitorStatus) -> int:
        return sum(1 for r in self.results if r.status is status)
