# subhub/services/drive/progress.py
from __future__ import annotations

"""Coalesced upload progress: at most one snapshot per interval."""

import math
import time
from dataclasses import dataclass
from typing import Callable, Optional


@dataclass(frozen=True)
class ProgressSnapshot:
    bytes_sent: int
    total_bytes: int
    percent: int
    rate_bps: float


class ProgressThrottle:
    """Turns raw transport callbacks into throttled, smoothed snapshots.

    - `update()` returns a snapshot only when `interval` seconds have passed
      since the last one (the very first call always emits).
    - rate = Δbytes / Δt between emitted snapshots, exponentially smoothed.
    - percent never decreases.
    - `final()` always emits.
    """

    def __init__(
        self,
        *,
        interval: float = 0.5,
        smoothing: float = 0.3,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.interval = interval
        self.smoothing = smoothing
        self._clock = clock
        self._last_at: Optional[float] = None
        self._last_bytes = 0
        self._rate = 0.0
        self._percent = 0

    @property
    def rate(self) -> float:
        return self._rate

    def update(self, sent: int, total: int) -> Optional[ProgressSnapshot]:
        now = self._clock()
        if self._last_at is not None and now - self._last_at < self.interval:
            return None
        return self._emit(now, sent, total)

    def final(self, sent: int, total: int) -> ProgressSnapshot:
        return self._emit(self._clock(), sent, total)

    def _emit(self, now: float, sent: int, total: int) -> ProgressSnapshot:
        if self._last_at is not None:
            elapsed = now - self._last_at
            if elapsed > 0:
                instant = (sent - self._last_bytes) / elapsed
                if self._rate:
                    instant = self.smoothing * instant + (1 - self.smoothing) * self._rate
                self._rate = instant
        self._last_at = now
        self._last_bytes = sent

        if total > 0:
            self._percent = max(self._percent, min(100, math.floor(sent * 100 / total)))
        return ProgressSnapshot(bytes_sent=sent, total_bytes=total, percent=self._percent, rate_bps=self._rate)


__all__ = ["ProgressThrottle", "ProgressSnapshot"]
