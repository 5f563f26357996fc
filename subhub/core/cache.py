from __future__ import annotations

import time
from typing import Any, Callable, Dict, Optional


class TTLMap:
    """In-memory TTL map for small, process-local caches.

    - get(key) -> Optional[Any]
    - set(key, value, ttl_seconds)
    - pop(key)
    - sweep() -> number of expired entries dropped

    The clock is injectable so expiry can be tested without sleeping.
    """

    def __init__(self, maxsize: int = 4096, *, clock: Callable[[], float] = time.monotonic):
        self.maxsize = maxsize
        self._clock = clock
        self._data: Dict[str, Any] = {}
        self._exp: Dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._data)

    def get(self, key: str) -> Optional[Any]:
        exp = self._exp.get(key)
        if exp is None:
            return None
        if self._clock() >= exp:
            self.pop(key)
            return None
        return self._data.get(key)

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        if key not in self._data and len(self._data) >= self.maxsize:
            self.sweep()
            if len(self._data) >= self.maxsize:
                oldest = next(iter(self._data))
                self.pop(oldest)
        self._data[key] = value
        self._exp[key] = self._clock() + ttl_seconds

    def pop(self, key: str) -> Optional[Any]:
        self._exp.pop(key, None)
        return self._data.pop(key, None)

    def sweep(self) -> int:
        now = self._clock()
        expired = [k for k, exp in self._exp.items() if now >= exp]
        for k in expired:
            self.pop(k)
        return len(expired)
