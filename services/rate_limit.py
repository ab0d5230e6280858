"""In-process sliding-window rate limiter."""
from __future__ import annotations

import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Tuple

from pydantic import BaseModel


class RateLimitResult(BaseModel):
    limited: bool
    retry_after_s: float = 0.0


class SlidingWindowLimiter:
    """Per-instance limiter keyed by (bucket, client key)."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._hits: Dict[Tuple[str, str], Deque[float]] = {}
        self._lock = threading.Lock()

    def check(self, bucket: str, key: str, max_requests: int, window_s: float) -> RateLimitResult:
        now = self._clock()
        with self._lock:
            hits = self._hits.setdefault((bucket, key), deque())
            while hits and now - hits[0] >= window_s:
                hits.popleft()
            if len(hits) >= max_requests:
                return RateLimitResult(limited=True, retry_after_s=max(0.0, window_s - (now - hits[0])))
            hits.append(now)
            self._prune(bucket, now, window_s)
            return RateLimitResult(limited=False)

    def _prune(self, bucket: str, now: float, window_s: float) -> None:
        stale = [
            key
            for key, hits in self._hits.items()
            if key[0] == bucket and (not hits or now - hits[-1] >= window_s)
        ]
        for key in stale:
            del self._hits[key]

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()


limiter = SlidingWindowLimiter()

__all__ = ["RateLimitResult", "SlidingWindowLimiter", "limiter"]
