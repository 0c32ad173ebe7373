"""
Sliding-window request counter keyed by client and bucket.

State lives in process memory, so each worker counts on its own and limits
reset on restart.
"""

import math
import threading
import time
from collections import deque


class RateLimiter:
    """Count hits per (bucket, identifier) within a rolling window."""

    def __init__(self) -> None:
        self._hits: dict[str, deque[float]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(identifier: str, bucket: str) -> str:
        return f"{bucket}:{identifier}"

    def check_rate_limit(
        self,
        identifier: str,
        limit: int,
        window_seconds: int,
        bucket: str = "general",
        now: float | None = None,
    ) -> tuple[bool, int, int]:
        """
        Record one hit and report (allowed, remaining, retry_after_seconds).
        A rejected hit is not recorded.
        """
        now = time.monotonic() if now is None else now
        key = self._key(identifier, bucket)
        with self._lock:
            hits = self._hits.setdefault(key, deque())
            while hits and hits[0] <= now - window_seconds:
                hits.popleft()
            if len(hits) >= limit:
                retry_after = max(1, math.ceil(hits[0] + window_seconds - now))
                return False, 0, retry_after
            hits.append(now)
            return True, limit - len(hits), 0

    def reset(self, identifier: str, bucket: str = "general") -> None:
        with self._lock:
            self._hits.pop(self._key(identifier, bucket), None)
