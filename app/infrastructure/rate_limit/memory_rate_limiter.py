import math
import threading
import time
from typing import Callable, Dict, Any

from ...application.ports.rate_limiter import RateLimiter


class InMemoryRateLimiter(RateLimiter):
    """Fixed window counter per key.

    Process-local: state resets on restart and is not shared between
    instances. Use RedisRateLimiter where that matters.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._store: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def _key(self, key: str, window_seconds: int) -> str:
        return f"{key}:{window_seconds}"

    def allow(self, key: str, max_requests: int, window_seconds: int) -> bool:
        now = self._clock()
        wk = self._key(key, window_seconds)
        with self._lock:
            rec = self._store.get(wk)
            if not rec or now > rec["reset_at"]:
                self._store[wk] = {"count": 1, "reset_at": now + window_seconds}
                return True
            if rec["count"] >= max_requests:
                return False
            rec["count"] += 1
            return True

    def retry_after(self, key: str, window_seconds: int) -> int:
        now = self._clock()
        with self._lock:
            rec = self._store.get(self._key(key, window_seconds))
            if not rec or now > rec["reset_at"]:
                return 0
            return max(int(math.ceil(rec["reset_at"] - now)), 0)

    def prune(self) -> int:
        """Drop expired windows; returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [k for k, rec in self._store.items() if now > rec["reset_at"]]
            for k in expired:
                del self._store[k]
            return len(expired)
