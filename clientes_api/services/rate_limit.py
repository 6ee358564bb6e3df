import threading
import time
from typing import Callable, Optional


class RateLimiter:
    """In-memory sliding window rate limiter keyed by an arbitrary string.

    Keys whose attempts have all left the window are dropped on the next
    ``check``, so idle client addresses do not accumulate.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._hits: dict[str, list[float]] = {}
        self._lock = threading.Lock()

    def check(
        self,
        key: str,
        window_seconds: int,
        max_requests: int,
    ) -> tuple[bool, Optional[int]]:
        """Record one attempt for ``key``.

        Returns ``(allowed, retry_after)``; rejected attempts are not recorded.
        """
        with self._lock:
            now = self._clock()
            window_start = now - window_seconds
            self._drop_idle_keys(window_start)
            hits = [ts for ts in self._hits.get(key, ()) if ts > window_start]

            if len(hits) >= max_requests:
                self._hits[key] = hits
                retry_after = int(min(hits) + window_seconds - now) + 1
                return False, retry_after

            hits.append(now)
            self._hits[key] = hits
            return True, None

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._hits)

    def _drop_idle_keys(self, window_start: float) -> None:
        idle = [key for key, hits in self._hits.items() if not hits or hits[-1] <= window_start]
        for key in idle:
            del self._hits[key]


login_rate_limiter = RateLimiter()
