# ukpolice/rate_limit.py
import threading
import time

from .config import settings
from .errors import Cancelled


class RateLimiter:
    """
    Token-bucket rate limiter, safe to share between threads.
    rate_per_sec: tokens added per second
    burst: bucket capacity (defaults to ~2x rate or at least 1)

    acquire() blocks until enough tokens are available. A cancel event or a
    timeout aborts the wait with Cancelled; an aborted wait takes nothing
    from the bucket.
    """
    def __init__(self, rate_per_sec: float, burst: int | None = None, clock=time.monotonic):
        if rate_per_sec <= 0:
            raise ValueError("rate_per_sec must be positive")
        self.rate = float(rate_per_sec)
        self.capacity = burst if burst is not None else max(1, int(self.rate * 2))
        if self.capacity < 1:
            raise ValueError("burst must be at least 1")
        self._clock = clock
        self._lock = threading.Lock()
        self.tokens = float(self.capacity)
        self.updated = clock()

    def _refill(self, now: float) -> None:
        delta = now - self.updated
        self.updated = now
        self.tokens = min(self.capacity, self.tokens + delta * self.rate)

    def try_acquire(self, tokens: int = 1) -> float:
        """Take tokens if available. Returns 0.0 on success, else the seconds to wait."""
        with self._lock:
            self._refill(self._clock())
            if self.tokens >= tokens:
                self.tokens -= tokens
                return 0.0
            return (tokens - self.tokens) / self.rate

    def acquire(self, tokens: int = 1, *, cancel: threading.Event | None = None,
                timeout: float | None = None) -> float:
        """Block until admitted. Returns the time spent waiting."""
        if tokens > self.capacity:
            raise ValueError(f"cannot acquire {tokens} tokens from a bucket of {self.capacity}")
        start = self._clock()
        deadline = start + timeout if timeout is not None else None
        while True:
            if cancel is not None and cancel.is_set():
                raise Cancelled("rate limiter admission cancelled")
            sleep = self.try_acquire(tokens)
            if sleep == 0.0:
                return self._clock() - start
            sleep = min(sleep, 1.0)
            if deadline is not None:
                left = deadline - self._clock()
                if left <= 0:
                    raise Cancelled("timed out waiting for rate limiter admission")
                sleep = min(sleep, left)
            if cancel is not None:
                cancel.wait(sleep)
            else:
                time.sleep(sleep)


# process-wide gate shared by every Client that is not given its own
RATE_LIMITER = RateLimiter(settings.api_rps, burst=settings.api_burst)
