import threading
import time
from typing import Callable


class RateBucket:
    """
    Token bucket: holds at most `capacity` tokens, refilled continuously at
    `rate` tokens per second. Starts full.
    """

    def __init__(
        self,
        rate: float,
        capacity: int,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if rate <= 0:
            raise ValueError(f"rate must be > 0, got {rate}")
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.rate = float(rate)
        self.capacity = int(capacity)
        self.tokens = float(capacity)
        self._clock = clock
        self._sleep = sleep
        self._last = clock()
        self._lock = threading.Lock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._last)
        self._last = now
        self.tokens = min(float(self.capacity), self.tokens + elapsed * self.rate)

    def acquire(self) -> float:
        """Block until one token is available and take it. Returns seconds spent waiting."""
        with self._lock:
            self._refill()
            if self.tokens >= 1.0:
                self.tokens -= 1.0
                return 0.0
            wait = (1.0 - self.tokens) / self.rate
            self._sleep(wait)
            # the token that refilled while sleeping is ours; restart accounting from now
            self.tokens = 0.0
            self._last = self._clock()
            return wait
