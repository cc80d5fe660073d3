from dataclasses import dataclass
from typing import Callable, Dict, Optional
import logging
import threading
import time

from config.env import settings
from utils.errors import RateLimitExceededError

logger = logging.getLogger(__name__)

@dataclass
class _Window:
    started_at: float
    count: int

class FixedWindowRateLimiter:
    """Per-user fixed window counter.

    State lives in process memory: it resets on restart and is not shared
    between workers or instances. A multi-instance deployment has to back this
    with a shared counting store (e.g. Redis INCR + EXPIRE) instead.
    """

    def __init__(self, max_requests: int, window_seconds: float,
                 clock: Optional[Callable[[], float]] = None):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock or time.monotonic
        self._windows: Dict[str, _Window] = {}
        self._lock = threading.Lock()

    def check(self, user_id: str) -> int:
        """Count a request for the user and return how many remain in the window.

        Raises:
            RateLimitExceededError: when the user has used up the window
        """
        now = self._clock()
        with self._lock:
            window = self._windows.get(user_id)
            if window is None or now - window.started_at >= self.window_seconds:
                self._drop_expired(now)
                window = _Window(started_at=now, count=0)
                self._windows[user_id] = window

            if window.count >= self.max_requests:
                retry_after = max(0, int(window.started_at + self.window_seconds - now))
                logger.warning(f"Rate limit exceeded for user {user_id}")
                raise RateLimitExceededError(details={"retry_after_seconds": retry_after})

            window.count += 1
            return self.max_requests - window.count

    def _drop_expired(self, now: float):
        expired = [
            user_id for user_id, window in self._windows.items()
            if now - window.started_at >= self.window_seconds
        ]
        for user_id in expired:
            del self._windows[user_id]

    def reset(self, user_id: Optional[str] = None):
        with self._lock:
            if user_id is None:
                self._windows.clear()
            else:
                self._windows.pop(user_id, None)

generation_rate_limiter = FixedWindowRateLimiter(
    max_requests=settings.rate_limit.max_requests,
    window_seconds=settings.rate_limit.window_seconds
)

def get_rate_limiter() -> FixedWindowRateLimiter:
    return generation_rate_limiter
