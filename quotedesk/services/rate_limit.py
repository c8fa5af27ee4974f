"""
Sliding-window rate limiting.

A RateLimiter instance holds its own counters; the app keeps one on
app.state and hands it to routes as a dependency.
"""
import logging
import threading
import time
from collections import defaultdict, deque

from quotedesk.config import RATE_LIMIT_MAX_REQUESTS, RATE_LIMIT_WINDOW_SECONDS

logger = logging.getLogger(__name__)


class RateLimiter:
    """Interface: return True if the call identified by key may proceed."""

    def check_rate_limit(self, key: str) -> bool:
        raise NotImplementedError


class InMemoryRateLimiter(RateLimiter):
    """Allows max_requests per key within a rolling window of window_seconds."""

    def __init__(self, max_requests=None, window_seconds=None, clock=time.monotonic):
        if max_requests is None:
            max_requests = RATE_LIMIT_MAX_REQUESTS
        if window_seconds is None:
            window_seconds = RATE_LIMIT_WINDOW_SECONDS
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits = defaultdict(deque)
        self._lock = threading.Lock()

    def check_rate_limit(self, key: str) -> bool:
        now = self._clock()
        cutoff = now - self.window_seconds
        with self._lock:
            hits = self._hits[key]
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if len(hits) >= self.max_requests:
                logger.warning("Rate limit exceeded for %s", key)
                return False
            hits.append(now)
            return True

    def reset(self, key: str = None):
        with self._lock:
            if key is None:
                self._hits.clear()
            else:
                self._hits.pop(key, None)
