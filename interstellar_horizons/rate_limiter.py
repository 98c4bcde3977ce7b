"""
Per-client request rate limiting for the HTTP route.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict

_LOG = logging.getLogger(__name__)


@dataclass
class _Window:
    count: int
    reset_time: float


class RateLimiter:
    """
    Fixed window rate limiter keyed by client identifier.

    Each client gets ``max_requests`` requests per ``window_seconds``. The
    window starts on the client's first request and is replaced once it
    expires. Runs on the event loop thread only, so no locking.
    """

    def __init__(self, window_seconds: float = 60, max_requests: int = 100,
                 clock: Callable[[], float] = time.time):
        """Initialize the rate limiter."""
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self._clock = clock
        self._store: Dict[str, _Window] = {}

    def is_rate_limited(self, identifier: str) -> bool:
        """Count a request and report whether it exceeds the limit."""
        now = self._clock()
        record = self._store.get(identifier)

        if record is None or now > record.reset_time:
            self._store[identifier] = _Window(count=1, reset_time=now + self.window_seconds)
            return False

        record.count += 1
        if record.count > self.max_requests:
            _LOG.warning("Rate limit exceeded for %s", identifier)
            return True
        return False

    def remaining(self, identifier: str) -> int:
        """Get requests left in the current window."""
        record = self._store.get(identifier)
        if record is None or self._clock() > record.reset_time:
            return self.max_requests
        return max(0, self.max_requests - record.count)

    def reset_time(self, identifier: str) -> float:
        """Get epoch seconds at which the client's window resets."""
        record = self._store.get(identifier)
        return record.reset_time if record else self._clock() + self.window_seconds

    def cleanup(self) -> int:
        """Drop expired windows and return how many were removed."""
        now = self._clock()
        expired = [key for key, record in self._store.items() if record.reset_time < now]
        for key in expired:
            del self._store[key]
        return len(expired)

    def retry_after(self, identifier: str) -> int:
        """Get whole seconds until the client's window resets."""
        return max(0, math.ceil(self.reset_time(identifier) - self._clock()))
