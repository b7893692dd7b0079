import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from fastapi import Request


@dataclass
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_time: float  # epoch seconds

    def retry_after(self, now: Optional[float] = None) -> int:
        now = time.time() if now is None else now
        return max(0, math.ceil(self.reset_time - now))

    def headers(self) -> Dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(int(self.reset_time)),
        }


class RateLimiter:
    """Fixed-window request counter kept in process memory."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.time,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, list] = {}
        self._lock = threading.Lock()

    def _cleanup(self, now: float):
        expired = [key for key, (_, reset) in self._windows.items() if reset < now]
        for key in expired:
            del self._windows[key]

    def check(self, identifier: str) -> RateLimitResult:
        with self._lock:
            now = self._clock()
            self._cleanup(now)

            window = self._windows.get(identifier)
            if window is None or now > window[1]:
                window = [0, now + self.window_seconds]
                self._windows[identifier] = window

            count, reset_time = window
            if count >= self.max_requests:
                return RateLimitResult(False, self.max_requests, 0, reset_time)

            window[0] = count + 1
            return RateLimitResult(
                True, self.max_requests, self.max_requests - window[0], reset_time
            )


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "anonymous"
