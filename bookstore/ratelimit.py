import logging
import time
from collections import deque

from fastapi import Request, status
from fastapi.responses import JSONResponse

from .errors import BookstoreError

logger = logging.getLogger(__name__)


class SlidingWindowLimiter:
    def __init__(self, max_requests: int, window_seconds: int):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.buckets: dict[str, deque[float]] = {}
        self._last_sweep = time.time()

    def allow(self, key: str) -> bool:
        now = time.time()
        window_start = now - self.window_seconds
        if now - self._last_sweep >= self.window_seconds:
            self.sweep(window_start)
            self._last_sweep = now
        bucket = self.buckets.setdefault(key, deque())
        while bucket and bucket[0] < window_start:
            bucket.popleft()
        if len(bucket) >= self.max_requests:
            return False
        bucket.append(now)
        return True

    def sweep(self, window_start: float) -> None:
        """Drop clients with no requests inside the window."""
        stale = [key for key, bucket in self.buckets.items() if not bucket or bucket[-1] < window_start]
        for key in stale:
            del self.buckets[key]


def client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def rate_limit_middleware(limiter: SlidingWindowLimiter):
    async def middleware(request: Request, call_next):
        key = client_key(request)
        if not limiter.allow(key):
            logger.info("request.rate_limited", extra={"client": key, "path": request.url.path})
            error = BookstoreError("Rate limit exceeded")
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content=error.to_payload(status.HTTP_429_TOO_MANY_REQUESTS),
            )
        return await call_next(request)

    return middleware
