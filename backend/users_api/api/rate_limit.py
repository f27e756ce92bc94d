"""Rate Limiting — sliding-window request counter keyed by client address.

Invariants:
    - A client may make at most max_requests requests in any window_seconds span
    - Only paths under path_prefix are counted; health probes are never limited
    - Rejected requests are not recorded (they do not extend the lockout)
    - State is per-process memory, touched only from the event loop

Design Decisions:
    - Sliding window of timestamps over token bucket: matches the "N requests per
      15 minutes" contract exactly, at the cost of one deque per active client
    - Limiter object separate from the middleware so the app (and tests) hold a
      handle to reset or inspect it; Starlette builds middleware lazily
    - Idle clients pruned on access to bound memory
    - 429 rendered by error_handlers.error_response: raised exceptions from
      BaseHTTPMiddleware bypass the app's exception handlers
"""

import logging
import math
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from users_api.api.error_handlers import error_response
from users_api.core.errors import RateLimitExceededError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    """Result of a single hit against the limiter."""
    allowed: bool
    limit: int
    remaining: int
    retry_after_seconds: int = 0


class SlidingWindowRateLimiter:
    """Counts requests per key inside a moving time window."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}

    def hit(self, key: str) -> RateLimitDecision:
        """Record a request for ``key`` if the budget allows it."""
        now = self._clock()
        self._prune(now)
        window = self._hits.setdefault(key, deque())

        if len(window) >= self.max_requests:
            retry_after = window[0] + self.window_seconds - now
            return RateLimitDecision(
                allowed=False,
                limit=self.max_requests,
                remaining=0,
                retry_after_seconds=max(1, math.ceil(retry_after)),
            )

        window.append(now)
        return RateLimitDecision(
            allowed=True,
            limit=self.max_requests,
            remaining=self.max_requests - len(window),
        )

    def reset(self) -> None:
        self._hits.clear()

    def _prune(self, now: float) -> None:
        cutoff = now - self.window_seconds
        for key in list(self._hits):
            window = self._hits[key]
            while window and window[0] <= cutoff:
                window.popleft()
            if not window:
                del self._hits[key]


def client_address(request: Request) -> str:
    """Default key: the peer address as seen by the ASGI server."""
    if request.client is None:
        return "unknown"
    return request.client.host


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests over the limiter's budget with 429."""

    def __init__(
        self,
        app,
        limiter: SlidingWindowRateLimiter,
        path_prefix: str = "/api",
        key_func: Callable[[Request], str] = client_address,
    ):
        super().__init__(app)
        self.limiter = limiter
        self.path_prefix = path_prefix
        self.key_func = key_func

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        key = self.key_func(request)
        decision = self.limiter.hit(key)
        if not decision.allowed:
            error = RateLimitExceededError(decision.retry_after_seconds)
            logger.info(f"Rate limit exceeded for {key}", extra={"client": key})
            return error_response(
                request, error,
                headers={
                    "Retry-After": str(decision.retry_after_seconds),
                    "X-RateLimit-Limit": str(decision.limit),
                    "X-RateLimit-Remaining": "0",
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(decision.limit)
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        return response
