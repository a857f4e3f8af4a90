"""
Project Library Backend - Rate Limiting
========================================

What:  Per-client request limiting behind a small `RateLimiter` interface,
       with an in-memory fixed-window implementation and the Starlette
       middleware that applies it.
How:   The limiter instance is created by create_app() (or injected by the
       caller) and handed to the middleware; nothing here is module-global.

Algorithm: Fixed Window Counter
    1. Each key maps to (count, reset_at)
    2. A hit after reset_at starts a new window: (1, now + window)
    3. A hit inside the window increments count; once count would exceed
       the limit the hit is refused with retry_after = ceil(reset_at - now)
    4. Every `sweep_interval` seconds, entries whose window has ended are
       dropped so idle clients do not accumulate

Client Key:
    X-Forwarded-For (first hop) → X-Real-IP → peer address → "unknown"

Production Upgrade Path:
    The in-memory store is per process. For several workers, implement
    RateLimiter on top of a shared store (e.g. Redis INCR + EXPIRE) and pass
    it to create_app().
"""

import logging
import math
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, MutableMapping, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from project_library.exceptions import RateLimitExceededError
from project_library.middleware.request_id import request_id_var
from project_library.schemas.common import error_content

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    retry_after: int = 0


class RateLimiter(ABC):
    """Decides whether one more request for `key` is allowed right now."""

    @abstractmethod
    def hit(self, key: str) -> RateLimitDecision:
        ...


class InMemoryRateLimiter(RateLimiter):
    """
    Fixed-window counter kept in a mapping.

    Args:
        limit: Requests allowed per window
        window_seconds: Window length
        sweep_interval: Seconds between sweeps of expired entries
        store: Mapping of key → (count, reset_at); injectable for tests
        clock: Monotonic time source; injectable for tests
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        sweep_interval: float = 60.0,
        store: Optional[MutableMapping[str, Tuple[int, float]]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.limit = limit
        self.window_seconds = window_seconds
        self.sweep_interval = sweep_interval
        self.store: MutableMapping[str, Tuple[int, float]] = store if store is not None else {}
        self._clock = clock
        self._next_sweep = clock() + sweep_interval

    def hit(self, key: str) -> RateLimitDecision:
        now = self._clock()
        if now >= self._next_sweep:
            self.sweep(now)

        count, reset_at = self.store.get(key, (0, 0.0))
        if now >= reset_at:
            count, reset_at = 0, now + self.window_seconds

        if count >= self.limit:
            retry_after = max(1, math.ceil(reset_at - now))
            return RateLimitDecision(allowed=False, remaining=0, retry_after=retry_after)

        count += 1
        self.store[key] = (count, reset_at)
        return RateLimitDecision(allowed=True, remaining=self.limit - count)

    def sweep(self, now: Optional[float] = None) -> int:
        """Drop entries whose window has ended. Returns how many were removed."""
        now = self._clock() if now is None else now
        expired = [key for key, (_, reset_at) in self.store.items() if reset_at <= now]
        for key in expired:
            del self.store[key]
        self._next_sweep = now + self.sweep_interval
        if expired:
            logger.debug("Swept %d expired rate limit entries", len(expired))
        return len(expired)


def client_key(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("X-Real-IP")
    if real_ip and real_ip.strip():
        return real_ip.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Applies a RateLimiter to every request except health checks and docs.

    Response on rate limit:
        HTTP 429 with Retry-After, body in the standard error envelope
        (code RATE_LIMITED, details.retry_after).
    """

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}

    def __init__(self, app: ASGIApp, limiter: RateLimiter):
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        key = client_key(request)
        decision = self.limiter.hit(key)
        if not decision.allowed:
            exc = RateLimitExceededError(retry_after=decision.retry_after)
            logger.warning("Rate limit exceeded for %s (retry in %ds)", key, exc.retry_after)
            return JSONResponse(
                status_code=exc.status_code,
                content=error_content(
                    code=exc.code,
                    message=exc.message,
                    request_id=request_id_var.get(""),
                    details=exc.context,
                ),
                headers={"Retry-After": str(exc.retry_after)},
            )

        return await call_next(request)
