"""
Per-client rate limiting.

Every route under the API prefix runs enforce_rate_limit as a dependency.
Clients are keyed by remote address; each key may make RATE_LIMIT_REQUESTS
requests in any rolling RATE_LIMIT_WINDOW_SECONDS window (default 100 per
15 minutes).

On limit exceeded, raises RateLimited → 429 with a Retry-After header.

Counters live in process memory and reset on restart. Behind several
workers each process enforces its own allowance.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Request

from projectify.core.config import Settings
from projectify.core.errors import RateLimited

logger = logging.getLogger(__name__)

_RATE_LIMITED_MESSAGE = "Too many requests from this IP, please try again later."


class SlidingWindowRateLimiter:
    """Counts request timestamps per key over a rolling window."""

    def __init__(
        self,
        *,
        max_requests: int,
        window_seconds: int,
        enabled: bool = True,
        max_keys: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._clock = clock
        self.enabled = enabled
        self.max_requests = max(1, max_requests)
        self.window_seconds = max(1, window_seconds)
        self._max_keys = max(128, max_keys)
        self._events: dict[str, deque[float]] = {}

    def allow(self, key: str) -> tuple[bool, int]:
        """Record one request for `key`. Returns (allowed, retry_after_seconds)."""
        if not self.enabled:
            return True, 0

        now = self._clock()
        cutoff = now - self.window_seconds
        samples = self._events.setdefault(key, deque())
        while samples and samples[0] <= cutoff:
            samples.popleft()

        if len(samples) >= self.max_requests:
            retry_after = max(1, int(samples[0] + self.window_seconds - now))
            return False, retry_after

        samples.append(now)
        self._trim(cutoff)
        return True, 0

    def _trim(self, cutoff: float) -> None:
        """Forget idle clients once the table grows past max_keys."""
        if len(self._events) <= self._max_keys:
            return
        idle = [key for key, samples in self._events.items() if not samples or samples[-1] <= cutoff]
        for key in idle:
            del self._events[key]


def build_rate_limiter(settings: Settings) -> SlidingWindowRateLimiter:
    return SlidingWindowRateLimiter(
        enabled=settings.RATE_LIMIT_ENABLED,
        max_requests=settings.RATE_LIMIT_REQUESTS,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    )


def client_key(request: Request) -> str:
    host = request.client.host if request.client else ""
    return f"ip:{host or 'unknown'}"


def get_rate_limiter(request: Request) -> SlidingWindowRateLimiter:
    """FastAPI dependency — the process-wide limiter built in the lifespan."""
    return request.app.state.rate_limiter


async def enforce_rate_limit(
    request: Request,
    limiter: Annotated[SlidingWindowRateLimiter, Depends(get_rate_limiter)],
) -> None:
    key = client_key(request)
    allowed, retry_after = limiter.allow(key)
    if not allowed:
        logger.warning(
            "Rate limit exceeded: client=%s path=%s retry_after=%ss",
            key,
            request.url.path,
            retry_after,
        )
        raise RateLimited(_RATE_LIMITED_MESSAGE, retry_after=retry_after)
