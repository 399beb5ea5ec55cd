"""In-memory token-bucket rate limiting keyed by client IP."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
import math
import threading
import time

from fastapi import Request
from fastapi import Response
from fastapi import status

from dataset_generator.core.config import get_settings
from dataset_generator.core.errors import APIError

WINDOW_SECONDS = 60.0
IDLE_EXPIRY_SECONDS = 3600.0
UNKNOWN_CLIENT = "unknown"


@dataclass
class _Bucket:
    tokens: float
    refilled_at: float


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    retry_after_seconds: int
    reset_at: int

    def headers(self) -> dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset_at),
        }


class RateLimiter:
    """Allow ``limit`` requests per minute per key, refilled continuously."""

    def __init__(self, *, limit: int, clock: Callable[[], float] = time.monotonic, wall_clock: Callable[[], float] = time.time) -> None:
        if limit <= 0:
            raise ValueError("limit must be positive")
        self._limit = limit
        self._rate = limit / WINDOW_SECONDS
        self._clock = clock
        self._wall_clock = wall_clock
        self._buckets: dict[str, _Bucket] = {}
        self._lock = threading.Lock()

    @property
    def limit(self) -> int:
        return self._limit

    def check(self, key: str) -> RateLimitDecision:
        """Consume one token for ``key`` when available."""
        with self._lock:
            now = self._clock()
            self._expire_idle(now)
            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = self._buckets[key] = _Bucket(tokens=float(self._limit), refilled_at=now)
            else:
                bucket.tokens = min(self._limit, bucket.tokens + (now - bucket.refilled_at) * self._rate)
                bucket.refilled_at = now

            allowed = bucket.tokens >= 1
            if allowed:
                bucket.tokens -= 1
            retry_after = 0 if allowed else math.ceil((1 - bucket.tokens) / self._rate)
            return RateLimitDecision(
                allowed=allowed,
                limit=self._limit,
                remaining=int(bucket.tokens),
                retry_after_seconds=retry_after,
                reset_at=int(self._wall_clock() + WINDOW_SECONDS),
            )

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()

    def _expire_idle(self, now: float) -> None:
        stale = [key for key, bucket in self._buckets.items() if now - bucket.refilled_at > IDLE_EXPIRY_SECONDS]
        for key in stale:
            del self._buckets[key]


def client_ip(request: Request) -> str:
    """Resolve the caller address from proxy headers, then the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    for header in ("x-real-ip", "cf-connecting-ip"):
        value = request.headers.get(header)
        if value:
            return value.strip()
    if request.client is not None and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT


@lru_cache(maxsize=1)
def get_rate_limiter() -> RateLimiter:
    return RateLimiter(limit=get_settings().rate_limit_per_minute)


def enforce_rate_limit(request: Request, response: Response) -> None:
    """Route dependency: reject with 429 once the caller's bucket is empty."""
    decision = get_rate_limiter().check(client_ip(request))
    if not decision.allowed:
        raise APIError(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            code="rate_limited",
            message="Too many requests. Please try again later.",
            headers={"Retry-After": str(decision.retry_after_seconds), **decision.headers()},
        )
    response.headers.update(decision.headers())
