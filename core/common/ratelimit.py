import threading
import time
from dataclasses import dataclass
from functools import lru_cache

import redis
from django.conf import settings


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: float  # epoch seconds when the current window ends

    @property
    def retry_after_seconds(self) -> int:
        return max(1, int(round(self.reset_at - time.time())))


def rate_limit_key(identifier: str, action: str) -> str:
    return f"rl:{action}:{identifier}"


class InMemoryRateLimiter:
    """
    Fixed window counter held in process memory.
    Not shared between workers; swap for RedisRateLimiter when that matters.
    """

    def __init__(self, clock=time.time):
        self._clock = clock
        self._lock = threading.Lock()
        self._windows: dict[str, tuple[int, float]] = {}

    def check(self, key: str, limit: int, window_seconds: int) -> RateLimitResult:
        now = self._clock()
        with self._lock:
            # drop finished windows so the map doesn't grow forever
            for k in [k for k, (_, reset_at) in self._windows.items() if reset_at <= now]:
                del self._windows[k]

            current = self._windows.get(key)
            if current is None:
                reset_at = now + window_seconds
                self._windows[key] = (1, reset_at)
                return RateLimitResult(allowed=True, remaining=limit - 1, reset_at=reset_at)

            count, reset_at = current
            if count >= limit:
                return RateLimitResult(allowed=False, remaining=0, reset_at=reset_at)

            count += 1
            self._windows[key] = (count, reset_at)
            return RateLimitResult(allowed=True, remaining=limit - count, reset_at=reset_at)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


class RedisRateLimiter:
    """
    Fixed window rate limit using INCR + EXPIRE.
    Works across processes sharing the same Redis.
    """

    def __init__(self, client=None):
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = redis.Redis.from_url(
                getattr(settings, "REDIS_URL", "redis://127.0.0.1:6379/0"), decode_responses=True
            )
        return self._client

    def check(self, key: str, limit: int, window_seconds: int) -> RateLimitResult:
        r = self.client
        pipe = r.pipeline()
        pipe.incr(key, 1)
        pipe.ttl(key)
        count, ttl = pipe.execute()

        if ttl is None or int(ttl) < 0:
            r.expire(key, window_seconds)
            ttl = window_seconds

        reset_at = time.time() + int(ttl)
        count = int(count)
        if count > int(limit):
            return RateLimitResult(allowed=False, remaining=0, reset_at=reset_at)
        return RateLimitResult(allowed=True, remaining=int(limit) - count, reset_at=reset_at)


@lru_cache(maxsize=1)
def get_rate_limiter():
    backend = getattr(settings, "RATE_LIMIT_BACKEND", "memory")
    if backend == "redis":
        return RedisRateLimiter()
    return InMemoryRateLimiter()


def limit_for(action: str) -> tuple[int, int]:
    return tuple(settings.LEADS_RATE_LIMITS[action])
