"""Fixed-window throttling of unlock attempts.

Counters live outside the process (document store or Redis) so that every
server instance shares them, and each check-and-record is one atomic
operation against the backing store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Final

import redis.asyncio as aioredis

from trove.db.time import utcnow
from trove.models.access import RATE_LIMITS_COLLECTION, RateLimitRecord
from trove.services.store import DocumentStore

DEFAULT_MAX_ATTEMPTS: Final[int] = 5
DEFAULT_WINDOW: Final[timedelta] = timedelta(seconds=60)


@dataclass(frozen=True)
class RateLimitDecision:
    """Whether an attempt may proceed and, if not, how long to wait."""

    allowed: bool
    retry_after: timedelta | None = None


def rate_limit_key(identity_id: str | None, ip_hash: str) -> str:
    """Return the counter key: the identity when authenticated, else the address digest."""
    if identity_id:
        return f"identity:{identity_id}"
    return f"ip:{ip_hash}"


def evaluate_window(
    record: RateLimitRecord | None,
    key: str,
    max_attempts: int,
    window: timedelta,
    now: datetime,
) -> tuple[RateLimitRecord | None, RateLimitDecision]:
    """Apply one attempt to a counter record.

    Returns:
        The record to persist (None when it must stay unchanged) and the decision.
    """
    if record is None or now - record.window_start >= window:
        return (
            RateLimitRecord(key=key, attempts=1, window_start=now),
            RateLimitDecision(allowed=True),
        )
    if record.attempts >= max_attempts:
        retry_after = window - (now - record.window_start)
        return None, RateLimitDecision(allowed=False, retry_after=retry_after)
    updated = record.model_copy(update={"attempts": record.attempts + 1})
    return updated, RateLimitDecision(allowed=True)


class RateLimitBackend(ABC):
    """Storage strategy for attempt counters."""

    @abstractmethod
    async def hit(
        self, key: str, max_attempts: int, window: timedelta, now: datetime
    ) -> RateLimitDecision:
        """Atomically record one attempt for `key` and return the decision."""


class StoreRateLimitBackend(RateLimitBackend):
    """Counters persisted as `RateLimitRecord` documents."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def hit(
        self, key: str, max_attempts: int, window: timedelta, now: datetime
    ) -> RateLimitDecision:
        def _mutate(
            current: dict[str, Any] | None,
        ) -> tuple[dict[str, Any] | None, RateLimitDecision]:
            record = RateLimitRecord.model_validate(current) if current else None
            updated, decision = evaluate_window(record, key, max_attempts, window, now)
            return (updated.model_dump(mode="json") if updated else None), decision

        return await self._store.transact(RATE_LIMITS_COLLECTION, key, _mutate)


# KEYS[1] = counter key; ARGV[1] = max attempts; ARGV[2] = window in milliseconds.
# Returns {allowed, retry_after_ms}.
_FIXED_WINDOW_SCRIPT: Final[str] = """
local current = redis.call('GET', KEYS[1])
if not current then
  redis.call('SET', KEYS[1], 1, 'PX', ARGV[2])
  return {1, 0}
end
if tonumber(current) >= tonumber(ARGV[1]) then
  local ttl = redis.call('PTTL', KEYS[1])
  if ttl < 0 then ttl = tonumber(ARGV[2]) end
  return {0, ttl}
end
redis.call('INCR', KEYS[1])
return {1, 0}
"""


class RedisRateLimitBackend(RateLimitBackend):
    """Counters kept in Redis; key expiry marks the end of a window."""

    def __init__(self, client: aioredis.Redis, *, prefix: str = "ratelimit:") -> None:
        self._client = client
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str) -> RedisRateLimitBackend:
        return cls(aioredis.from_url(url))

    async def hit(
        self, key: str, max_attempts: int, window: timedelta, now: datetime
    ) -> RateLimitDecision:
        window_ms = max(1, int(window.total_seconds() * 1000))
        allowed, retry_after_ms = await self._client.eval(
            _FIXED_WINDOW_SCRIPT, 1, f"{self._prefix}{key}", max_attempts, window_ms
        )
        if int(allowed):
            return RateLimitDecision(allowed=True)
        return RateLimitDecision(
            allowed=False,
            retry_after=timedelta(milliseconds=int(retry_after_ms)),
        )

    async def close(self) -> None:
        await self._client.aclose()


class RateLimiter:
    """Fixed-window counter keyed by identity or address digest."""

    def __init__(
        self,
        backend: RateLimitBackend,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        window: timedelta = DEFAULT_WINDOW,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._backend = backend
        self.max_attempts = max_attempts
        self.window = window
        self._clock = clock

    async def check_and_record(
        self,
        key: str,
        max_attempts: int | None = None,
        window: timedelta | None = None,
    ) -> RateLimitDecision:
        """Record an attempt for `key`.

        Args:
            key: Counter key from `rate_limit_key`.
            max_attempts: Attempts allowed per window (defaults to the limiter's policy).
            window: Window length (defaults to the limiter's policy).

        Returns:
            The decision; denied decisions carry the time left in the window.
        """
        return await self._backend.hit(
            key,
            max_attempts if max_attempts is not None else self.max_attempts,
            window if window is not None else self.window,
            self._clock(),
        )
