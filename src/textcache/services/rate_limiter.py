"""In-process token bucket rate limiter keyed by client identity."""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from textcache.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class TokenBucket:
    """Admission state for one client identity."""

    tokens: float
    last_refill: float


class TokenBucketRateLimiter:
    """Per-identity token buckets with idle expiry.

    Each identity gets a bucket holding up to ``burst`` tokens that refills
    at ``rate`` tokens per second. Admitting a request consumes one token.
    Buckets idle for longer than ``ttl`` seconds are evicted lazily on
    access and by ``sweep()``, which also runs opportunistically at most
    once per ``ttl`` interval.

    All bucket creation and token updates happen under a single lock, so
    concurrent requests from one identity never double-spend a token.

    Example:
        ```python
        limiter = TokenBucketRateLimiter(rate=2, burst=2)
        limiter.admit("10.0.0.1")  # True
        ```
    """

    def __init__(
        self,
        rate: float,
        burst: int,
        ttl: float = 86400.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the rate limiter.

        Args:
            rate: Refill rate in tokens per second.
            burst: Bucket capacity.
            ttl: Idle seconds after which an identity's bucket is evicted.
            clock: Monotonic time source (injectable for tests).
        """
        if rate <= 0:
            raise ValueError("rate must be positive")
        if burst < 1:
            raise ValueError("burst must be at least 1")
        if ttl <= 0:
            raise ValueError("ttl must be positive")

        self._rate = rate
        self._burst = burst
        self._ttl = ttl
        self._clock = clock
        self._buckets: dict[str, TokenBucket] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def admit(self, identity: str) -> bool:
        """Try to consume one token for ``identity``.

        Never blocks. An empty identity is a bucket like any other.

        Args:
            identity: Client identity string

        Returns:
            True if admitted, False if the bucket is exhausted
        """
        with self._lock:
            now = self._clock()
            if now - self._last_sweep >= self._ttl:
                self._sweep_locked(now)

            bucket = self._buckets.get(identity)
            if bucket is None or now - bucket.last_refill > self._ttl:
                bucket = TokenBucket(tokens=float(self._burst), last_refill=now)
                self._buckets[identity] = bucket
            else:
                elapsed = max(0.0, now - bucket.last_refill)
                bucket.tokens = min(float(self._burst), bucket.tokens + elapsed * self._rate)
                bucket.last_refill = now

            if bucket.tokens >= 1.0:
                bucket.tokens -= 1.0
                return True

        logger.info("Rate limit exceeded", identity=identity)
        return False

    def sweep(self) -> int:
        """Evict every bucket idle for longer than the TTL.

        Returns:
            Number of buckets evicted
        """
        with self._lock:
            return self._sweep_locked(self._clock())

    def _sweep_locked(self, now: float) -> int:
        expired = [
            identity
            for identity, bucket in self._buckets.items()
            if now - bucket.last_refill > self._ttl
        ]
        for identity in expired:
            del self._buckets[identity]
        self._last_sweep = now
        if expired:
            logger.debug("Evicted idle rate limit buckets", count=len(expired))
        return len(expired)

    @property
    def bucket_count(self) -> int:
        """Number of identities currently tracked."""
        with self._lock:
            return len(self._buckets)
