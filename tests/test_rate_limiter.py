"""
Tests for the token bucket rate limiter.
"""

import threading

import pytest

from textcache.services import TokenBucketRateLimiter


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


def test_burst_then_reject_then_refill(clock):
    """rate=2/s, burst=2: two admitted, third rejected, one more after 0.5s."""
    limiter = TokenBucketRateLimiter(rate=2, burst=2, clock=clock)

    assert limiter.admit("10.0.0.1") is True
    assert limiter.admit("10.0.0.1") is True
    assert limiter.admit("10.0.0.1") is False

    clock.advance(0.5)
    assert limiter.admit("10.0.0.1") is True
    assert limiter.admit("10.0.0.1") is False


def test_refill_is_capped_at_burst(clock):
    """Long idle periods never accumulate more than burst tokens."""
    limiter = TokenBucketRateLimiter(rate=2, burst=2, ttl=3600, clock=clock)
    limiter.admit("a")

    clock.advance(60)
    assert limiter.admit("a") is True
    assert limiter.admit("a") is True
    assert limiter.admit("a") is False


def test_identities_have_independent_buckets(clock):
    """Exhausting one identity does not affect another."""
    limiter = TokenBucketRateLimiter(rate=1, burst=1, clock=clock)

    assert limiter.admit("a") is True
    assert limiter.admit("a") is False
    assert limiter.admit("b") is True


def test_empty_identity_is_its_own_bucket(clock):
    """Malformed identity extraction degrades to a shared bucket, not a crash."""
    limiter = TokenBucketRateLimiter(rate=1, burst=1, clock=clock)

    assert limiter.admit("") is True
    assert limiter.admit("") is False
    assert limiter.admit("10.0.0.1") is True


def test_sweep_evicts_idle_buckets(clock):
    """Buckets idle past the TTL are removed by sweep."""
    limiter = TokenBucketRateLimiter(rate=1, burst=1, ttl=10, clock=clock)
    limiter.admit("old")
    clock.advance(5)
    limiter.admit("recent")

    clock.advance(6)
    assert limiter.sweep() == 1
    assert limiter.bucket_count == 1


def test_expired_bucket_is_reset_on_access(clock):
    """An identity returning after the TTL gets a fresh, full bucket."""
    limiter = TokenBucketRateLimiter(rate=0.001, burst=2, ttl=10, clock=clock)
    limiter.admit("a")
    limiter.admit("a")
    assert limiter.admit("a") is False

    clock.advance(11)
    assert limiter.admit("a") is True
    assert limiter.admit("a") is True


def test_admission_sweeps_opportunistically(clock):
    """Admission purges idle identities once per TTL without an explicit sweep."""
    limiter = TokenBucketRateLimiter(rate=1, burst=1, ttl=10, clock=clock)
    for i in range(5):
        limiter.admit(f"client-{i}")
    assert limiter.bucket_count == 5

    clock.advance(11)
    limiter.admit("newcomer")
    assert limiter.bucket_count == 1


def test_concurrent_admission_never_overspends():
    """Threads racing on one identity consume exactly burst tokens."""
    limiter = TokenBucketRateLimiter(rate=0.0001, burst=50, clock=lambda: 0.0)
    admitted = []
    lock = threading.Lock()

    def worker():
        for _ in range(20):
            if limiter.admit("shared"):
                with lock:
                    admitted.append(1)

    threads = [threading.Thread(target=worker) for _ in range(10)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(admitted) == 50


@pytest.mark.parametrize(
    "kwargs",
    [
        {"rate": 0, "burst": 1},
        {"rate": 1, "burst": 0},
        {"rate": 1, "burst": 1, "ttl": 0},
    ],
)
def test_invalid_configuration_rejected(kwargs):
    """Non-positive rate, burst or TTL raise ValueError."""
    with pytest.raises(ValueError):
        TokenBucketRateLimiter(**kwargs)
