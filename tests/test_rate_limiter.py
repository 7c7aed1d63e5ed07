"""Tests for the fixed-window rate limiter."""

import pytest

from src.config import Settings
from src.errors import RateLimitError
from src.services.rate_limiter import FixedWindowRateLimiter, RateLimiters


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(clock):
    return FixedWindowRateLimiter("test", limit=3, window_seconds=60, message="Slow down", clock=clock)


def test_allows_up_to_limit(limiter):
    for _ in range(3):
        limiter.consume("1.2.3.4")

    with pytest.raises(RateLimitError) as exc_info:
        limiter.consume("1.2.3.4")

    assert exc_info.value.message == "Slow down"
    assert exc_info.value.retry_after == 60
    assert exc_info.value.headers == {"Retry-After": "60"}


def test_keys_are_independent(limiter):
    for _ in range(3):
        limiter.consume("1.2.3.4")

    limiter.consume("5.6.7.8")


def test_window_resets_after_expiry(limiter, clock):
    for _ in range(3):
        limiter.consume("user-1")

    clock.now += 59
    with pytest.raises(RateLimitError) as exc_info:
        limiter.check("user-1")
    assert exc_info.value.retry_after == 1

    clock.now += 1
    limiter.consume("user-1")

def test_expired_keys_are_swept(limiter, clock):
    for i in range(50):
        limiter.consume(f"10.0.0.{i}")

    clock.now += 30
    limiter.consume("late")
    assert len(limiter._windows) == 51

    clock.now += 30
    limiter.consume("fresh")
    assert set(limiter._windows) == {"late", "fresh"}


def test_check_does_not_count(limiter):
    for _ in range(10):
        limiter.check("user-1")

    limiter.consume("user-1")


def test_hit_counts_without_checking(limiter):
    for _ in range(5):
        limiter.hit("user-1")

    with pytest.raises(RateLimitError):
        limiter.check("user-1")


def test_reset(limiter):
    for _ in range(3):
        limiter.consume("a")
        limiter.consume("b")

    limiter.reset("a")
    limiter.consume("a")
    with pytest.raises(RateLimitError):
        limiter.consume("b")

    limiter.reset()
    limiter.consume("b")


def test_limiters_from_settings():
    limiters = RateLimiters.from_settings(Settings(auth_rate_limit=7, database_url=""))

    assert limiters.get("auth").limit == 7
    assert limiters.get("auth").window_seconds == 15 * 60
    assert limiters.get("general").limit == 100
    assert limiters.get("notification").limit == 10
    assert limiters.get("broadcast").window_seconds == 60 * 60
    assert limiters.get("create_resource").limit == 30
