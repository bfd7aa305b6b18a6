# tests/unit/core/test_rate_limit.py
import pytest
from starlette.requests import Request

from app.core.exceptions import RateLimitExceededError
from app.core.rate_limit import (
    RateLimiter,
    check_rate_limit,
    enforce_shipping_rate_limit,
    get_shipping_rate_limiter,
)
from app.core.utils import get_client_identifier


class FakeClock:
    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def make_request(headers=None, client=("10.0.0.1", 5123)) -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/calculate-shipping",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


"""
1. Fixed window counting
"""

def test_allows_up_to_limit_then_rejects():
    limiter = RateLimiter(max_requests=30, window_seconds=60, cleanup_probability=0, clock=FakeClock())

    results = [limiter.check("1.2.3.4") for _ in range(30)]
    assert all(results)

    # 31st request in the same window
    assert limiter.check("1.2.3.4") is False
    assert limiter.check("1.2.3.4") is False


def test_new_window_after_expiry_is_accepted():
    clock = FakeClock()
    limiter = RateLimiter(max_requests=30, window_seconds=60, cleanup_probability=0, clock=clock)

    for _ in range(31):
        limiter.check("1.2.3.4")
    assert limiter.check("1.2.3.4") is False

    clock.advance(60)
    assert limiter.check("1.2.3.4") is True
    # Counter restarted at 1
    assert limiter._records["1.2.3.4"].request_count == 1


def test_clients_are_counted_independently():
    limiter = RateLimiter(max_requests=2, window_seconds=60, cleanup_probability=0, clock=FakeClock())

    assert limiter.check("a")
    assert limiter.check("a")
    assert not limiter.check("a")
    assert limiter.check("b")


def test_retry_after_reports_remaining_window():
    clock = FakeClock()
    limiter = RateLimiter(max_requests=1, window_seconds=60, cleanup_probability=0, clock=clock)

    limiter.check("a")
    clock.advance(15.5)
    assert limiter.retry_after("a") == 45
    assert limiter.retry_after("never-seen") == 0


"""
2. Cleanup of expired entries
"""

def test_cleanup_removes_only_expired_entries():
    clock = FakeClock()
    limiter = RateLimiter(max_requests=5, window_seconds=60, cleanup_probability=0, clock=clock)

    limiter.check("old")
    clock.advance(30)
    limiter.check("recent")
    clock.advance(31)

    assert limiter.cleanup() == 1
    assert "old" not in limiter._records
    assert "recent" in limiter._records


def test_probabilistic_cleanup_runs_during_check():
    clock = FakeClock()
    limiter = RateLimiter(max_requests=5, window_seconds=60, cleanup_probability=1.0, clock=clock)

    limiter.check("old")
    clock.advance(61)
    limiter.check("new")

    assert len(limiter) == 1
    assert "new" in limiter._records


def test_cleanup_skipped_when_random_draw_misses(mocker):
    clock = FakeClock()
    limiter = RateLimiter(max_requests=5, window_seconds=60, cleanup_probability=0.1, clock=clock)
    mocker.patch("app.core.rate_limit.random.random", return_value=0.5)

    limiter.check("old")
    clock.advance(61)
    limiter.check("new")

    assert len(limiter) == 2


"""
3. Client identification and FastAPI dependency
"""

def test_client_identifier_prefers_first_forwarded_address():
    request = make_request(headers={"X-Forwarded-For": "200.1.2.3, 10.0.0.2"})
    assert get_client_identifier(request) == "200.1.2.3"


def test_client_identifier_uses_connection_host():
    assert get_client_identifier(make_request()) == "10.0.0.1"


def test_client_identifier_unknown_without_client():
    assert get_client_identifier(make_request(client=None)) == "unknown"


def test_shared_limiter_uses_settings(set_settings):
    set_settings(RATE_LIMIT_MAX_REQUESTS=3, RATE_LIMIT_WINDOW_SECONDS=10, RATE_LIMIT_CLEANUP_PROBABILITY=0)

    limiter = get_shipping_rate_limiter()
    assert limiter.max_requests == 3
    assert limiter.window_seconds == 10
    assert get_shipping_rate_limiter() is limiter

    assert check_rate_limit("x") and check_rate_limit("x") and check_rate_limit("x")
    assert check_rate_limit("x") is False


@pytest.mark.asyncio
async def test_enforce_dependency_raises_when_exhausted(set_settings):
    set_settings(RATE_LIMIT_MAX_REQUESTS=1, RATE_LIMIT_CLEANUP_PROBABILITY=0)
    request = make_request(headers={"X-Forwarded-For": "177.10.10.10"})

    assert await enforce_shipping_rate_limit(request) == "177.10.10.10"

    with pytest.raises(RateLimitExceededError) as exc_info:
        await enforce_shipping_rate_limit(request)

    assert exc_info.value.retry_after > 0
