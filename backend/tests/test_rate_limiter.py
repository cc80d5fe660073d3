import pytest

from services.rate_limiter import FixedWindowRateLimiter
from utils.errors import RateLimitExceededError

class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

@pytest.fixture
def clock():
    return FakeClock()

@pytest.fixture
def limiter(clock):
    return FixedWindowRateLimiter(max_requests=3, window_seconds=60, clock=clock)

def test_allows_requests_up_to_the_limit(limiter):
    assert [limiter.check("user-1") for _ in range(3)] == [2, 1, 0]

def test_blocks_the_request_over_the_limit(limiter, clock):
    for _ in range(3):
        limiter.check("user-1")
    clock.now += 15
    with pytest.raises(RateLimitExceededError) as exc_info:
        limiter.check("user-1")
    assert exc_info.value.status_code == 429
    assert exc_info.value.details == {"retry_after_seconds": 45}

def test_windows_are_per_user(limiter):
    for _ in range(3):
        limiter.check("user-1")
    assert limiter.check("user-2") == 2

def test_window_expires(limiter, clock):
    for _ in range(3):
        limiter.check("user-1")
    clock.now += 60
    assert limiter.check("user-1") == 2

def test_reset(limiter):
    for _ in range(3):
        limiter.check("user-1")
        limiter.check("user-2")
    limiter.reset("user-1")
    assert limiter.check("user-1") == 2
    with pytest.raises(RateLimitExceededError):
        limiter.check("user-2")
    limiter.reset()
    assert limiter.check("user-2") == 2

def test_expired_windows_are_dropped(limiter, clock):
    for user_id in ("user-1", "user-2", "user-3"):
        limiter.check(user_id)
    clock.now += 60
    limiter.check("user-4")
    assert set(limiter._windows) == {"user-4"}
