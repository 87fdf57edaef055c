from datetime import timedelta

from ratewarden import (
    BlockedRateLimiterError,
    BlockedState,
    RateLimiterError,
    SerdeError,
    SerdeLookupError,
    SerdeRegistrationError,
)


def test_blocked_error_from_state():
    state = BlockedState(
        limit=5, total_attempts=6, exceed_attempts=1, retry_after=timedelta(minutes=5)
    )

    error = BlockedRateLimiterError.from_state(state, key="login")

    assert str(error) == (
        "Rate limiter 'login' is blocked: 6 attempts exceed the limit of 5, "
        "retry after 300s"
    )
    assert error.key == "login"
    assert error.limit == 5
    assert error.total_attempts == 6
    assert error.exceed_attempts == 1
    assert error.retry_after == timedelta(minutes=5)
    assert error.state is state


def test_blocked_error_without_retry_after():
    state = BlockedState(limit=5, total_attempts=7, exceed_attempts=2)

    error = BlockedRateLimiterError.from_state(state, key="login")

    assert str(error) == "Rate limiter 'login' is blocked: 7 attempts exceed the limit of 5"
    assert error.retry_after is None


def test_error_hierarchy():
    assert issubclass(BlockedRateLimiterError, RateLimiterError)
    assert issubclass(RateLimiterError, RuntimeError)
    assert issubclass(SerdeRegistrationError, SerdeError)
    assert issubclass(SerdeLookupError, SerdeError)
    assert issubclass(SerdeError, RuntimeError)
    assert not issubclass(SerdeError, ValueError)
