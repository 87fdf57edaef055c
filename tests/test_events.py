import pytest
from conftest import EventRecorder
from pydantic import ValidationError
from ratewarden import (
    AllowedRateLimiterEvent,
    BackgroundTasks,
    BlockedRateLimiterEvent,
    EventBus,
    RateLimiterEvent,
    TrackedFailureRateLimiterEvent,
)


@pytest.fixture
def rate_limiter(provider):
    return provider.create("a", limit=1)


def test_dispatch_reaches_listeners_of_exact_type(rate_limiter, recorder):
    event_bus = EventBus()
    event_bus.add_listener(AllowedRateLimiterEvent, recorder)
    parent = EventRecorder()
    event_bus.add_listener(RateLimiterEvent, parent)

    event_bus.dispatch(AllowedRateLimiterEvent(rate_limiter=rate_limiter))
    event_bus.dispatch(BlockedRateLimiterEvent(rate_limiter=rate_limiter))

    assert [type(event) for event in recorder.events] == [AllowedRateLimiterEvent]
    assert parent.events == []


def test_listener_is_registered_once(rate_limiter, recorder):
    event_bus = EventBus()
    event_bus.add_listener(AllowedRateLimiterEvent, recorder)
    event_bus.add_listener(AllowedRateLimiterEvent, recorder)

    event_bus.dispatch(AllowedRateLimiterEvent(rate_limiter=rate_limiter))

    assert len(recorder.events) == 1


def test_removing_unknown_listener_is_a_noop(recorder):
    EventBus().remove_listener(AllowedRateLimiterEvent, recorder)


def test_failing_listener_does_not_stop_dispatch(rate_limiter, recorder):
    event_bus = EventBus()

    def broken(event: AllowedRateLimiterEvent) -> None:
        raise RuntimeError("listener bug")

    event_bus.add_listener(AllowedRateLimiterEvent, broken)
    event_bus.add_listener(AllowedRateLimiterEvent, recorder)

    event_bus.dispatch(AllowedRateLimiterEvent(rate_limiter=rate_limiter))

    assert len(recorder.events) == 1


async def test_async_listeners_run_in_background(rate_limiter):
    background_tasks = BackgroundTasks()
    event_bus = EventBus(background_tasks)
    received = []

    async def listener(event: AllowedRateLimiterEvent) -> None:
        received.append(event)

    async def broken(event: AllowedRateLimiterEvent) -> None:
        raise RuntimeError("listener bug")

    event_bus.add_listener(AllowedRateLimiterEvent, listener)
    event_bus.add_listener(AllowedRateLimiterEvent, broken)
    event_bus.dispatch(AllowedRateLimiterEvent(rate_limiter=rate_limiter))

    assert received == []
    assert background_tasks.pending == 2

    await background_tasks.wait()
    assert len(received) == 1


def test_failure_events_carry_the_error(rate_limiter):
    error = ValueError("boom")
    event = TrackedFailureRateLimiterEvent(rate_limiter=rate_limiter, error=error)

    assert event.error is error
    assert event.rate_limiter is rate_limiter


def test_events_require_a_rate_limiter_view():
    with pytest.raises(ValidationError):
        _ = AllowedRateLimiterEvent(rate_limiter=object())  # type: ignore[arg-type]
