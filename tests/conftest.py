from datetime import UTC, datetime, timedelta
from typing import override

import pytest
from ratewarden import (
    BaseRateLimiterAdapter,
    CounterSnapshot,
    EventBus,
    RateLimiterEvent,
    RateLimiterProvider,
)


class SpyAdapter(BaseRateLimiterAdapter):
    """Adapter returning canned snapshots and recording every call in order."""

    def __init__(
        self,
        state: CounterSnapshot | None = None,
        updated_state: CounterSnapshot | None = None,
    ):
        self.state = state
        self.updated_state = updated_state or CounterSnapshot(success=True, attempt=1)
        self.calls: list[tuple] = []

    @override
    async def get_state(self, key: str) -> CounterSnapshot | None:
        self.calls.append(("get_state", key))
        return self.state

    @override
    async def update_state(self, key: str, limit: int) -> CounterSnapshot:
        self.calls.append(("update_state", key, limit))
        return self.updated_state

    @override
    async def reset(self, key: str) -> None:
        self.calls.append(("reset", key))

    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)


class OtherSpyAdapter(SpyAdapter):
    """Same behavior under a different class name, i.e. another adapter kind."""


class EventRecorder:
    def __init__(self):
        self.events: list[RateLimiterEvent] = []

    def __call__(self, event: RateLimiterEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: type[RateLimiterEvent]) -> list[RateLimiterEvent]:
        return [event for event in self.events if type(event) is event_type]


class FakeClock:
    def __init__(self, now: datetime | None = None):
        self.now = now or datetime(2024, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def adapter() -> SpyAdapter:
    return SpyAdapter()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest.fixture
def provider(adapter: SpyAdapter, event_bus: EventBus) -> RateLimiterProvider:
    return RateLimiterProvider(
        adapter=adapter, event_bus=event_bus, enable_async_tracking=False
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
