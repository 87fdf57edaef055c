"""Window policies counting attempts for ``DatabaseRateLimiterAdapter``."""

import math
from abc import ABC, abstractmethod
from datetime import UTC, datetime, timedelta
from typing import ClassVar, override

from pydantic import BaseModel, ConfigDict, Field


class BaseRateLimiterPolicy[M: BaseModel](ABC):
    """Counts attempts inside a time window.

    Metrics are immutable pydantic models: ``update_metrics`` returns a new
    instance instead of mutating the given one.
    """

    @abstractmethod
    def initial_metrics(self, now: datetime) -> M: ...

    @abstractmethod
    def update_metrics(self, metrics: M, now: datetime) -> M:
        """Record one attempt."""

    @abstractmethod
    def get_attempts(self, metrics: M, now: datetime) -> int:
        """Attempts counted at ``now``."""

    @abstractmethod
    def get_expiration(self, metrics: M, now: datetime) -> datetime:
        """When the metrics no longer matter and can be dropped."""

    def should_block(self, metrics: M, limit: int, now: datetime) -> bool:
        return self.get_attempts(metrics, now) > limit


class FixedWindowMetrics(BaseModel):
    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    attempts: int = Field(default=0, ge=0)
    window_start: datetime


class FixedWindowLimiter(BaseRateLimiterPolicy[FixedWindowMetrics]):
    """Counts attempts in consecutive windows of fixed length.

    Cheap to store, but a burst at the boundary of two windows can let up to
    twice the limit through in a short time.
    """

    def __init__(self, window: timedelta = timedelta(seconds=1)):
        if window <= timedelta(0):
            raise ValueError("Window must be a positive duration")
        self.window = window

    def _is_current(self, metrics: FixedWindowMetrics, now: datetime) -> bool:
        return now < metrics.window_start + self.window

    @override
    def initial_metrics(self, now: datetime) -> FixedWindowMetrics:
        return FixedWindowMetrics(attempts=0, window_start=now)

    @override
    def update_metrics(
        self, metrics: FixedWindowMetrics, now: datetime
    ) -> FixedWindowMetrics:
        if not self._is_current(metrics, now):
            return FixedWindowMetrics(attempts=1, window_start=now)
        return FixedWindowMetrics(
            attempts=metrics.attempts + 1, window_start=metrics.window_start
        )

    @override
    def get_attempts(self, metrics: FixedWindowMetrics, now: datetime) -> int:
        return metrics.attempts if self._is_current(metrics, now) else 0

    @override
    def get_expiration(self, metrics: FixedWindowMetrics, now: datetime) -> datetime:
        return metrics.window_start + self.window


class SlidingWindowMetrics(BaseModel):
    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    # Attempts per window, keyed by the window start as a unix timestamp in ms
    windows: dict[int, int] = Field(default_factory=dict)


class SlidingWindowLimiter(BaseRateLimiterPolicy[SlidingWindowMetrics]):
    """Weighs the previous fixed window by how much of it still overlaps.

    Smooths out the boundary bursts of ``FixedWindowLimiter`` while storing at
    most two counters per key.
    """

    def __init__(
        self,
        window: timedelta = timedelta(seconds=1),
        margin: timedelta | None = None,
    ):
        if window <= timedelta(0):
            raise ValueError("Window must be a positive duration")
        self.window = window
        self.margin = margin if margin is not None else window / 4

    @property
    def _window_ms(self) -> int:
        return int(self.window.total_seconds() * 1000)

    def _current_window(self, now: datetime) -> int:
        now_ms = int(now.timestamp() * 1000)
        return now_ms // self._window_ms * self._window_ms

    def _previous_window(self, now: datetime) -> int:
        return self._current_window(now) - self._window_ms

    def _current_attempts(self, metrics: SlidingWindowMetrics, now: datetime) -> int:
        return metrics.windows.get(self._current_window(now), 0)

    def _previous_attempts(self, metrics: SlidingWindowMetrics, now: datetime) -> int:
        previous = metrics.windows.get(self._previous_window(now), 0)
        elapsed_ms = int(now.timestamp() * 1000) - self._current_window(now)
        overlap = 1 - elapsed_ms / self._window_ms
        return math.floor(overlap * previous)

    @override
    def initial_metrics(self, now: datetime) -> SlidingWindowMetrics:
        return SlidingWindowMetrics(windows={self._current_window(now): 0})

    @override
    def update_metrics(
        self, metrics: SlidingWindowMetrics, now: datetime
    ) -> SlidingWindowMetrics:
        previous_window = self._previous_window(now)
        current_window = self._current_window(now)
        windows = {
            start: attempts
            for start, attempts in metrics.windows.items()
            if start >= previous_window
        }
        windows[current_window] = windows.get(current_window, 0) + 1
        return SlidingWindowMetrics(windows=windows)

    @override
    def get_attempts(self, metrics: SlidingWindowMetrics, now: datetime) -> int:
        return self._current_attempts(metrics, now) + self._previous_attempts(
            metrics, now
        )

    @override
    def get_expiration(
        self, metrics: SlidingWindowMetrics, now: datetime
    ) -> datetime:
        window_start = datetime.fromtimestamp(self._current_window(now) / 1000, UTC)
        return window_start + self.window * 2 + self.margin
