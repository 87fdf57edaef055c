"""Contract between rate limiters and the store holding attempt counters."""

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field


class CounterSnapshot(BaseModel):
    """Counter state for one key, as reported by an adapter.

    Attributes
    ----------
    success : bool
        Whether the key is currently within its limit.
    attempt : int
        Attempts counted in the current window (or while blocked).
    reset_time : timedelta | None
        Time until the window resets or the block is lifted, if known.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    success: bool
    attempt: int = Field(..., ge=0)
    reset_time: timedelta | None = None


class BaseRateLimiterAdapter(ABC):
    """Authoritative per-key attempt counter.

    Implementations must make ``update_state`` an atomic read-modify-write for
    a given key; rate limiters hold no state and take no locks of their own.
    """

    @abstractmethod
    async def get_state(self, key: str) -> CounterSnapshot | None:
        """Read the counter without consuming an attempt.

        Returns None when nothing is tracked for the key (or it expired).
        """

    @abstractmethod
    async def update_state(self, key: str, limit: int) -> CounterSnapshot:
        """Count one attempt against ``limit`` and return the resulting state."""

    @abstractmethod
    async def reset(self, key: str) -> None:
        """Forget everything tracked for the key."""
