"""Classification of counter snapshots into rate limiter states."""

from datetime import timedelta
from typing import Annotated, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field

from .contracts import CounterSnapshot


class _State(BaseModel):
    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)


class ExpiredState(_State):
    """Nothing is tracked for the key."""

    type: Literal["expired"] = "expired"


class AllowedState(_State):
    type: Literal["allowed"] = "allowed"
    used_attempts: int
    remaining_attempts: int
    limit: int
    reset_after: timedelta | None = None


class BlockedState(_State):
    type: Literal["blocked"] = "blocked"
    limit: int
    total_attempts: int
    exceed_attempts: int
    retry_after: timedelta | None = None


RateLimiterState = Annotated[
    ExpiredState | AllowedState | BlockedState, Field(discriminator="type")
]


def to_rate_limiter_state(
    snapshot: CounterSnapshot | None, limit: int
) -> ExpiredState | AllowedState | BlockedState:
    """Map an adapter snapshot to a rate limiter state.

    Parameters
    ----------
    snapshot : CounterSnapshot | None
        The adapter's view of the key, or None if nothing is tracked.
    limit : int
        The limit configured on the rate limiter.

    Returns
    -------
    ExpiredState | AllowedState | BlockedState
        Expired for a missing snapshot, Allowed for a successful one and
        Blocked otherwise. A missing reset time is kept as None.
    """
    if snapshot is None:
        return ExpiredState()

    if snapshot.success:
        return AllowedState(
            used_attempts=snapshot.attempt,
            remaining_attempts=limit - snapshot.attempt,
            limit=limit,
            reset_after=snapshot.reset_time,
        )

    return BlockedState(
        limit=limit,
        total_attempts=snapshot.attempt,
        exceed_attempts=snapshot.attempt - limit,
        retry_after=snapshot.reset_time,
    )
