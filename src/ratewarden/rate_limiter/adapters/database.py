"""Rate limiter adapter built on top of any ``BaseRateLimiterStorageAdapter``."""

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any, override

import logfire_api as logfire

from ...utils import utc_now
from ..backoff import BackoffPolicy, exponential_backoff
from ..contracts import BaseRateLimiterAdapter, CounterSnapshot
from ..policies import BaseRateLimiterPolicy, FixedWindowLimiter
from .storage import (
    AllowedRecordState,
    BaseRateLimiterStorageAdapter,
    BlockedRecordState,
    RateLimiterRecord,
    RecordState,
)


class DatabaseRateLimiterAdapter(BaseRateLimiterAdapter):
    """Counts attempts with a window policy and stores them in a storage adapter.

    A key is allowed until the policy counts more attempts than the limit,
    then blocked for as long as the backoff policy says. Attempts made while
    blocked are counted too and lengthen the block. Each update runs inside a
    single storage transaction.

    Parameters
    ----------
    storage : BaseRateLimiterStorageAdapter
        Where records are persisted.
    policy : BaseRateLimiterPolicy
        How attempts are counted. Defaults to a one second fixed window.
    backoff : BackoffPolicy
        How long a key stays blocked, from the number of exceeding attempts.
    clock : Callable[[], datetime]
        Time source returning timezone-aware datetimes.
    """

    def __init__(
        self,
        storage: BaseRateLimiterStorageAdapter,
        *,
        policy: BaseRateLimiterPolicy[Any] | None = None,
        backoff: BackoffPolicy | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._storage = storage
        self._policy = policy if policy is not None else FixedWindowLimiter()
        self._backoff = backoff if backoff is not None else exponential_backoff()
        self._clock = clock

    def _block_ends_at(self, state: BlockedRecordState) -> datetime:
        exceed_attempts = max(state.attempt - state.limit, 1)
        return state.started_at + self._backoff(exceed_attempts)

    def _load(self, record: RateLimiterRecord | None, now: datetime) -> RecordState | None:
        if record is None or record.is_expired(now):
            return None

        state = record.state
        if isinstance(state, BlockedRecordState) and self._block_ends_at(state) <= now:
            return None
        return state

    def _track(self, state: RecordState | None, now: datetime) -> RecordState:
        if state is None:
            state = AllowedRecordState(metrics=self._policy.initial_metrics(now))

        if isinstance(state, BlockedRecordState):
            return state.model_copy(update={"attempt": state.attempt + 1})

        return AllowedRecordState(
            metrics=self._policy.update_metrics(state.metrics, now)
        )

    def _evaluate(self, state: RecordState, limit: int, now: datetime) -> RecordState:
        if isinstance(state, BlockedRecordState):
            return state
        if not self._policy.should_block(state.metrics, limit, now):
            return state

        return BlockedRecordState(
            started_at=now,
            attempt=self._policy.get_attempts(state.metrics, now),
            limit=limit,
        )

    def _expiration(self, state: RecordState, now: datetime) -> datetime:
        if isinstance(state, BlockedRecordState):
            return self._block_ends_at(state)
        return self._policy.get_expiration(state.metrics, now)

    def _to_snapshot(self, state: RecordState, now: datetime) -> CounterSnapshot:
        reset_time = max(self._expiration(state, now) - now, timedelta(0))

        if isinstance(state, BlockedRecordState):
            return CounterSnapshot(
                success=False, attempt=state.attempt, reset_time=reset_time
            )

        return CounterSnapshot(
            success=True,
            attempt=self._policy.get_attempts(state.metrics, now),
            reset_time=reset_time,
        )

    @override
    async def get_state(self, key: str) -> CounterSnapshot | None:
        now = self._clock()
        state = self._load(await self._storage.find(key), now)
        if state is None:
            return None
        return self._to_snapshot(state, now)

    @override
    async def update_state(self, key: str, limit: int) -> CounterSnapshot:
        now = self._clock()
        async with self._storage.transaction() as trx:
            current = self._load(await trx.find(key), now)
            state = self._evaluate(self._track(current, now), limit, now)
            await trx.upsert(key, state, self._expiration(state, now))

        if isinstance(state, BlockedRecordState) and not isinstance(
            current, BlockedRecordState
        ):
            logfire.info("rate_limiter.adapter.blocked", key=key, limit=limit)

        return self._to_snapshot(state, now)

    @override
    async def reset(self, key: str) -> None:
        await self._storage.remove(key)
