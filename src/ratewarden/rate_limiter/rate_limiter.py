"""Per-key rate limiter handle.

A ``RateLimiter`` decides whether an operation may run, records usage through
its adapter and reports what happened through the event bus. It owns no
mutable state: counting and the allow/block decision live in the adapter.
"""

import inspect
from typing import ClassVar, Literal

import logfire_api as logfire
from pydantic import BaseModel, ConfigDict, PositiveInt

from ..error_policy import ErrorPolicy, evaluate_error_policy
from ..errors import BlockedRateLimiterError
from ..events import (
    AllowedRateLimiterEvent,
    BlockedRateLimiterEvent,
    EventBus,
    ResetedRateLimiterEvent,
    TrackedFailureRateLimiterEvent,
    UntrackedFailureRateLimiterEvent,
)
from ..namespace import Key, Namespace
from ..tasks import BackgroundTasks
from ..utils import Lazyable, resolve_lazyable
from .contracts import BaseRateLimiterAdapter
from .state import BlockedState, RateLimiterState, to_rate_limiter_state

SERIALIZATION_VERSION = "1"


class SerializedRateLimiter(BaseModel):
    """The part of a rate limiter that survives serialization."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    version: Literal["1"] = SERIALIZATION_VERSION
    key: str
    limit: PositiveInt


class RateLimiterSettings(BaseModel):
    model_config: ClassVar[ConfigDict] = ConfigDict(
        frozen=True, arbitrary_types_allowed=True
    )

    key: Key
    limit: PositiveInt
    adapter: BaseRateLimiterAdapter
    event_bus: EventBus
    error_policy: ErrorPolicy
    only_error: bool
    enable_async_tracking: bool
    background_tasks: BackgroundTasks
    namespace: Namespace
    serde_transformer_name: str = ""


class RateLimiter:
    """Rate limiter bound to one key.

    Instances are created through ``RateLimiterProvider.create`` or rebuilt by
    the provider's serde transformer; they should not be built by hand.

    Two tracking modes are supported:

    - always-track (``only_error=False``): every call consumes an attempt
      before the operation runs.
    - track-on-failure (``only_error=True``): the state is only read before
      the operation runs, and an attempt is consumed when the operation fails
      with an error matching the error policy.
    """

    def __init__(self, settings: RateLimiterSettings):
        self._settings = settings

    @property
    def settings(self) -> RateLimiterSettings:
        return self._settings

    @property
    def key(self) -> str:
        return self._settings.key.get()

    @property
    def full_key(self) -> str:
        return str(self._settings.key)

    @property
    def limit(self) -> int:
        return self._settings.limit

    @property
    def namespace(self) -> Namespace:
        return self._settings.namespace

    @property
    def adapter(self) -> BaseRateLimiterAdapter:
        return self._settings.adapter

    @property
    def serde_transformer_name(self) -> str:
        return self._settings.serde_transformer_name

    def serialize(self) -> SerializedRateLimiter:
        return SerializedRateLimiter(key=self.key, limit=self.limit)

    async def get_state(self) -> RateLimiterState:
        snapshot = await self._settings.adapter.get_state(self.full_key)
        return to_rate_limiter_state(snapshot, self.limit)

    @logfire.instrument("rate_limiter.run_or_fail", extract_args=False)
    async def run_or_fail[T](self, fn: Lazyable[T]) -> T:
        """Run ``fn`` if the rate limiter allows it.

        Parameters
        ----------
        fn : Lazyable[T]
            The protected operation: a zero-argument callable (sync or async)
            or an awaitable.

        Returns
        -------
        T
            Whatever the operation returns.

        Raises
        ------
        BlockedRateLimiterError
            If the limit is exceeded. The operation is not run.
        """
        try:
            if self._settings.only_error:
                return await self._run_tracking_errors(fn)
            return await self._run_tracking_calls(fn)
        finally:
            # A coroutine object that was never awaited, e.g. when blocked
            if inspect.iscoroutine(fn):
                fn.close()

    async def _run_tracking_calls[T](self, fn: Lazyable[T]) -> T:
        snapshot = await self._settings.adapter.update_state(
            self.full_key, self.limit
        )
        self._raise_if_blocked(to_rate_limiter_state(snapshot, self.limit))

        self._allow()
        return await resolve_lazyable(fn)

    async def _run_tracking_errors[T](self, fn: Lazyable[T]) -> T:
        snapshot = await self._settings.adapter.get_state(self.full_key)
        self._raise_if_blocked(to_rate_limiter_state(snapshot, self.limit))

        self._allow()
        try:
            return await resolve_lazyable(fn)
        except Exception as error:
            if not await evaluate_error_policy(self._settings.error_policy, error):
                logfire.debug(
                    "rate_limiter.untracked_failure",
                    key=self.full_key,
                    error=repr(error),
                )
                self._settings.event_bus.dispatch(
                    UntrackedFailureRateLimiterEvent(rate_limiter=self, error=error)
                )
                raise

            logfire.debug(
                "rate_limiter.tracked_failure", key=self.full_key, error=repr(error)
            )
            self._settings.event_bus.dispatch(
                TrackedFailureRateLimiterEvent(rate_limiter=self, error=error)
            )
            await self._track_failure()
            raise

    async def _track_failure(self) -> None:
        update = self._settings.adapter.update_state(self.full_key, self.limit)
        if self._settings.enable_async_tracking:
            # Ordering with later calls on the same key is not guaranteed.
            self._settings.background_tasks.submit(
                update, name=f"rate_limiter.track_failure:{self.full_key}"
            )
            return

        _ = await update

    def _raise_if_blocked(self, state: RateLimiterState) -> None:
        if not isinstance(state, BlockedState):
            return

        logfire.info(
            "rate_limiter.blocked",
            key=self.full_key,
            limit=state.limit,
            total_attempts=state.total_attempts,
        )
        self._settings.event_bus.dispatch(BlockedRateLimiterEvent(rate_limiter=self))
        raise BlockedRateLimiterError.from_state(state, key=self.key)

    def _allow(self) -> None:
        logfire.debug("rate_limiter.allowed", key=self.full_key)
        self._settings.event_bus.dispatch(AllowedRateLimiterEvent(rate_limiter=self))

    async def reset(self) -> None:
        logfire.info("rate_limiter.reset", key=self.full_key)
        self._settings.event_bus.dispatch(ResetedRateLimiterEvent(rate_limiter=self))
        await self._settings.adapter.reset(self.full_key)

    def __repr__(self) -> str:
        return f"RateLimiter(key={self.full_key!r}, limit={self.limit})"
