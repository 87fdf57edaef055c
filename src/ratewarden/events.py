"""Lifecycle events emitted by rate limiters and the in-process bus that delivers them."""

import inspect
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, ClassVar, Protocol, runtime_checkable

import logfire_api as logfire
from pydantic import BaseModel, ConfigDict

from .tasks import BackgroundTasks

if TYPE_CHECKING:
    from .rate_limiter.state import RateLimiterState


@runtime_checkable
class RateLimiterView(Protocol):
    """Read-only part of a rate limiter exposed to listeners."""

    @property
    def key(self) -> str: ...

    @property
    def limit(self) -> int: ...

    async def get_state(self) -> "RateLimiterState": ...


class RateLimiterEvent(BaseModel):
    model_config: ClassVar[ConfigDict] = ConfigDict(
        frozen=True, arbitrary_types_allowed=True
    )

    rate_limiter: RateLimiterView


class AllowedRateLimiterEvent(RateLimiterEvent):
    """Dispatched when an attempt is allowed to proceed."""


class BlockedRateLimiterEvent(RateLimiterEvent):
    """Dispatched when an attempt is blocked."""


class ResetedRateLimiterEvent(RateLimiterEvent):
    """Dispatched when a rate limiter is reset."""


class TrackedFailureRateLimiterEvent(RateLimiterEvent):
    """Dispatched when a failure matched the error policy and was counted."""

    error: BaseException


class UntrackedFailureRateLimiterEvent(RateLimiterEvent):
    """Dispatched when a failure did not match the error policy."""

    error: BaseException


type Listener[E: RateLimiterEvent] = Callable[[E], None | Awaitable[None]]


class EventBus:
    """Delivers events to listeners registered per event class.

    Listeners can be plain functions or coroutine functions. Dispatching never
    raises: a failing sync listener is logged and skipped, and coroutines
    returned by async listeners run as background tasks.
    """

    def __init__(self, background_tasks: BackgroundTasks | None = None):
        self._listeners: dict[type[RateLimiterEvent], list[Listener[Any]]] = (
            defaultdict(list)
        )
        self._background_tasks = background_tasks or BackgroundTasks()

    @property
    def background_tasks(self) -> BackgroundTasks:
        return self._background_tasks

    def add_listener[E: RateLimiterEvent](
        self, event_type: type[E], listener: Listener[E]
    ) -> None:
        if listener not in self._listeners[event_type]:
            self._listeners[event_type].append(listener)

    def remove_listener[E: RateLimiterEvent](
        self, event_type: type[E], listener: Listener[E]
    ) -> None:
        listeners = self._listeners.get(event_type)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def listen_once[E: RateLimiterEvent](
        self, event_type: type[E], listener: Listener[E]
    ) -> None:
        """Register a listener that is removed after its first event."""

        def once(event: E) -> None | Awaitable[None]:
            self.remove_listener(event_type, once)
            return listener(event)

        self.add_listener(event_type, once)

    def subscribe[E: RateLimiterEvent](
        self, event_type: type[E], listener: Listener[E]
    ) -> Callable[[], None]:
        """Register a listener and return a function that unregisters it."""
        self.add_listener(event_type, listener)

        def unsubscribe() -> None:
            self.remove_listener(event_type, listener)

        return unsubscribe

    def dispatch(self, event: RateLimiterEvent) -> None:
        for listener in list(self._listeners.get(type(event), ())):
            try:
                result = listener(event)
            except Exception as err:
                logfire.error(
                    "event_bus.listener.failed",
                    event_type=type(event).__name__,
                    error=repr(err),
                )
                continue

            if inspect.iscoroutine(result):
                self._background_tasks.submit(
                    result, name=f"event_bus.{type(event).__name__}"
                )
