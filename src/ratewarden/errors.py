from datetime import timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .rate_limiter.state import BlockedState


class RateLimiterError(RuntimeError):
    """Base class for errors raised by ratewarden itself."""


class BlockedRateLimiterError(RateLimiterError):
    """Raised when a rate limiter denies an attempt.

    This is the only error a rate limiter raises on its own. Errors raised by
    the protected operation or by the adapter are never wrapped, so catching
    this class is enough to tell "denied" apart from "failed".

    Attributes
    ----------
    key : str
        The display key of the rate limiter that denied the attempt.
    limit : int
        The configured number of allowed attempts.
    total_attempts : int
        Attempts counted by the adapter, including the denied ones.
    exceed_attempts : int
        Attempts counted beyond the limit.
    retry_after : timedelta | None
        Time until attempts are allowed again, when the adapter reports it.
    state : BlockedState | None
        The state the decision was made on.
    """

    def __init__(
        self,
        message: str,
        *,
        key: str,
        limit: int,
        total_attempts: int,
        exceed_attempts: int,
        retry_after: timedelta | None = None,
        state: "BlockedState | None" = None,
    ):
        super().__init__(message)
        self.key = key
        self.limit = limit
        self.total_attempts = total_attempts
        self.exceed_attempts = exceed_attempts
        self.retry_after = retry_after
        self.state = state

    @classmethod
    def from_state(cls, state: "BlockedState", *, key: str) -> "BlockedRateLimiterError":
        message = (
            f"Rate limiter '{key}' is blocked: {state.total_attempts} attempts "
            f"exceed the limit of {state.limit}"
        )
        if state.retry_after is not None:
            message += f", retry after {state.retry_after.total_seconds():g}s"

        return cls(
            message,
            key=key,
            limit=state.limit,
            total_attempts=state.total_attempts,
            exceed_attempts=state.exceed_attempts,
            retry_after=state.retry_after,
            state=state,
        )


class SerdeError(RuntimeError):
    """Base class for codec registry errors.

    Must not derive from ``ValueError``: transformers are registered while
    pydantic validates a provider, and pydantic re-raises ``ValueError`` as
    ``ValidationError``.
    """


class SerdeRegistrationError(SerdeError):
    """Raised when a transformer is registered under a key already in use."""


class SerdeLookupError(SerdeError):
    """Raised when a serialized payload names no registered transformer."""


class DefaultAdapterNotDefinedError(RuntimeError):
    """Raised when a provider factory is used without an adapter name and has no default."""

    def __init__(self, factory_name: str):
        super().__init__(f"{factory_name} has no default adapter defined")
        self.factory_name = factory_name


class UnregisteredAdapterError(RuntimeError):
    """Raised when a provider factory is asked for an adapter it does not know."""

    def __init__(self, adapter_name: str):
        super().__init__(f"Adapter '{adapter_name}' is not registered")
        self.adapter_name = adapter_name
