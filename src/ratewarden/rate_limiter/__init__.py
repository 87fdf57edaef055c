"""Rate limiters deciding whether an operation may run, backed by an external counter store.

Provides RateLimiterProvider (factory and shared configuration),
RateLimiterProviderFactory (providers for named adapters), RateLimiter
(per-key handle), RateLimiterSerdeTransformer (serialization) and the
adapter contract.
"""

from .adapters import DatabaseRateLimiterAdapter, MemoryRateLimiterStorageAdapter
from .backoff import (
    BackoffPolicy,
    constant_backoff,
    exponential_backoff,
    linear_backoff,
)
from .contracts import BaseRateLimiterAdapter, CounterSnapshot
from .policies import BaseRateLimiterPolicy, FixedWindowLimiter, SlidingWindowLimiter
from .provider import RateLimiterProvider
from .provider_factory import RateLimiterProviderFactory
from .rate_limiter import RateLimiter, RateLimiterSettings, SerializedRateLimiter
from .state import (
    AllowedState,
    BlockedState,
    ExpiredState,
    RateLimiterState,
    to_rate_limiter_state,
)
from .transformer import RateLimiterSerdeTransformer

__all__ = [
    # Handles
    "RateLimiter",
    "RateLimiterProvider",
    "RateLimiterProviderFactory",
    "RateLimiterSettings",
    "RateLimiterSerdeTransformer",
    "SerializedRateLimiter",
    # States
    "AllowedState",
    "BlockedState",
    "ExpiredState",
    "RateLimiterState",
    "to_rate_limiter_state",
    # Adapters
    "BaseRateLimiterAdapter",
    "CounterSnapshot",
    "DatabaseRateLimiterAdapter",
    "MemoryRateLimiterStorageAdapter",
    # Policies
    "BaseRateLimiterPolicy",
    "FixedWindowLimiter",
    "SlidingWindowLimiter",
    "BackoffPolicy",
    "constant_backoff",
    "linear_backoff",
    "exponential_backoff",
]
