"""Rate limiter tracking for async Python applications.

This package decides whether protected operations may run, records usage in an
external counter store, emits lifecycle events and lets rate limiters be
serialized and reconnected to their provider across process boundaries.
"""

from .config import RATEWARDEN_SETTINGS, RateWardenSettings
from .error_policy import ErrorPolicy, evaluate_error_policy, match_all_errors
from .errors import (
    BlockedRateLimiterError,
    DefaultAdapterNotDefinedError,
    RateLimiterError,
    SerdeError,
    SerdeLookupError,
    SerdeRegistrationError,
    UnregisteredAdapterError,
)
from .events import (
    AllowedRateLimiterEvent,
    BlockedRateLimiterEvent,
    EventBus,
    RateLimiterEvent,
    ResetedRateLimiterEvent,
    TrackedFailureRateLimiterEvent,
    UntrackedFailureRateLimiterEvent,
)
from .namespace import Key, Namespace
from .rate_limiter import (
    AllowedState,
    BaseRateLimiterAdapter,
    BlockedState,
    CounterSnapshot,
    DatabaseRateLimiterAdapter,
    ExpiredState,
    FixedWindowLimiter,
    MemoryRateLimiterStorageAdapter,
    RateLimiter,
    RateLimiterProvider,
    RateLimiterProviderFactory,
    RateLimiterSerdeTransformer,
    RateLimiterState,
    SlidingWindowLimiter,
)
from .serde import CORE, USER, Serde, SerdeTransformer
from .tasks import BackgroundTasks
from .utils import NOT_PROVIDED, NotProvided

__all__ = [
    # Rate limiters
    "RateLimiter",
    "RateLimiterProvider",
    "RateLimiterProviderFactory",
    "RateLimiterSerdeTransformer",
    "RateLimiterState",
    "AllowedState",
    "BlockedState",
    "ExpiredState",
    # Adapters
    "BaseRateLimiterAdapter",
    "CounterSnapshot",
    "DatabaseRateLimiterAdapter",
    "MemoryRateLimiterStorageAdapter",
    "FixedWindowLimiter",
    "SlidingWindowLimiter",
    # Events
    "EventBus",
    "RateLimiterEvent",
    "AllowedRateLimiterEvent",
    "BlockedRateLimiterEvent",
    "ResetedRateLimiterEvent",
    "TrackedFailureRateLimiterEvent",
    "UntrackedFailureRateLimiterEvent",
    # Error handling
    "ErrorPolicy",
    "evaluate_error_policy",
    "match_all_errors",
    "RateLimiterError",
    "BlockedRateLimiterError",
    "SerdeError",
    "SerdeLookupError",
    "SerdeRegistrationError",
    "DefaultAdapterNotDefinedError",
    "UnregisteredAdapterError",
    # Serialization
    "Serde",
    "SerdeTransformer",
    "CORE",
    "USER",
    # Utilities
    "BackgroundTasks",
    "Key",
    "Namespace",
    "NotProvided",
    "NOT_PROVIDED",
    "RATEWARDEN_SETTINGS",
    "RateWardenSettings",
]
