"""Counter adapters.

``DatabaseRateLimiterAdapter`` implements the counting algorithm once on top
of any ``BaseRateLimiterStorageAdapter``; ``MemoryRateLimiterStorageAdapter``
is the in-process storage.
"""

from .database import DatabaseRateLimiterAdapter
from .memory import MemoryRateLimiterStorageAdapter
from .storage import (
    AllowedRecordState,
    BaseRateLimiterStorageAdapter,
    BaseRateLimiterStorageTransaction,
    BlockedRecordState,
    RateLimiterRecord,
)

__all__ = [
    "AllowedRecordState",
    "BaseRateLimiterStorageAdapter",
    "BaseRateLimiterStorageTransaction",
    "BlockedRecordState",
    "DatabaseRateLimiterAdapter",
    "MemoryRateLimiterStorageAdapter",
    "RateLimiterRecord",
]
