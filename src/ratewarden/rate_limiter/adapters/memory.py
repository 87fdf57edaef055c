"""In-process storage adapter.

Notes:
- Per-process only: several workers each keep their own counters.
- Transactions are serialized with an ``asyncio.Lock``.
- Expired records are evicted on the next read or write, using the storage's
  own clock. Give it the same clock as the ``DatabaseRateLimiterAdapter``.
"""

import asyncio
import heapq
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from datetime import datetime
from typing import override

from ...utils import utc_now
from .storage import (
    BaseRateLimiterStorageAdapter,
    BaseRateLimiterStorageTransaction,
    RateLimiterRecord,
    RecordState,
)


class _MemoryTransaction(BaseRateLimiterStorageTransaction):
    def __init__(self, storage: "MemoryRateLimiterStorageAdapter"):
        self._storage = storage

    @override
    async def find(self, key: str) -> RateLimiterRecord | None:
        return self._storage._get(key)

    @override
    async def upsert(
        self, key: str, state: RecordState, expiration: datetime | None
    ) -> None:
        self._storage._put(key, RateLimiterRecord(state=state, expiration=expiration))


class MemoryRateLimiterStorageAdapter(BaseRateLimiterStorageAdapter):
    """Keeps records in a dict.

    Parameters
    ----------
    records : dict[str, RateLimiterRecord] | None
        Initial records, mostly useful in tests.
    clock : Callable[[], datetime]
        Time source deciding when records are evicted.
    """

    def __init__(
        self,
        records: dict[str, RateLimiterRecord] | None = None,
        *,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._records: dict[str, RateLimiterRecord] = {}
        # Min-heap of (expiration, key); entries whose record changed are skipped
        self._expirations: list[tuple[datetime, str]] = []
        self._clock = clock
        self._lock = asyncio.Lock()
        for key, record in (records or {}).items():
            self._put(key, record)

    def _evict_expired(self) -> None:
        now = self._clock()
        while self._expirations and self._expirations[0][0] <= now:
            expiration, key = heapq.heappop(self._expirations)
            record = self._records.get(key)
            if record is not None and record.expiration == expiration:
                del self._records[key]

    def _get(self, key: str) -> RateLimiterRecord | None:
        self._evict_expired()
        return self._records.get(key)

    def _put(self, key: str, record: RateLimiterRecord) -> None:
        self._evict_expired()
        self._records[key] = record
        if record.expiration is not None:
            heapq.heappush(self._expirations, (record.expiration, key))

    @override
    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[BaseRateLimiterStorageTransaction]:
        async with self._lock:
            yield _MemoryTransaction(self)

    @override
    async def find(self, key: str) -> RateLimiterRecord | None:
        return self._get(key)

    @override
    async def remove(self, key: str) -> None:
        _ = self._records.pop(key, None)

    def clear(self) -> None:
        self._records.clear()
        self._expirations.clear()

    def __len__(self) -> int:
        self._evict_expired()
        return len(self._records)
