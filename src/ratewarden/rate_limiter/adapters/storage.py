"""CRUD-style storage contract backing ``DatabaseRateLimiterAdapter``.

Storage adapters only persist records; the counting algorithm lives in
``DatabaseRateLimiterAdapter`` so it is written once for every backend.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Annotated, Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field


class AllowedRecordState(BaseModel):
    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    type: Literal["allowed"] = "allowed"
    metrics: Any


class BlockedRecordState(BaseModel):
    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    type: Literal["blocked"] = "blocked"
    started_at: datetime
    attempt: int
    limit: int


RecordState = Annotated[
    AllowedRecordState | BlockedRecordState, Field(discriminator="type")
]


class RateLimiterRecord(BaseModel):
    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    state: RecordState
    # None means the record never expires
    expiration: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        return self.expiration is not None and self.expiration <= now


class BaseRateLimiterStorageTransaction(ABC):
    @abstractmethod
    async def find(self, key: str) -> RateLimiterRecord | None: ...

    @abstractmethod
    async def upsert(
        self, key: str, state: RecordState, expiration: datetime | None
    ) -> None:
        """Insert the record for the key, replacing any existing one."""


class BaseRateLimiterStorageAdapter(ABC):
    """Persists rate limiter records, one per key."""

    @asynccontextmanager
    @abstractmethod
    async def transaction(self) -> AsyncGenerator[BaseRateLimiterStorageTransaction]:
        """Async context manager running reads and writes atomically.

        Yields
        ------
        BaseRateLimiterStorageTransaction
            Reads and writes made through it are committed together when the
            context exits without error.
        """
        raise NotImplementedError
        yield  # unreachable; makes this an async generator for @asynccontextmanager typing

    @abstractmethod
    async def find(self, key: str) -> RateLimiterRecord | None: ...

    @abstractmethod
    async def remove(self, key: str) -> None: ...
