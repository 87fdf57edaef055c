"""Utility constants and helpers shared across ratewarden modules."""

import inspect
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel


class NotProvided(BaseModel):
    """Sentinel class to indicate that a value was not provided."""

    __type__: Literal["not_provided"] = "not_provided"


NOT_PROVIDED = NotProvided()

type Lazyable[T] = Callable[[], T | Awaitable[T]] | Awaitable[T]


def resolve_not_provided[T](value: T | NotProvided, default: T) -> T:
    return default if isinstance(value, NotProvided) else value


async def resolve_lazyable[T](value: Lazyable[T]) -> T:
    """Run a lazy value and await it if needed.

    Parameters
    ----------
    value : Lazyable[T]
        A zero-argument callable returning a value or an awaitable, or an
        awaitable itself.

    Returns
    -------
    T
        The resolved value.
    """
    if inspect.isawaitable(value):
        return await value

    result = value()
    if inspect.isawaitable(result):
        return await result
    return result


def type_name(value: object) -> str:
    """Runtime class name of a value, used to tell adapter kinds apart."""
    return type(value).__name__


def utc_now() -> datetime:
    return datetime.now(UTC)
