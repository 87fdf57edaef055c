"""Backoff policies deciding how long a blocked key stays blocked.

A backoff policy receives the number of attempts made beyond the limit
(starting at 1) and returns how long the key stays blocked, counted from the
moment it was first blocked.
"""

from collections.abc import Callable
from datetime import timedelta

type BackoffPolicy = Callable[[int], timedelta]


def constant_backoff(delay: timedelta = timedelta(seconds=1)) -> BackoffPolicy:
    def policy(attempt: int) -> timedelta:
        return delay

    return policy


def linear_backoff(
    min_delay: timedelta = timedelta(seconds=1),
    max_delay: timedelta = timedelta(minutes=1),
) -> BackoffPolicy:
    def policy(attempt: int) -> timedelta:
        return min(min_delay * max(attempt, 1), max_delay)

    return policy


def exponential_backoff(
    min_delay: timedelta = timedelta(seconds=1),
    max_delay: timedelta = timedelta(minutes=1),
    multiplier: float = 2.0,
) -> BackoffPolicy:
    """Delay growing by ``multiplier`` for every attempt beyond the limit.

    Parameters
    ----------
    min_delay : timedelta
        Delay after the first exceeding attempt.
    max_delay : timedelta
        Upper bound of the delay.
    multiplier : float
        Growth factor between consecutive attempts. Must be at least 1.
    """
    if multiplier < 1:
        raise ValueError("Multiplier must be greater than or equal to 1")

    def policy(attempt: int) -> timedelta:
        exponent = max(attempt, 1) - 1
        try:
            seconds = min_delay.total_seconds() * multiplier**exponent
        except OverflowError:
            return max_delay
        if seconds >= max_delay.total_seconds():
            return max_delay
        return timedelta(seconds=seconds)

    return policy
