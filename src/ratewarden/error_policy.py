"""Classification of errors that should count against a rate limit."""

import inspect
from collections.abc import Awaitable, Callable

type ErrorPredicate = Callable[[BaseException], bool | Awaitable[bool]]
type ErrorPolicy = (
    ErrorPredicate | type[BaseException] | tuple[type[BaseException], ...]
)


def match_all_errors(error: BaseException) -> bool:
    """Default policy: every error counts."""
    return True


async def evaluate_error_policy(policy: ErrorPolicy, error: BaseException) -> bool:
    """Decide whether an error matches a policy.

    Parameters
    ----------
    policy : ErrorPolicy
        An exception class, a tuple of exception classes, or a predicate that
        may be sync or async.
    error : BaseException
        The error raised by the protected operation.

    Returns
    -------
    bool
        True if the error should be tracked.

    Notes
    -----
    Exceptions raised by a predicate are not caught here; they propagate to
    the caller.
    """
    if isinstance(policy, tuple):
        return isinstance(error, policy)

    if isinstance(policy, type) and issubclass(policy, BaseException):
        return isinstance(error, policy)

    result = policy(error)
    if inspect.isawaitable(result):
        result = await result
    return bool(result)
