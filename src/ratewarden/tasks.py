"""Fire-and-forget execution with explicit failure handling."""

import asyncio
from collections.abc import Coroutine
from typing import Any

import logfire_api as logfire


class BackgroundTasks:
    """Runs coroutines without making the caller wait for them.

    Submitted tasks are kept referenced until they finish. A failing task is
    logged and its exception discarded; it is never re-raised to the code that
    submitted it.
    """

    def __init__(self):
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(
        self, coro: Coroutine[Any, Any, Any], *, name: str | None = None
    ) -> asyncio.Task[Any]:
        """Schedule a coroutine on the running event loop.

        Parameters
        ----------
        coro : Coroutine
            The coroutine to run.
        name : str | None
            Task name, used in logs when the task fails.

        Returns
        -------
        asyncio.Task
            The scheduled task. Awaiting it is optional.
        """
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return

        error = task.exception()
        if error is not None:
            logfire.warn(
                "background_task.failed",
                task_name=task.get_name(),
                error=repr(error),
            )

    async def wait(self) -> None:
        """Wait until every task submitted so far has finished."""
        while self._tasks:
            _ = await asyncio.gather(*self._tasks, return_exceptions=True)

    def __deepcopy__(self, memo: dict[int, Any] | None = None) -> "BackgroundTasks":
        # Shared resource, copies refer to the same task set.
        return self
