"""
Tracked fire-and-forget tasks.

Compensation, cache maintenance and notification dispatch run detached from
the request that triggered them: the caller never awaits them and cancelling
the caller does not cancel them. The manager keeps a strong reference to every
task until it finishes so the event loop cannot garbage-collect it, and lets
shutdown code (and tests) wait for whatever is still running.

Example:
    >>> tasks = BackgroundTasks()
    >>> tasks.submit(restore_stock(), name="compensation")
    >>> # Later, e.g. on shutdown:
    >>> await tasks.await_all(timeout=10.0)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)


class BackgroundTasks:
    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    def submit(
        self, coro: Coroutine[Any, Any, Any], name: str | None = None
    ) -> asyncio.Task[Any]:
        """
        Schedule a coroutine on the running loop without awaiting it.

        Args:
            coro: The coroutine to run
            name: Label used in log records

        Returns:
            The created asyncio.Task
        """
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Background task %s failed: %s", task.get_name(), exc, exc_info=exc
            )

    @property
    def pending_count(self) -> int:
        return sum(1 for t in self._tasks if not t.done())

    async def await_all(self, timeout: float | None = None) -> int:
        """
        Wait until every tracked task has finished.

        Tasks submitted while waiting (a task scheduling another) are waited
        for as well. Tasks still running when the timeout expires are
        cancelled.

        Returns:
            Number of tasks that were awaited
        """
        count = 0
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout

        while True:
            pending = [t for t in self._tasks if not t.done()]
            if not pending:
                return count

            remaining_time = None if deadline is None else deadline - loop.time()
            if remaining_time is not None and remaining_time <= 0:
                self._cancel(pending, timeout)
                return count

            done, _ = await asyncio.wait(pending, timeout=remaining_time)
            count += len(done)

    def _cancel(self, pending: list[asyncio.Task[Any]], timeout: float | None) -> None:
        logger.warning(
            "%d background task(s) did not complete within %ss, cancelling",
            len(pending),
            timeout,
        )
        for task in pending:
            task.cancel()
