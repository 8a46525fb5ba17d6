"""Keyed cancellation slots for long-running asyncio operations.

Each key holds at most one task. Starting a new task under a key cancels the
one already there, so only the newest request for a slot can complete.
"""

import asyncio
from collections.abc import Coroutine
from typing import Any

from dictate_ai.logging import get_logger

_logger = get_logger("Tasks")


class KeyedTaskRunner:
    """Registry of named asyncio tasks with cancel-in-flight semantics."""

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task[Any]] = {}

    def start(self, key: str, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        """Schedule ``coro`` under ``key``, cancelling any task already there.

        Must be called from a running event loop.
        """
        self.cancel(key)
        task = asyncio.get_running_loop().create_task(coro, name=key)
        self._tasks[key] = task
        task.add_done_callback(lambda t: self._discard(key, t))
        _logger.debug("Started task {}", key)
        return task

    async def run(self, key: str, coro: Coroutine[Any, Any, Any]) -> Any:
        """Start ``coro`` under ``key`` and wait for it.

        Returns the coroutine's result, or None when a newer task took over the
        slot. Cancellation of the caller itself still propagates.
        """
        task = self.start(key, coro)
        try:
            return await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if not task.cancelled() or (current is not None and current.cancelling()):
                raise
            _logger.debug("Task {} was superseded", key)
            return None

    def _discard(self, key: str, task: asyncio.Task[Any]) -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]

    def cancel(self, key: str) -> bool:
        """Cancel the task under ``key``. Returns True if one was running."""
        task = self._tasks.pop(key, None)
        if task is None or task.done():
            return False
        task.cancel()
        _logger.debug("Cancelled task {}", key)
        return True

    def cancel_all(self) -> None:
        for key in list(self._tasks):
            self.cancel(key)

    def is_running(self, key: str) -> bool:
        task = self._tasks.get(key)
        return task is not None and not task.done()

    async def wait(self, key: str) -> None:
        """Wait for the task under ``key`` to finish, ignoring cancellation."""
        task = self._tasks.get(key)
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    async def wait_all(self) -> None:
        """Wait until no slot holds a running task, including chained ones."""
        while True:
            pending = [task for task in self._tasks.values() if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)
