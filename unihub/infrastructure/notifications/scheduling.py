"""Fire-and-forget scheduling of coroutines from sync or async callers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import anyio
from anyio import from_thread

logger = logging.getLogger(__name__)

_background_tasks: set[asyncio.Task[Any]] = set()


def _log_task_result(task: asyncio.Task[Any]) -> None:
    _background_tasks.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Background task %s failed: %s", task.get_name(), exc, exc_info=exc)


def _spawn(func: Callable[..., Awaitable[Any]], args: tuple[Any, ...]) -> None:
    loop = asyncio.get_running_loop()
    task = loop.create_task(func(*args), name=getattr(func, "__qualname__", None))
    _background_tasks.add(task)
    task.add_done_callback(_log_task_result)


def schedule(func: Callable[..., Awaitable[Any]], *args: Any) -> None:
    """Run ``func(*args)`` on the event loop without waiting for it.

    From the event loop thread a task is created directly. From an AnyIO
    worker thread (sync FastAPI routes) the task is created on the loop that
    owns the thread. Without any loop, as in command line scripts, the
    coroutine runs to completion in a fresh loop.
    """

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        pass
    else:
        _spawn(func, args)
        return

    try:
        from_thread.run_sync(_spawn, func, args)
    except RuntimeError:
        anyio.run(func, *args)


async def drain_background_tasks() -> None:
    """Wait for the scheduled tasks of the current loop to finish."""

    loop = asyncio.get_running_loop()
    pending = [task for task in _background_tasks if task.get_loop() is loop]
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)


__all__ = ["schedule", "drain_background_tasks"]
