"""Task tracking service for datastores.

Store mutations are synchronous and may happen on any thread, while
persistence is asynchronous. This service accepts coroutines from any thread
and runs them on an event loop without blocking the caller.
"""

import asyncio
from abc import ABC, abstractmethod
from functools import partial
import logging
import threading
from typing import Any, Awaitable, Coroutine, Set

_LOGGER = logging.getLogger(__name__)

__all__: list[str] = []


class TaskService(ABC):
    """Service for running and waiting for fire-and-forget tasks."""

    @abstractmethod
    def create_task(
        self, coro: Coroutine[None, None, Any], name: str | None = None
    ) -> None:
        """Schedule a coroutine to run in the background.

        This may be called from any thread and never waits for the coroutine.

        Args:
            coro: The coroutine to run as a task
            name: Optional task name used in logs
        """

    @abstractmethod
    async def block_till_done(self) -> None:
        """Wait for all tracked tasks to complete.

        Tasks created while waiting are also awaited.
        """

    @abstractmethod
    def get_num_active_tasks(self) -> int:
        """Get the number of tasks scheduled or running."""

    @abstractmethod
    def shutdown(self, timeout: float | None = None) -> None:
        """Drain and stop any private event loop owned by the service."""


class TaskServiceImpl(TaskService):
    """Service for running and waiting for fire-and-forget tasks.

    Coroutines are started on the running loop of the calling thread when there
    is one. Otherwise they are handed to the loop the service is bound to, and
    as a last resort to a private loop running on a daemon thread.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Initialize the task service."""
        self._loop = loop
        self._private_loop: asyncio.AbstractEventLoop | None = None
        self._private_thread: threading.Thread | None = None
        self._active_tasks: Set[asyncio.Task[Any]] = set()
        self._scheduled = 0
        self._lock = threading.Lock()

    def create_task(
        self, coro: Coroutine[None, None, Any], name: str | None = None
    ) -> None:
        """Schedule a coroutine to run in the background."""
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        with self._lock:
            if running is not None and not _is_usable(self._loop):
                # Bind to the first running loop, or rebind once the old one stopped.
                self._loop = running
            loop = self._loop
            self._scheduled += 1
        if running is not None and running is loop:
            self._start(coro, name)
            return
        if loop is None or not _is_usable(loop):
            loop = self._ensure_private_loop()
        loop.call_soon_threadsafe(self._start, coro, name)

    def _start(self, coro: Coroutine[None, None, Any], name: str | None) -> None:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        with self._lock:
            self._scheduled -= 1
            self._active_tasks.add(task)
        task.add_done_callback(partial(self._task_done, self._active_tasks))

    def _task_done(
        self, task_set: Set[asyncio.Task[Any]], task: asyncio.Task[Any]
    ) -> None:
        """Callback when a task is done.

        Args:
            task: The completed task
        """
        try:
            # This will raise any exception that occurred in the task
            task.result()
        except asyncio.CancelledError:
            pass
        except Exception as e:
            _LOGGER.error("Task %s failed: %s", task.get_name(), e)
        finally:
            with self._lock:
                task_set.discard(task)

    def _ensure_private_loop(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._private_loop is None:
                loop = asyncio.new_event_loop()
                thread = threading.Thread(
                    target=loop.run_forever, name="datastores-tasks", daemon=True
                )
                thread.start()
                self._private_loop = loop
                self._private_thread = thread
                _LOGGER.debug("Started private event loop for background tasks")
            return self._private_loop

    async def block_till_done(self) -> None:
        """Wait for all tracked tasks to complete."""
        while True:
            with self._lock:
                active_tasks = list(self._active_tasks)
                scheduled = self._scheduled
            if not active_tasks and not scheduled:
                break
            if active_tasks:
                _LOGGER.debug("Waiting for %d tasks to complete", len(active_tasks))
                await self._wait_for(active_tasks)
            else:
                await asyncio.sleep(0.01)
        await asyncio.sleep(0)

    async def _wait_for(self, active_tasks: list[asyncio.Task[Any]]) -> None:
        """Wait for tasks that may belong to different event loops."""
        current = asyncio.get_running_loop()
        by_loop: dict[asyncio.AbstractEventLoop, list[asyncio.Task[Any]]] = {}
        for task in active_tasks:
            by_loop.setdefault(task.get_loop(), []).append(task)
        waiters: list[Awaitable[Any]] = []
        for task_loop, tasks in by_loop.items():
            if task_loop is current:
                waiters.append(asyncio.gather(*tasks, return_exceptions=True))
            elif _is_usable(task_loop):
                waiters.append(
                    asyncio.wrap_future(
                        asyncio.run_coroutine_threadsafe(asyncio.wait(tasks), task_loop)
                    )
                )
            else:
                _LOGGER.warning(
                    "Dropping %d tasks of an event loop that is no longer running",
                    len(tasks),
                )
                with self._lock:
                    self._active_tasks.difference_update(tasks)
        await asyncio.gather(*waiters)

    def get_num_active_tasks(self) -> int:
        """Get the number of tasks scheduled or running."""
        with self._lock:
            return len(self._active_tasks) + self._scheduled

    def shutdown(self, timeout: float | None = None) -> None:
        """Drain and stop the private event loop, if one was started."""
        with self._lock:
            loop = self._private_loop
            thread = self._private_thread
            self._private_loop = None
            self._private_thread = None
        if loop is None:
            return
        asyncio.run_coroutine_threadsafe(self.block_till_done(), loop).result(timeout)
        loop.call_soon_threadsafe(loop.stop)
        if thread is not None:
            thread.join(timeout)
        loop.close()


def _is_usable(loop: asyncio.AbstractEventLoop | None) -> bool:
    return loop is not None and not loop.is_closed() and loop.is_running()
