"""Context management for the default TaskService."""

import contextvars
import contextlib
import logging
from collections.abc import Generator

from .service import TaskService, TaskServiceImpl

__all__: list[str] = []

_LOGGER = logging.getLogger(__name__)

_task_service_ctx: contextvars.ContextVar[TaskService | None] = contextvars.ContextVar(
    "_task_service_ctx", default=None
)
_default_service: TaskService | None = None


def get_task_service() -> TaskService:
    """Get the task service for the current context.

    Persisted stores created without an explicit service use this one. When no
    service was set with `task_service_context`, a process-wide default is used
    so that stores built on different threads share one background loop.
    """
    global _default_service
    if (instance := _task_service_ctx.get()) is not None:
        return instance
    if _default_service is None:
        _LOGGER.debug("Creating default task service")
        _default_service = TaskServiceImpl()
    return _default_service


@contextlib.contextmanager
def task_service_context(
    service: TaskService | None = None,
) -> Generator[TaskService, None, None]:
    """Context manager that sets the TaskService used within the block.

    Args:
        service: Optional existing TaskService instance to use. If None,
                 a new instance will be created.

    Yields:
        The TaskService instance to use within the context
    """
    service = service or TaskServiceImpl()
    token = _task_service_ctx.set(service)
    try:
        yield service
    finally:
        _task_service_ctx.reset(token)
