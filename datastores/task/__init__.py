"""Background task module for datastores.

This module runs fire-and-forget coroutines, such as auto-saves triggered by
synchronous store mutations, and lets callers wait for them to finish.
"""

from .context import task_service_context, get_task_service
from .service import TaskService, TaskServiceImpl

__all__ = ["get_task_service", "task_service_context", "TaskService", "TaskServiceImpl"]
