import asyncio
from typing import List, Optional


async def cancel_tasks_with_timeout(
    tasks: List[Optional[asyncio.Task]],
    timeout: float = 2.0,
    logger=None
) -> bool:
    """
    Cancel multiple tasks with timeout protection.

    Args:
        tasks: List of asyncio tasks (None entries and the calling task are ignored)
        timeout: Maximum time to wait for cancellation
        logger: Optional logger for timeout warnings

    Returns:
        bool: True if all tasks cancelled within timeout, False if timeout occurred
    """
    current = asyncio.current_task()
    active_tasks = [task for task in tasks if task and not task.done() and task is not current]
    if not active_tasks:
        return True

    for task in active_tasks:
        task.cancel()

    done, pending = await asyncio.wait(active_tasks, timeout=timeout)
    if pending:
        if logger:
            logger.warning("Task cancellation timed out",
                           timeout_seconds=timeout,
                           still_running=len(pending))
        return False
    return True


async def safe_close_connection(
    connection,
    timeout: float = 1.0,
    logger=None
) -> bool:
    """
    Close a connection with timeout protection; never raises on close failure.

    Returns:
        bool: True if closed within timeout, False otherwise
    """
    if not connection:
        return True

    try:
        await asyncio.wait_for(connection.close(), timeout=timeout)
        return True
    except asyncio.TimeoutError:
        if logger:
            logger.warning("Connection close timed out", timeout_seconds=timeout)
        return False
    except Exception as e:
        if logger:
            logger.error("Error closing connection",
                         error_type=type(e).__name__,
                         error_message=str(e))
        return False


class TaskManager:
    """
    Tracks the background tasks of one owner (a WebSocket session) so they
    can be cancelled together on shutdown.
    """

    def __init__(self, name: str = "task_manager"):
        self.name = name
        self._tasks: List[asyncio.Task] = []
        self._should_stop = False

    def create_task(self, coro, name: Optional[str] = None) -> asyncio.Task:
        """Create and track a task."""
        if self._should_stop:
            coro.close()
            raise RuntimeError(f"Cannot create task '{name}' - manager is stopping")

        task_name = f"{self.name}.{name}" if name else f"{self.name}.task_{len(self._tasks)}"
        task = asyncio.create_task(coro, name=task_name)
        self._tasks.append(task)

        def cleanup_task(completed_task):
            try:
                self._tasks.remove(completed_task)
            except ValueError:
                pass  # Task already removed

        task.add_done_callback(cleanup_task)
        return task

    async def shutdown(self, timeout: float = 2.0, logger=None) -> bool:
        """Shutdown all managed tasks."""
        self._should_stop = True

        active_tasks = [task for task in self._tasks if not task.done()]
        success = await cancel_tasks_with_timeout(active_tasks, timeout, logger)

        self._tasks.clear()
        return success

    @property
    def is_stopping(self) -> bool:
        return self._should_stop
