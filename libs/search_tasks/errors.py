"""
Errors raised while waiting on remote tasks and running setup pipelines.
Transport failures are never wrapped here: they surface as the
`httpx.HTTPError` raised by the client.
"""

from typing import Optional

import httpx

from .models import TaskError, TaskInfo, TaskUid

TransportError = httpx.HTTPError


class SearchTaskError(Exception):
    """Base class for task synchronization errors."""


class TaskTimeoutError(SearchTaskError):
    """A task did not reach a terminal status within the allotted time."""

    def __init__(
        self,
        task_uid: TaskUid,
        timeout: float,
        last_snapshot: Optional[TaskInfo] = None,
    ) -> None:
        self.task_uid = task_uid
        self.timeout = timeout
        self.last_snapshot = last_snapshot
        status = last_snapshot.status.value if last_snapshot else "unknown"
        super().__init__(
            f"Task {task_uid} still {status} after {timeout:.3f}s"
        )


class TaskWaitCancelled(SearchTaskError):
    """Waiting was stopped by the caller before the task terminated."""

    def __init__(
        self, task_uid: TaskUid, last_snapshot: Optional[TaskInfo] = None
    ) -> None:
        self.task_uid = task_uid
        self.last_snapshot = last_snapshot
        super().__init__(f"Stopped waiting for task {task_uid}")


class RemoteTaskFailed(SearchTaskError):
    """The service reported the task as failed."""

    def __init__(self, task: TaskInfo) -> None:
        self.task = task
        self.error: Optional[TaskError] = task.error
        payload = self.error.as_json() if self.error else "{}"
        super().__init__(f"Task {task.uid} failed: {payload}")


class TaskCanceledByService(SearchTaskError):
    """The service reported the task as canceled."""

    def __init__(self, task: TaskInfo) -> None:
        self.task = task
        by = f" by task {task.canceled_by}" if task.canceled_by else ""
        super().__init__(f"Task {task.uid} was canceled{by}")


class SetupFailure(SearchTaskError):
    """A setup pipeline stopped at the named step."""

    def __init__(self, step_label: str, cause: Exception) -> None:
        self.step_label = step_label
        self.cause = cause
        self.detail = _describe(cause)
        super().__init__(
            f"Setup step '{step_label}' failed. "
            f"Impossible to continue.\n{self.detail}"
        )


def _describe(cause: Exception) -> str:
    if isinstance(cause, RemoteTaskFailed):
        payload = cause.error.as_json() if cause.error else "{}"
        return f"Task {cause.task.uid}: {payload}"
    if isinstance(cause, httpx.HTTPStatusError):
        return f"{cause} {cause.response.text}"
    return str(cause)
