"""
Index Operations
Each method issues exactly one mutation against the search service
and returns the task handle the service answered with. With
`wait=True` the handle is awaited to a terminal status first.
Submissions are neither retried nor deduplicated.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from .client import SearchClient
from .errors import RemoteTaskFailed, TaskCanceledByService
from .models import TaskInfo, TaskStatus
from .telemetry import TASK_SUBMISSIONS
from .waiter import TaskWaiter

logger = logging.getLogger(__name__)


class IndexOperations:
    """Mutating routes of the search service, as task-returning calls."""

    def __init__(
        self, client: SearchClient, waiter: Optional[TaskWaiter] = None
    ) -> None:
        self.client = client
        self.waiter = waiter or TaskWaiter(client)

    async def submit(
        self,
        method: str,
        path: str,
        payload: Any = None,
        *,
        params: Optional[Dict[str, Any]] = None,
        wait: bool = False,
        timeout: Optional[float] = None,
        interval: Optional[float] = None,
    ) -> TaskInfo:
        data = await self.client.submit(method, path, payload, params=params)
        task = TaskInfo.model_validate(data)
        TASK_SUBMISSIONS.add(
            1, attributes={"method": method.upper(), "type": task.type or ""}
        )
        logger.debug("%s %s enqueued task %s", method.upper(), path, task.uid)
        if not wait:
            return task
        return await self.waiter.wait(
            task.uid, timeout=timeout, interval=interval
        )

    async def create_index(
        self, uid: str, primary_key: Optional[str] = None, **wait_opts
    ) -> TaskInfo:
        body: Dict[str, Any] = {"uid": uid}
        if primary_key is not None:
            body["primaryKey"] = primary_key
        return await self.submit("POST", "/indexes", body, **wait_opts)

    async def delete_index(self, uid: str, **wait_opts) -> TaskInfo:
        return await self.submit("DELETE", f"/indexes/{uid}", **wait_opts)

    async def add_documents(
        self,
        index_uid: str,
        documents: List[Dict[str, Any]],
        primary_key: Optional[str] = None,
        **wait_opts,
    ) -> TaskInfo:
        return await self.submit(
            "POST",
            f"/indexes/{index_uid}/documents",
            documents,
            params=_primary_key_params(primary_key),
            **wait_opts,
        )

    async def update_documents(
        self,
        index_uid: str,
        documents: List[Dict[str, Any]],
        primary_key: Optional[str] = None,
        **wait_opts,
    ) -> TaskInfo:
        return await self.submit(
            "PUT",
            f"/indexes/{index_uid}/documents",
            documents,
            params=_primary_key_params(primary_key),
            **wait_opts,
        )

    async def delete_documents(
        self, index_uid: str, ids: Iterable[Any], **wait_opts
    ) -> TaskInfo:
        return await self.submit(
            "POST",
            f"/indexes/{index_uid}/documents/delete-batch",
            list(ids),
            **wait_opts,
        )

    async def delete_all_documents(
        self, index_uid: str, **wait_opts
    ) -> TaskInfo:
        return await self.submit(
            "DELETE", f"/indexes/{index_uid}/documents", **wait_opts
        )

    async def update_settings(
        self, index_uid: str, settings: Dict[str, Any], **wait_opts
    ) -> TaskInfo:
        return await self.submit(
            "PATCH", f"/indexes/{index_uid}/settings", settings, **wait_opts
        )

    async def update_filterable_attributes(
        self, index_uid: str, attributes: Iterable[str], **wait_opts
    ) -> TaskInfo:
        return await self.submit(
            "PUT",
            f"/indexes/{index_uid}/settings/filterable-attributes",
            list(attributes),
            **wait_opts,
        )

    async def reset_settings(self, index_uid: str, **wait_opts) -> TaskInfo:
        return await self.submit(
            "DELETE", f"/indexes/{index_uid}/settings", **wait_opts
        )


def raise_for_task(task: TaskInfo) -> TaskInfo:
    """Raise if a terminal snapshot did not succeed; return it otherwise."""
    if task.status is TaskStatus.FAILED:
        raise RemoteTaskFailed(task)
    if task.status is TaskStatus.CANCELED:
        raise TaskCanceledByService(task)
    return task


def _primary_key_params(
    primary_key: Optional[str],
) -> Optional[Dict[str, str]]:
    if primary_key is None:
        return None
    return {"primaryKey": primary_key}
