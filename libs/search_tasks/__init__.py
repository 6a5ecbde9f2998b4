"""
Search Tasks
Make the asynchronous tasks of a search service look synchronous:
wait on a task until it terminates, and chain dependent mutations
into all-or-nothing setup pipelines.
"""

from .client import SearchClient
from .config import Config
from .errors import (
    RemoteTaskFailed,
    SearchTaskError,
    SetupFailure,
    TaskCanceledByService,
    TaskTimeoutError,
    TaskWaitCancelled,
    TransportError,
)
from .fixtures import IndexFixture
from .models import (
    SimilarDocumentsQuery,
    TaskError,
    TaskInfo,
    TaskStatus,
    TaskUid,
)
from .operations import IndexOperations, raise_for_task
from .pipeline import (
    PipelineState,
    SetupPipeline,
    SetupStep,
    run_setup_pipeline,
)
from .waiter import TaskWaiter, wait_for_task

__all__ = [
    "Config",
    "IndexFixture",
    "IndexOperations",
    "PipelineState",
    "RemoteTaskFailed",
    "SearchClient",
    "SearchTaskError",
    "SetupFailure",
    "SetupPipeline",
    "SetupStep",
    "SimilarDocumentsQuery",
    "TaskCanceledByService",
    "TaskError",
    "TaskInfo",
    "TaskStatus",
    "TaskUid",
    "TaskTimeoutError",
    "TaskWaitCancelled",
    "TaskWaiter",
    "TransportError",
    "raise_for_task",
    "run_setup_pipeline",
    "wait_for_task",
]
