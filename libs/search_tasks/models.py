"""
Task and request models
Snapshots of remote tasks as returned by the search service,
plus the request bodies sent to it.
"""

import json
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


class TaskStatus(str, Enum):
    """Remote task status as reported by the service."""

    ENQUEUED = "enqueued"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATUSES


_TERMINAL_STATUSES = frozenset(
    {TaskStatus.SUCCEEDED, TaskStatus.FAILED, TaskStatus.CANCELED}
)

# Opaque task identifier, passed back to the service unchanged
TaskUid = Union[int, str]


class TaskError(BaseModel):
    """Error payload of a failed task, kept verbatim."""

    model_config = ConfigDict(extra="allow", frozen=True)

    message: Optional[str] = None
    code: Optional[str] = None
    type: Optional[str] = None
    link: Optional[str] = None

    def as_json(self) -> str:
        return json.dumps(self.model_dump(exclude_unset=True))


class TaskInfo(BaseModel):
    """
    One snapshot of a remote task.
    Submission responses carry `taskUid`, task fetches carry `uid`;
    both land in `uid`. A submission answered with nothing but an id
    is still pending, so `status` defaults to `enqueued`.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    uid: TaskUid = Field(validation_alias=AliasChoices("uid", "taskUid"))
    status: TaskStatus = TaskStatus.ENQUEUED
    index_uid: Optional[str] = Field(default=None, alias="indexUid")
    type: Optional[str] = None
    error: Optional[TaskError] = None
    details: Optional[Dict[str, Any]] = None
    canceled_by: Optional[TaskUid] = Field(default=None, alias="canceledBy")
    duration: Optional[str] = None
    enqueued_at: Optional[str] = Field(default=None, alias="enqueuedAt")
    started_at: Optional[str] = Field(default=None, alias="startedAt")
    finished_at: Optional[str] = Field(default=None, alias="finishedAt")

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def succeeded(self) -> bool:
        return self.status is TaskStatus.SUCCEEDED


class SimilarDocumentsQuery(BaseModel):
    """Body of the similar-documents search route."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    embedder: Optional[str] = None
    filter: Optional[Any] = None
    attributes_to_retrieve: Optional[List[str]] = Field(
        default=None, alias="attributesToRetrieve"
    )
    offset: Optional[int] = None
    limit: Optional[int] = None
    show_ranking_score: bool = Field(default=False, alias="showRankingScore")
    show_ranking_score_details: bool = Field(
        default=False, alias="showRankingScoreDetails"
    )
    ranking_score_threshold: Optional[float] = Field(
        default=None, alias="rankingScoreThreshold"
    )
    retrieve_vectors: bool = Field(default=False, alias="retrieveVectors")

    @field_validator("id")
    @classmethod
    def _id_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError(
                "Value cannot be null, empty or only whitespaces."
            )
        return value

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
