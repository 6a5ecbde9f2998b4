"""
Setup Pipeline
Runs an ordered list of dependent mutations, one task at a time:
submit step i, wait for its task to terminate, and only submit
step i+1 once step i succeeded. The first step that does not
succeed aborts the run with a SetupFailure naming it.
Steps are never retried; a failed run must be started over.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Iterable, List, Optional

import httpx
from pydantic import ValidationError

from .errors import SearchTaskError, SetupFailure
from .models import TaskInfo
from .operations import raise_for_task
from .telemetry import SETUP_FAILURES, SETUP_STEPS, tracer
from .waiter import TaskWaiter

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class SetupStep:
    label: str
    operation: Callable[[], Awaitable[TaskInfo]]


class SetupPipeline:
    """All-or-nothing sequence of task-producing steps."""

    def __init__(
        self,
        waiter: TaskWaiter,
        *,
        timeout: Optional[float] = None,
        interval: Optional[float] = None,
        steps: Iterable[SetupStep] = (),
    ) -> None:
        self.waiter = waiter
        self.timeout = timeout
        self.interval = interval
        self.steps: List[SetupStep] = list(steps)
        self.state = PipelineState.NOT_STARTED
        self.current_step: Optional[int] = None

    def then(
        self, label: str, operation: Callable[[], Awaitable[TaskInfo]]
    ) -> "SetupPipeline":
        if self.state is not PipelineState.NOT_STARTED:
            raise RuntimeError("Cannot add steps to a pipeline that has run")
        self.steps.append(SetupStep(label, operation))
        return self

    async def run(self) -> List[TaskInfo]:
        """Run every step in order; return their terminal snapshots."""
        if self.state is not PipelineState.NOT_STARTED:
            raise RuntimeError("A setup pipeline can only run once")
        self.state = PipelineState.RUNNING
        finished: List[TaskInfo] = []
        for position, step in enumerate(self.steps):
            self.current_step = position
            try:
                finished.append(await self._run_step(step))
            except SetupFailure:
                self.state = PipelineState.FAILED
                SETUP_FAILURES.add(1, attributes={"step": step.label})
                raise
            except BaseException:
                # Unexpected errors and cancellation still end the run
                self.state = PipelineState.FAILED
                raise
        self.state = PipelineState.SUCCEEDED
        self.current_step = None
        return finished

    async def _run_step(self, step: SetupStep) -> TaskInfo:
        with tracer.start_as_current_span("setup_step") as span:
            span.set_attribute("step", step.label)
            SETUP_STEPS.add(1, attributes={"step": step.label})
            try:
                task = await step.operation()
                if not task.is_terminal:
                    task = await self.waiter.wait(
                        task.uid, timeout=self.timeout, interval=self.interval
                    )
                span.set_attribute("task_uid", task.uid)
                return raise_for_task(task)
            except (SearchTaskError, httpx.HTTPError, ValidationError) as exc:
                span.record_exception(exc)
                logger.error("Setup step '%s' failed: %s", step.label, exc)
                raise SetupFailure(step.label, exc) from exc


async def run_setup_pipeline(
    steps: Iterable[SetupStep],
    waiter: TaskWaiter,
    per_step_timeout: Optional[float] = None,
    interval: Optional[float] = None,
) -> List[TaskInfo]:
    pipeline = SetupPipeline(
        waiter, timeout=per_step_timeout, interval=interval, steps=steps
    )
    return await pipeline.run()
