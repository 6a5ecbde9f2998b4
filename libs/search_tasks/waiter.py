"""
Task Waiter
Polls the search service until a task reaches a terminal status.

Fixed-interval polling: fetch, check terminal, else sleep and repeat.
Clock and sleep are injectable so the loop can run on virtual time.
A failed or canceled task is a valid outcome here and is returned
as-is; interpreting it is up to the caller.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, Protocol

from .config import Config
from .errors import TaskTimeoutError, TaskWaitCancelled
from .models import TaskInfo, TaskUid
from .telemetry import TASK_POLLS, TASK_WAIT_LAT

logger = logging.getLogger(__name__)


class TaskFetcher(Protocol):
    async def fetch_task(self, task_uid: TaskUid) -> dict: ...


class TaskWaiter:
    """Waits on remote tasks by polling `fetch_task`."""

    def __init__(
        self,
        client: TaskFetcher,
        *,
        timeout: Optional[float] = None,
        interval: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.client = client
        if timeout is None:
            timeout = Config.TASK_TIMEOUT_SECONDS
        if interval is None:
            interval = Config.TASK_POLL_INTERVAL_SECONDS
        self.timeout = timeout
        self.interval = interval
        self._clock = clock
        self._sleep = sleep

    async def fetch(self, task_uid: TaskUid) -> TaskInfo:
        return TaskInfo.model_validate(await self.client.fetch_task(task_uid))

    async def wait(
        self,
        task_uid: TaskUid,
        *,
        timeout: Optional[float] = None,
        interval: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> TaskInfo:
        """
        Return the first terminal snapshot of `task_uid`.

        Raises TaskTimeoutError once another interval would reach the
        timeout, TaskWaitCancelled when `cancel_event` is set. Errors from
        the fetch itself propagate unchanged.
        """
        timeout = self.timeout if timeout is None else timeout
        interval = self.interval if interval is None else interval
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        if interval <= 0:
            raise ValueError("interval must be positive")

        started = self._clock()
        last: Optional[TaskInfo] = None
        polls = 0
        try:
            while True:
                if cancel_event is not None and cancel_event.is_set():
                    logger.info("Stopped waiting for task %s", task_uid)
                    raise TaskWaitCancelled(task_uid, last)
                last = await self.fetch(task_uid)
                polls += 1
                TASK_POLLS.add(1, attributes={"status": last.status.value})
                if last.is_terminal:
                    logger.debug(
                        "Task %s reached %s after %d poll(s)",
                        task_uid,
                        last.status.value,
                        polls,
                    )
                    return last
                elapsed = self._clock() - started
                if elapsed + interval >= timeout:
                    logger.warning(
                        "Task %s still %s after %.3fs (%d polls)",
                        task_uid,
                        last.status.value,
                        elapsed,
                        polls,
                    )
                    raise TaskTimeoutError(task_uid, timeout, last)
                logger.debug(
                    "Task %s is %s; polling again in %.3fs",
                    task_uid,
                    last.status.value,
                    interval,
                )
                await self._pause(interval, cancel_event)
        finally:
            TASK_WAIT_LAT.record(max(0.0, self._clock() - started))

    async def _pause(
        self, interval: float, cancel_event: Optional[asyncio.Event]
    ) -> None:
        if cancel_event is None:
            await self._sleep(interval)
            return
        # Sleep, but wake up as soon as the caller asks to stop
        sleeper = asyncio.ensure_future(self._sleep(interval))
        stopper = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait(
                {sleeper, stopper}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            sleeper.cancel()
            stopper.cancel()
        if sleeper.done() and not sleeper.cancelled():
            sleeper.result()


async def wait_for_task(
    client: TaskFetcher,
    task_uid: TaskUid,
    *,
    timeout: Optional[float] = None,
    interval: Optional[float] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> TaskInfo:
    return await TaskWaiter(client).wait(
        task_uid, timeout=timeout, interval=interval, cancel_event=cancel_event
    )
