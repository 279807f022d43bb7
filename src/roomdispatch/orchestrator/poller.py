"""Background completion polling for orchestrated tasks.

One asyncio task per orchestrated dispatch, keyed by the orchestrator's
task id.  Each poll loop waits one interval before its first status query,
then classifies the status text until a terminal state is reached or the
timeout elapses.  The completion hook fires exactly once per task.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import StrEnum

from roomdispatch.hooks import DispatchHooks, call_hook
from roomdispatch.orchestrator.client import OrchestratorClient

logger = logging.getLogger(__name__)

COMPLETED_KEYWORDS = ("completed", "done", "success")
FAILED_KEYWORDS = ("failed", "error", "cancelled")


class TaskState(StrEnum):
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass(slots=True)
class OrchestrationTask:
    external_task_id: str
    external_agent_id: str | None
    room: str
    model: str
    created_at: float = field(default_factory=time.monotonic)
    state: TaskState = TaskState.POLLING
    polls: int = 0

    @property
    def terminal(self) -> bool:
        return self.state is not TaskState.POLLING


def classify_status(text: str) -> TaskState:
    lowered = text.lower()
    if any(word in lowered for word in COMPLETED_KEYWORDS):
        return TaskState.COMPLETED
    if any(word in lowered for word in FAILED_KEYWORDS):
        return TaskState.FAILED
    return TaskState.POLLING


class CompletionPoller:
    """Owns every in-flight :class:`OrchestrationTask` until it terminates."""

    def __init__(
        self,
        client: OrchestratorClient,
        hooks: DispatchHooks | None = None,
        *,
        interval: float = 5.0,
        timeout: float = 120.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self._hooks = hooks or DispatchHooks()
        self.interval = interval
        self.timeout = timeout
        self._clock = clock
        self._sleep = sleep
        self._tasks: dict[str, OrchestrationTask] = {}
        self._runners: dict[str, asyncio.Task[TaskState]] = {}

    def start(self, task: OrchestrationTask) -> asyncio.Task[TaskState]:
        """Schedule background polling for ``task`` and return immediately."""
        existing = self._runners.get(task.external_task_id)
        if existing is not None and not existing.done():
            return existing
        task.created_at = self._clock()
        self._tasks[task.external_task_id] = task
        runner = asyncio.create_task(self._run(task), name=f"poll:{task.external_task_id}")
        self._runners[task.external_task_id] = runner
        runner.add_done_callback(lambda _t, tid=task.external_task_id: self._forget(tid))
        return runner

    def _forget(self, task_id: str) -> None:
        self._runners.pop(task_id, None)
        self._tasks.pop(task_id, None)

    def get(self, task_id: str) -> OrchestrationTask | None:
        """Return the in-flight task with this id, if any."""
        return self._tasks.get(task_id)

    @property
    def active(self) -> list[str]:
        return [tid for tid, runner in self._runners.items() if not runner.done()]

    def stop(self, task_id: str) -> bool:
        """Stop polling a task without reporting completion."""
        runner = self._runners.get(task_id)
        if runner is None or runner.done():
            return False
        runner.cancel()
        return True

    async def wait(self, timeout: float | None = None) -> None:
        runners = [r for r in self._runners.values() if not r.done()]
        if runners:
            await asyncio.wait(runners, timeout=timeout)

    async def _run(self, task: OrchestrationTask) -> TaskState:
        while True:
            await self._sleep(self.interval)
            elapsed = self._clock() - task.created_at

            if elapsed > self.timeout:
                await self._time_out(task, elapsed)
                return task.state

            task.polls += 1
            try:
                status = await self._client.status(task.external_task_id)
            except Exception as exc:
                logger.debug("Status poll for %s failed: %s", task.external_task_id, exc)
                status = ""

            state = classify_status(status)
            if state is TaskState.COMPLETED:
                logger.info("[%s] task %s completed (%.0fs)", task.room, task.external_task_id, elapsed)
                await self._finish(task, state, status, 0)
                return task.state
            if state is TaskState.FAILED:
                logger.warning("[%s] task %s failed", task.room, task.external_task_id)
                await self._finish(task, state, status, 1)
                return task.state

            if status.strip():
                await call_hook("on_output", self._hooks.on_output, task.room, status)

    async def _time_out(self, task: OrchestrationTask, elapsed: float) -> None:
        logger.warning(
            "[%s] task %s timed out (%.0fs)", task.room, task.external_task_id, elapsed
        )
        try:
            await self._client.cancel(task.external_task_id)
        except Exception as exc:
            logger.debug("Cancel of %s failed: %s", task.external_task_id, exc)
        if task.external_agent_id:
            try:
                await self._client.stop_agent(task.external_agent_id)
            except Exception as exc:
                logger.debug("Stop of agent %s failed: %s", task.external_agent_id, exc)
        await self._finish(task, TaskState.TIMED_OUT, f"Task timed out after {round(elapsed)}s", 1)

    async def _finish(self, task: OrchestrationTask, state: TaskState, output: str, code: int) -> None:
        if task.terminal:
            return
        task.state = state
        await call_hook("on_complete", self._hooks.on_complete, task.room, output, code)
