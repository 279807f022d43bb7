"""Single-prompt dispatch pipeline.

    resolve room -> add context, collapse whitespace -> audit -> register
    -> orchestrated path (task create / agent spawn / assign / poll)
       or fallback worker when the orchestrator is unavailable or no task
       id can be parsed from its reply.

Nothing raised below :meth:`Dispatcher.dispatch` escapes it; every outcome
is a :class:`DispatchReceipt`.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import asdict, dataclass, replace
from enum import StrEnum
from typing import Any

from roomdispatch.audit import AuditLog
from roomdispatch.dispatch.launcher import FallbackLauncher
from roomdispatch.errors import truncate
from roomdispatch.hooks import DispatchHooks, call_hook, tracking_id
from roomdispatch.orchestrator.client import OrchestratorClient, parse_agent_id, parse_task_id
from roomdispatch.orchestrator.poller import CompletionPoller, OrchestrationTask
from roomdispatch.rooms.registry import Room, RoomRegistry
from roomdispatch.rooms.routing import coerce_priority, priority_to_label, room_to_agent_type

logger = logging.getLogger(__name__)

_WS_RE = re.compile(r"\s+")

# No OS pid exists for orchestrated work
ORCHESTRATED_PID = 0


class DispatchMode(StrEnum):
    ORCHESTRATED = "orchestrated"
    FALLBACK = "fallback"


@dataclass(frozen=True, slots=True)
class DispatchReceipt:
    success: bool
    room: str
    message: str
    mode: DispatchMode | None = None
    external_task_id: str | None = None
    external_agent_id: str | None = None
    pid: int | None = None
    runtime_task_id: str | None = None
    model: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


def collapse_whitespace(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


def with_context(prompt: str, context: str | None) -> str:
    if not context:
        return prompt
    return f"[Previous output context]\n{context}\n[End context]\n\n{prompt}"


class Dispatcher:
    def __init__(
        self,
        registry: RoomRegistry,
        client: OrchestratorClient,
        poller: CompletionPoller,
        launcher: FallbackLauncher,
        *,
        hooks: DispatchHooks | None = None,
        audit: AuditLog | None = None,
        model_tier: str = "opus",
    ) -> None:
        self.registry = registry
        self.client = client
        self.poller = poller
        self.launcher = launcher
        self.hooks = hooks or DispatchHooks()
        self.audit = audit
        self.model_tier = model_tier
        self._orchestrator_available: bool | None = None

    @property
    def orchestrator_available(self) -> bool:
        return bool(self._orchestrator_available)

    async def initialize(self) -> bool:
        """Check the orchestrator once; the answer is cached for the process."""
        if self._orchestrator_available is None:
            try:
                self._orchestrator_available = await self.client.is_available()
            except Exception as exc:
                logger.debug("Orchestrator availability check failed: %s", exc)
                self._orchestrator_available = False
            logger.info(
                "Dispatcher ready | model: %s | orchestrator: %s",
                self.model_tier,
                "available" if self._orchestrator_available else "unavailable (fallback workers)",
            )
        return self._orchestrator_available

    async def dispatch(self, room_id: str | None, text: str | None, priority: Any = 3) -> DispatchReceipt:
        if not isinstance(text, str) or not text.strip():
            return DispatchReceipt(success=False, room=room_id or "", message="No prompt provided")

        room = self.registry.resolve(room_id)
        priority = coerce_priority(priority)

        context = await call_hook("room_context", self.hooks.room_context, room.id)
        prompt = collapse_whitespace(with_context(text, context if isinstance(context, str) else None))
        logger.info("%s -> [%s] (%d chars)", room.emoji or "*", room.id, len(prompt))

        if self.audit is not None:
            await self.audit.append(room.id, room.target_app, prompt)

        registered = await call_hook("on_task_registered", self.hooks.on_task_registered, room.id, text)
        runtime_task_id = tracking_id(registered)

        if self._orchestrator_available is None:
            await self.initialize()

        try:
            if self._orchestrator_available:
                receipt = await self._dispatch_primary(room, prompt, priority)
            else:
                receipt = await self._dispatch_fallback(room, prompt)
        except Exception as exc:
            logger.error("Dispatch to %s failed: %s", room.id, exc)
            return DispatchReceipt(
                success=False,
                room=room.id,
                message=f"Dispatch to {room.id} failed: {truncate(str(exc))}",
                runtime_task_id=runtime_task_id,
            )

        if runtime_task_id is None:
            return receipt
        return replace(receipt, runtime_task_id=runtime_task_id)

    async def _dispatch_primary(self, room: Room, prompt: str, priority: int) -> DispatchReceipt:
        agent_type = room_to_agent_type(room.id)
        label = priority_to_label(priority)
        tags = {"room": room.id, "model": self.model_tier}
        logger.info("[%s] creating task (%s, %s, model=%s)", room.id, agent_type, label, self.model_tier)

        try:
            created = await self.client.create_task(prompt, label, tags)
        except Exception as exc:
            created = ""
            logger.warning("[%s] task create raised: %s", room.id, exc)
        task_id = parse_task_id(created)
        if task_id is None:
            logger.warning("[%s] no task id in orchestrator reply: %s", room.id, truncate(created))
            logger.warning("[%s] task create failed, falling back to worker dispatch", room.id)
            return await self._dispatch_fallback(room, prompt)

        try:
            spawned = await self.client.spawn_agent(agent_type, self.model_tier, {"room": room.id})
        except Exception as exc:
            spawned = ""
            logger.warning("[%s] agent spawn raised: %s", room.id, exc)
        agent_id = parse_agent_id(spawned)
        if agent_id is None:
            logger.warning("[%s] no agent id in orchestrator reply: %s", room.id, truncate(spawned))

        if agent_id is not None:
            try:
                await self.client.assign(task_id, agent_id)
            except Exception as exc:
                logger.warning("[%s] assign %s -> %s failed: %s", room.id, task_id, agent_id, exc)

        await call_hook("on_spawned", self.hooks.on_spawned, room.id, ORCHESTRATED_PID)

        self.poller.start(
            OrchestrationTask(
                external_task_id=task_id,
                external_agent_id=agent_id,
                room=room.id,
                model=self.model_tier,
            )
        )
        return DispatchReceipt(
            success=True,
            room=room.id,
            message=f"Task dispatched: {task_id} -> {agent_id or 'unassigned'} ({self.model_tier})",
            mode=DispatchMode.ORCHESTRATED,
            external_task_id=task_id,
            external_agent_id=agent_id,
            model=self.model_tier,
        )

    async def _dispatch_fallback(self, room: Room, prompt: str) -> DispatchReceipt:
        result = await self.launcher.launch(room.id, prompt)
        return DispatchReceipt(
            success=result.success,
            room=room.id,
            message=result.message,
            mode=DispatchMode.FALLBACK if result.pid is not None else None,
            pid=result.pid,
            model=self.launcher.model_id,
        )

    async def wait_idle(self, timeout: float | None = None) -> None:
        """Wait for background pollers and fallback workers to finish."""
        await asyncio.gather(self.poller.wait(timeout), self.launcher.wait(timeout))
