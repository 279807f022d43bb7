"""Client for the claude-flow task/agent orchestrator.

The orchestrator only exposes a CLI whose output is free text, so task and
agent identifiers are recovered with permissive patterns.  Parsing lives in
:func:`parse_task_id` / :func:`parse_agent_id` and nowhere else.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from typing import Protocol

from roomdispatch.errors import OrchestratorError, truncate
from roomdispatch.shell import CommandOutput, CommandRunner, run_command

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_CHARS = 500

_TASK_ID_RE = re.compile(r"task[_-][A-Za-z0-9_-]+")
_AGENT_ID_RE = re.compile(r"agent[_-][A-Za-z0-9_-]+")
_GENERIC_ID_RE = re.compile(r"[A-Za-z]+-[A-Za-z0-9]+")


def parse_task_id(text: str) -> str | None:
    match = _TASK_ID_RE.search(text or "")
    return match.group(0) if match else None


def parse_agent_id(text: str) -> str | None:
    match = _AGENT_ID_RE.search(text or "") or _GENERIC_ID_RE.search(text or "")
    return match.group(0) if match else None


class OrchestratorClient(Protocol):
    async def is_available(self) -> bool: ...

    async def create_task(self, description: str, priority_label: str, tags: Mapping[str, str]) -> str: ...

    async def spawn_agent(self, agent_type: str, model: str, tags: Mapping[str, str]) -> str: ...

    async def assign(self, task_id: str, agent_id: str) -> bool: ...

    async def status(self, task_id: str) -> str: ...

    async def cancel(self, task_id: str) -> bool: ...

    async def stop_agent(self, agent_id: str) -> bool: ...

    async def list_agents(self) -> str: ...


class ClaudeFlowClient:
    """Drives ``npx claude-flow`` (or a configured equivalent)."""

    def __init__(
        self,
        *,
        command: Sequence[str] = ("npx", "claude-flow"),
        runner: CommandRunner = run_command,
        timeout: float = 30.0,
    ) -> None:
        self._command = list(command)
        self._runner = runner
        self._timeout = timeout

    async def _run(self, *args: str) -> CommandOutput:
        return await self._runner([*self._command, *args], timeout=self._timeout)

    @staticmethod
    def _tag_args(tags: Mapping[str, str]) -> list[str]:
        args: list[str] = []
        for key, value in tags.items():
            args.extend(["--tag", f"{key}:{value}"])
        return args

    async def is_available(self) -> bool:
        out = await self._run("status")
        return out.ok

    async def create_task(self, description: str, priority_label: str, tags: Mapping[str, str]) -> str:
        out = await self._run(
            "task", "create",
            "-t", "implementation",
            "-d", description[:MAX_DESCRIPTION_CHARS],
            "--priority", priority_label,
            *self._tag_args(tags),
        )
        return out.combined

    async def spawn_agent(self, agent_type: str, model: str, tags: Mapping[str, str]) -> str:
        out = await self._run("agent", "spawn", "-t", agent_type, "--model", model, *self._tag_args(tags))
        return out.combined

    async def assign(self, task_id: str, agent_id: str) -> bool:
        out = await self._run("task", "assign", task_id, "--agent", agent_id)
        if not out.ok:
            logger.warning("Task assign %s -> %s failed: %s", task_id, agent_id, truncate(out.combined))
        return out.ok

    async def status(self, task_id: str) -> str:
        out = await self._run("task", "status", task_id)
        return out.stdout

    async def cancel(self, task_id: str) -> bool:
        return (await self._run("task", "cancel", task_id)).ok

    async def stop_agent(self, agent_id: str) -> bool:
        return (await self._run("agent", "stop", agent_id)).ok

    async def list_agents(self) -> str:
        out = await self._run("agent", "list")
        if not out.ok:
            raise OrchestratorError(
                f"agent list failed: {truncate(out.combined) or out.returncode}",
                operation="agent list",
            )
        return out.stdout
