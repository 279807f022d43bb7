"""Direct ``claude -p`` worker processes for the fallback path.

Workers are started in their own session so they outlive a brief caller,
with the recursion-guard markers set in their environment.  ``launch``
returns once the process is confirmed running (after a short grace delay);
a supervisor task keeps streaming output and reports completion later.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass

from roomdispatch.errors import SpawnError
from roomdispatch.guard import worker_env
from roomdispatch.hooks import DispatchHooks, call_hook

logger = logging.getLogger(__name__)

MAX_RESULT_OUTPUT = 2000
READ_CHUNK = 65536


@dataclass(slots=True)
class LaunchResult:
    success: bool
    room: str
    message: str
    pid: int | None = None
    exit_code: int | None = None
    output: str = ""


class FallbackLauncher:
    def __init__(
        self,
        *,
        binary: str = "claude",
        model_id: str,
        max_turns: int = 25,
        project_dir: str | None = None,
        hooks: DispatchHooks | None = None,
        spawn_grace: float = 0.5,
        base_env: Mapping[str, str] | None = None,
    ) -> None:
        self.binary = binary
        self.model_id = model_id
        self.max_turns = max_turns
        self.project_dir = project_dir or None
        self._hooks = hooks or DispatchHooks()
        self.spawn_grace = spawn_grace
        self._base_env = base_env
        self._supervisors: set[asyncio.Task[int]] = set()

    def build_argv(self, prompt: str) -> list[str]:
        return [
            self.binary,
            "-p", prompt,
            "--model", self.model_id,
            "--max-turns", str(self.max_turns),
            "--dangerously-skip-permissions",
        ]

    async def launch(self, room: str, prompt: str) -> LaunchResult:
        logger.info("[%s] fallback worker: %s (%s)", room, self.binary, self.model_id)
        try:
            proc = await self._spawn(prompt)
        except SpawnError as exc:
            logger.error("[%s] worker spawn failed: %s", room, exc)
            return LaunchResult(success=False, room=room, message=f"Process error: {exc}")

        output: list[str] = []
        supervisor = asyncio.create_task(self._supervise(room, proc, output), name=f"worker:{proc.pid}")
        self._supervisors.add(supervisor)
        supervisor.add_done_callback(self._supervisors.discard)

        done, _ = await asyncio.wait({supervisor}, timeout=self.spawn_grace)
        if done:
            code = supervisor.result()
            text = "".join(output)
            return LaunchResult(
                success=code == 0,
                room=room,
                message=f"Process completed (code: {code})",
                pid=proc.pid,
                exit_code=code,
                output=text[:MAX_RESULT_OUTPUT],
            )

        await call_hook("on_spawned", self._hooks.on_spawned, room, proc.pid)
        return LaunchResult(
            success=True,
            room=room,
            message=f"Fallback worker PID {proc.pid} for {room}",
            pid=proc.pid,
        )

    async def _spawn(self, prompt: str) -> asyncio.subprocess.Process:
        try:
            return await asyncio.create_subprocess_exec(
                *self.build_argv(prompt),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=self.project_dir,
                env=worker_env(self._base_env),
                start_new_session=True,
            )
        except OSError as exc:
            raise SpawnError(str(exc), binary=self.binary) from exc

    async def wait(self, timeout: float | None = None) -> None:
        if self._supervisors:
            await asyncio.wait(set(self._supervisors), timeout=timeout)

    @property
    def running(self) -> int:
        return sum(1 for t in self._supervisors if not t.done())

    async def _supervise(self, room: str, proc: asyncio.subprocess.Process, output: list[str]) -> int:
        pumps = await asyncio.gather(
            self._pump(room, proc.stdout, output),
            self._pump(room, proc.stderr, output),
            return_exceptions=True,
        )
        for failure in pumps:
            if isinstance(failure, Exception):
                logger.warning("[%s] worker output stream failed: %s", room, failure)
        code = await proc.wait()
        await call_hook("on_complete", self._hooks.on_complete, room, "".join(output), code)
        return code

    async def _pump(self, room: str, stream: asyncio.StreamReader | None, output: list[str]) -> None:
        # Chunked reads: readline() gives up on lines over the stream limit
        if stream is None:
            return
        pending = b""
        while True:
            chunk = await stream.read(READ_CHUNK)
            if not chunk:
                break
            pending += chunk
            *lines, pending = pending.split(b"\n")
            for line in lines:
                await self._emit(room, line + b"\n", output)
        if pending:
            await self._emit(room, pending, output)

    async def _emit(self, room: str, line: bytes, output: list[str]) -> None:
        text = line.decode("utf-8", errors="replace")
        output.append(text)
        await call_hook("on_output", self._hooks.on_output, room, text)
