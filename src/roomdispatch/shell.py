"""Async native command execution.

Uses ``asyncio.create_subprocess_exec`` with an argv list (never a shell),
so text handed to a command is passed verbatim and cannot be interpreted
by ``sh``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CommandOutput:
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def combined(self) -> str:
        if self.stdout and self.stderr:
            return f"{self.stdout}\n{self.stderr}"
        return self.stdout or self.stderr


class CommandRunner(Protocol):
    def __call__(
        self,
        argv: Sequence[str],
        *,
        input_text: str | None = None,
        timeout: float | None = None,
    ) -> Awaitable[CommandOutput]: ...


async def run_command(
    argv: Sequence[str],
    *,
    input_text: str | None = None,
    timeout: float | None = None,
    env: Mapping[str, str] | None = None,
    cwd: str | None = None,
) -> CommandOutput:
    """Run ``argv`` to completion and capture its output."""
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.PIPE if input_text is not None else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=dict(env) if env is not None else None,
            cwd=cwd,
        )
    except FileNotFoundError:
        return CommandOutput(returncode=127, stderr=f"command not found: {argv[0]}")
    except OSError as exc:
        return CommandOutput(returncode=126, stderr=f"cannot execute {argv[0]}: {exc}")

    data = input_text.encode("utf-8") if input_text is not None else None
    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(data), timeout=timeout)
    except TimeoutError:
        proc.kill()
        await proc.wait()
        logger.debug("Command timed out after %ss: %s", timeout, argv[0])
        return CommandOutput(returncode=-1, stderr=f"{argv[0]} timed out after {timeout}s")

    return CommandOutput(
        returncode=proc.returncode if proc.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace").strip(),
        stderr=stderr.decode("utf-8", errors="replace").strip(),
    )
