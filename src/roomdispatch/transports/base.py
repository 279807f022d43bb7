"""Transport interface and the shared AppleScript runner."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from roomdispatch.errors import truncate
from roomdispatch.rooms.registry import Room, TransportKind
from roomdispatch.shell import CommandRunner, run_command

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TransportResult:
    success: bool
    message: str
    room: str
    transport: str
    data: dict[str, Any] = field(default_factory=dict)


class Transport(Protocol):
    kind: TransportKind

    async def send(self, room: Room, text: str) -> TransportResult: ...


class AppleScriptTransport:
    """Base for transports that drive an app through ``osascript``."""

    kind: TransportKind
    name = "applescript"

    def __init__(self, *, runner: CommandRunner = run_command, timeout: float = 30.0) -> None:
        self._runner = runner
        self._timeout = timeout

    async def run_script(self, script: str, room: Room) -> TransportResult:
        out = await self._runner(["osascript", "-e", script], timeout=self._timeout)
        if not out.ok:
            logger.warning("AppleScript failed for %s [%s]: %s", room.target_app, room.id, out.stderr)
            return TransportResult(
                success=False,
                message=f"AppleScript failed for {room.target_app} [{room.id}]: {truncate(out.stderr)}",
                room=room.id,
                transport=self.name,
            )
        logger.info("%s dispatched to %s [%s]", room.emoji or "*", room.target_app, room.id)
        return TransportResult(
            success=True,
            message=f"Sent to {room.target_app} [{room.id}]",
            room=room.id,
            transport=self.name,
            data={"app": room.target_app, "ipc": str(self.kind)},
        )
