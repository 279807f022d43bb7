"""kitty: remote control over a unix socket.  No focus needed.

Tries the window whose title matches the room hint, then any window on the
socket, then kitty's default remote-control connection.
"""

from __future__ import annotations

import logging

from roomdispatch.errors import truncate
from roomdispatch.rooms.registry import Room, TransportKind
from roomdispatch.shell import CommandRunner, run_command
from roomdispatch.transports.base import TransportResult
from roomdispatch.transports.escaping import strip_controls

logger = logging.getLogger(__name__)


class KittyTransport:
    kind = TransportKind.SOCKET
    name = "kitty"

    def __init__(
        self,
        *,
        socket_path: str = "/tmp/kitty-operator.sock",
        runner: CommandRunner = run_command,
        timeout: float = 30.0,
    ) -> None:
        self.socket_path = socket_path
        self._runner = runner
        self._timeout = timeout

    def attempts(self, room: Room) -> list[list[str]]:
        to = f"unix:{self.socket_path}"
        return [
            ["kitty", "@", "--to", to, "send-text", "--match", f"title:{room.match_hint}", "--stdin"],
            ["kitty", "@", "--to", to, "send-text", "--stdin"],
            ["kitty", "@", "send-text", "--stdin"],
        ]

    async def send(self, room: Room, text: str) -> TransportResult:
        payload = strip_controls(text) + "\r"
        last_error = ""
        for argv in self.attempts(room):
            out = await self._runner(argv, input_text=payload, timeout=self._timeout)
            if out.ok:
                logger.info("%s kitty send-text to %s", room.emoji or "*", room.match_hint)
                return TransportResult(
                    success=True,
                    message=f"Sent to kitty [{room.id}]",
                    room=room.id,
                    transport=self.name,
                    data={"app": room.target_app, "ipc": str(self.kind), "length": len(text)},
                )
            last_error = out.stderr or out.stdout
            logger.debug("kitty attempt failed (%s): %s", " ".join(argv[:4]), last_error)

        logger.warning("kitty send-text failed for [%s]: %s", room.id, last_error)
        return TransportResult(
            success=False,
            message=f"kitty send-text failed [{room.id}]: {truncate(last_error)}",
            room=room.id,
            transport=self.name,
        )
