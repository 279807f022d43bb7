"""Pick a transport by the room's transport kind and deliver text."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from roomdispatch.errors import TransportError, truncate
from roomdispatch.rooms.registry import Room, TransportKind
from roomdispatch.shell import CommandRunner, run_command
from roomdispatch.transports.base import Transport, TransportResult
from roomdispatch.transports.iterm import ITermTransport
from roomdispatch.transports.kitty import KittyTransport
from roomdispatch.transports.queue import SerializationQueue
from roomdispatch.transports.system_events import SystemEventsTransport
from roomdispatch.transports.terminal_app import TerminalAppTransport
from roomdispatch.transports.wezterm import WezTermTransport

logger = logging.getLogger(__name__)


def default_transports(
    *,
    runner: CommandRunner = run_command,
    timeout: float = 30.0,
    kitty_socket: str = "/tmp/kitty-operator.sock",
    paste_threshold: int = 100,
    focus_delay: float = 0.3,
) -> dict[TransportKind, Transport]:
    return {
        TransportKind.SESSION_WRITE: ITermTransport(runner=runner, timeout=timeout),
        TransportKind.WINDOW_SCRIPT: TerminalAppTransport(runner=runner, timeout=timeout),
        TransportKind.SOCKET: KittyTransport(socket_path=kitty_socket, runner=runner, timeout=timeout),
        TransportKind.CLI_PANE: WezTermTransport(runner=runner, timeout=timeout),
        TransportKind.KEYSTROKE: SystemEventsTransport(
            runner=runner,
            timeout=timeout,
            paste_threshold=paste_threshold,
            focus_delay=focus_delay,
        ),
    }


class TerminalRouter:
    def __init__(
        self,
        transports: Mapping[TransportKind, Transport],
        queue: SerializationQueue | None = None,
    ) -> None:
        self._transports = dict(transports)
        self.queue = queue or SerializationQueue()

    def transport_for(self, room: Room) -> Transport:
        transport = self._transports.get(room.transport)
        if transport is None:
            raise TransportError(
                f"No transport registered for {room.transport}",
                transport=str(room.transport),
                room=room.id,
            )
        return transport

    async def send(self, room: Room, text: str) -> TransportResult:
        if not text:
            return TransportResult(
                success=False,
                message="No text provided",
                room=room.id,
                transport=str(room.transport),
            )
        try:
            transport = self.transport_for(room)
            if room.requires_focus:
                return await self.queue.run(lambda: transport.send(room, text))
            return await transport.send(room, text)
        except Exception as exc:
            logger.warning("Send to %s via %s failed: %s", room.id, room.transport, exc)
            return TransportResult(
                success=False,
                message=f"{room.transport} send to {room.id} failed: {truncate(str(exc))}",
                room=room.id,
                transport=str(room.transport),
            )
