"""WezTerm: ``wezterm cli send-text`` to a pane found by title."""

from __future__ import annotations

import json
import logging

from roomdispatch.errors import truncate
from roomdispatch.rooms.registry import Room, TransportKind
from roomdispatch.shell import CommandRunner, run_command
from roomdispatch.transports.base import TransportResult
from roomdispatch.transports.escaping import strip_controls

logger = logging.getLogger(__name__)


def find_pane(pane_list: str, hint: str) -> str | None:
    """Return the id of the first pane whose title contains ``hint``."""
    try:
        panes = json.loads(pane_list)
    except json.JSONDecodeError:
        return None
    if not isinstance(panes, list):
        return None
    for pane in panes:
        if isinstance(pane, dict) and hint in str(pane.get("title", "")):
            pane_id = pane.get("pane_id")
            if pane_id is not None:
                return str(pane_id)
    return None


class WezTermTransport:
    kind = TransportKind.CLI_PANE
    name = "wezterm"

    def __init__(self, *, runner: CommandRunner = run_command, timeout: float = 30.0) -> None:
        self._runner = runner
        self._timeout = timeout

    async def send(self, room: Room, text: str) -> TransportResult:
        listing = await self._runner(["wezterm", "cli", "list", "--format", "json"], timeout=self._timeout)
        pane_id = find_pane(listing.stdout, room.match_hint) if listing.ok else None

        argv = ["wezterm", "cli", "send-text"]
        if pane_id is not None:
            argv.extend(["--pane-id", pane_id])
        out = await self._runner(argv, input_text=strip_controls(text) + "\n", timeout=self._timeout)
        if not out.ok:
            logger.warning("WezTerm send-text failed for [%s]: %s", room.id, out.stderr)
            return TransportResult(
                success=False,
                message=f"WezTerm send-text failed [{room.id}]: {truncate(out.stderr)}",
                room=room.id,
                transport=self.name,
            )

        logger.info("%s WezTerm send-text to %s", room.emoji or "*", pane_id or "active pane")
        return TransportResult(
            success=True,
            message=f"Sent to WezTerm [{room.id}]",
            room=room.id,
            transport=self.name,
            data={"app": room.target_app, "ipc": str(self.kind), "pane_id": pane_id, "length": len(text)},
        )
