"""Action-dispatched entry point.

``CommandSurface.execute({"action": ..., "payload": {...}})`` is the only
way in from outside.  It applies the recursion guard, then routes to the
dispatch pipeline, the terminal router, broadcast or a registry listing.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from roomdispatch.dispatch.broadcast import broadcast
from roomdispatch.dispatch.pipeline import DispatchReceipt, Dispatcher
from roomdispatch.errors import OrchestratorError, RecursionBlockedError, truncate
from roomdispatch.guard import is_recursive_worker
from roomdispatch.rooms.registry import RoomRegistry
from roomdispatch.rooms.routing import coerce_priority, room_to_agent_type, tier_to_room
from roomdispatch.transports.router import TerminalRouter

logger = logging.getLogger(__name__)

ACTIONS = ("create_task", "prompt", "stdin", "broadcast", "list_terminals", "list_agents")


@dataclass(slots=True)
class CommandResult:
    success: bool
    message: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


def _receipt_result(receipt: DispatchReceipt) -> CommandResult:
    return CommandResult(success=receipt.success, message=receipt.message, data=receipt.to_dict())


def task_prompt(payload: Mapping[str, Any]) -> tuple[str | None, int, str]:
    """Pull (tier, priority, prompt) out of a ``create_task`` payload."""
    source = payload.get("source") if isinstance(payload.get("source"), dict) else {}
    category = source.get("category") if isinstance(source.get("category"), dict) else {}
    transcription = source.get("transcription") if isinstance(source.get("transcription"), dict) else {}
    priority = coerce_priority(payload.get("priority"))
    text = transcription.get("text") or "No transcription"
    prompt = (
        f"Task (priority {priority}, category {category.get('tile_id') or 'general'}): "
        f'"{text}" Implement the requested changes.'
    )
    return category.get("tier"), priority, prompt


class CommandSurface:
    def __init__(
        self,
        dispatcher: Dispatcher,
        router: TerminalRouter,
        *,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.dispatcher = dispatcher
        self.router = router
        self._environ = environ
        self._handlers: dict[str, Callable[[dict[str, Any]], Any]] = {
            "create_task": self._create_task,
            "prompt": self._prompt,
            "stdin": self._stdin,
            "broadcast": self._broadcast,
            "list_terminals": self._list_terminals,
            "list_agents": self._list_agents,
        }

    @property
    def registry(self) -> RoomRegistry:
        return self.dispatcher.registry

    async def execute(self, command: Mapping[str, Any]) -> CommandResult:
        if is_recursive_worker(self._environ):
            err = RecursionBlockedError(
                "Blocked: recursive dispatch detected. This process is already a dispatched worker."
            )
            logger.warning("Recursion guard: %s", err)
            return CommandResult(success=False, message=str(err), data={"blocked": True})

        action = str(command.get("action", ""))
        payload = command.get("payload")
        payload = dict(payload) if isinstance(payload, Mapping) else {}

        handler = self._handlers.get(action)
        if handler is None:
            logger.info("Unrecognised action %r, forwarding to %s", action, self.registry.default.id)
            receipt = await self.dispatcher.dispatch(
                self.registry.default.id, json.dumps(dict(command), default=str)
            )
            return _receipt_result(receipt)
        return await handler(payload)

    async def _create_task(self, payload: dict[str, Any]) -> CommandResult:
        tier, priority, prompt = task_prompt(payload)
        room = tier_to_room(tier, self.registry.default.id)
        return _receipt_result(await self.dispatcher.dispatch(room, prompt, priority))

    async def _prompt(self, payload: dict[str, Any]) -> CommandResult:
        room = payload.get("room") or self.registry.default.id
        receipt = await self.dispatcher.dispatch(room, payload.get("prompt"), payload.get("priority", 3))
        return _receipt_result(receipt)

    async def _stdin(self, payload: dict[str, Any]) -> CommandResult:
        text = payload.get("text")
        if not isinstance(text, str) or not text:
            return CommandResult(success=False, message="No text provided for STDIN")
        room_id = payload.get("room") or self.registry.default.id
        room = self.registry.get(room_id)
        if room is None:
            return CommandResult(success=False, message=f"Unknown room: {room_id}")
        result = await self.router.send(room, text)
        return CommandResult(
            success=result.success,
            message=result.message,
            data={"room": result.room, "transport": result.transport, **result.data},
        )

    async def _broadcast(self, payload: dict[str, Any]) -> CommandResult:
        prompt = payload.get("prompt")
        if not isinstance(prompt, str) or not prompt.strip():
            return CommandResult(success=False, message="No prompt provided")
        rooms = payload.get("rooms") or None
        if rooms is not None and (
            not isinstance(rooms, (list, tuple)) or not all(isinstance(r, str) for r in rooms)
        ):
            return CommandResult(success=False, message="rooms must be a list of room ids")
        result = await broadcast(self.dispatcher, prompt, rooms)
        return CommandResult(
            success=result.success,
            message=f"Broadcast: {result.succeeded}/{len(result.targets)} succeeded",
            data={"targets": result.targets, "succeeded": result.succeeded, "failed": result.failed},
        )

    async def _list_terminals(self, payload: dict[str, Any]) -> CommandResult:
        entries = [
            {
                "room": room.id,
                "label": room.label,
                "emoji": room.emoji,
                "app": room.target_app,
                "ipc": str(room.transport),
                "parallel": not room.requires_focus,
                "agent_type": room_to_agent_type(room.id),
            }
            for room in self.registry
        ]
        return CommandResult(success=True, message=f"{len(entries)} terminals registered", data=entries)

    async def _list_agents(self, payload: dict[str, Any]) -> CommandResult:
        if not await self.dispatcher.initialize():
            return CommandResult(success=False, message="Orchestrator not available")
        try:
            listing = await self.dispatcher.client.list_agents()
        except OrchestratorError as exc:
            logger.warning("Agent listing failed: %s", exc)
            return CommandResult(success=False, message=f"Orchestrator not available: {truncate(str(exc))}")
        return CommandResult(success=True, message=listing.strip(), data={"raw": listing})
