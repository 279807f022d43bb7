"""Optional callbacks injected by the owner of a dispatcher.

Every hook may be absent.  A hook that raises is logged and ignored; hooks
can never abort a dispatch.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DispatchHooks:
    """Lifecycle callbacks.  Each may be sync or async."""

    # (room, prompt) -> tracking id, or a dict carrying "task_id"
    on_task_registered: Callable[[str, str], Any] | None = None
    # room -> prior output to prepend, or None
    room_context: Callable[[str], Any] | None = None
    on_output: Callable[[str, str], Any] | None = None
    on_spawned: Callable[[str, int], Any] | None = None
    on_complete: Callable[[str, str, int], Any] | None = None
    on_chat: Callable[[str, str], Any] | None = None


async def call_hook(name: str, fn: Callable[..., Any] | None, *args: Any) -> Any:
    """Invoke ``fn`` if set, awaiting coroutines.  Returns None on error."""
    if fn is None:
        return None
    try:
        result = fn(*args)
        if inspect.isawaitable(result):
            result = await result
        return result
    except Exception as exc:
        logger.warning("Hook %s failed: %s", name, exc)
        return None


def tracking_id(value: Any) -> str | None:
    """Extract a tracking id from an ``on_task_registered`` return value."""
    if value is None:
        return None
    if isinstance(value, dict):
        task_id = value.get("task_id") or value.get("taskId")
        return str(task_id) if task_id else None
    text = str(value).strip()
    return text or None


class WebhookNotifier:
    """Chat-notify hook that POSTs completion summaries to a webhook URL."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        max_chars: int = 1900,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._max_chars = max_chars
        self._client = client

    async def __call__(self, room: str, content: str) -> bool:
        body = {"content": f"[{room}] {content}"[: self._max_chars]}
        try:
            if self._client is not None:
                resp = await self._client.post(self._url, json=body, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    resp = await client.post(self._url, json=body)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Chat webhook failed for %s: %s", room, exc)
            return False
        return True


def with_chat_summaries(hooks: DispatchHooks, notifier: Callable[[str, str], Any]) -> DispatchHooks:
    """Return hooks whose completion also posts a short summary to chat."""
    inner_complete = hooks.on_complete

    async def on_complete(room: str, output: str, code: int) -> None:
        await call_hook("on_complete", inner_complete, room, output, code)
        status = "completed" if code == 0 else f"failed (code {code})"
        tail = output.strip()[-1500:]
        await call_hook("on_chat", notifier, room, f"{status}\n{tail}" if tail else status)

    return DispatchHooks(
        on_task_registered=hooks.on_task_registered,
        room_context=hooks.room_context,
        on_output=hooks.on_output,
        on_spawned=hooks.on_spawned,
        on_complete=on_complete,
        on_chat=notifier,
    )
