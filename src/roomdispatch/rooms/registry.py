"""Static room table and lookup.

A room is a logical destination bound to one terminal application and one
IPC transport.  The table is loaded once and never mutated; lookups of an
unknown id resolve to the configured default room.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from roomdispatch.errors import ConfigurationError

logger = logging.getLogger(__name__)


class TransportKind(StrEnum):
    """How text reaches a room's terminal application."""

    SESSION_WRITE = "session_write"  # iTerm2 `write text`
    WINDOW_SCRIPT = "window_script"  # Terminal.app `do script`
    SOCKET = "socket"  # kitty remote control
    CLI_PANE = "cli_pane"  # wezterm cli send-text
    KEYSTROKE = "keystroke"  # System Events, steals focus


@dataclass(frozen=True, slots=True)
class Room:
    id: str
    label: str
    transport: TransportKind
    target_app: str
    process_name: str
    match_hint: str
    emoji: str = ""

    @property
    def requires_focus(self) -> bool:
        return self.transport is TransportKind.KEYSTROKE

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Room:
        room_id = str(raw.get("id") or "").strip()
        if not room_id:
            raise ConfigurationError(f"Room entry without id: {dict(raw)!r}")
        try:
            transport = TransportKind(str(raw.get("transport", "")))
        except ValueError:
            raise ConfigurationError(
                f"Room {room_id!r} has unknown transport {raw.get('transport')!r}"
            ) from None
        app = str(raw.get("target_app") or room_id)
        return cls(
            id=room_id,
            label=str(raw.get("label") or room_id.title()),
            transport=transport,
            target_app=app,
            process_name=str(raw.get("process_name") or app),
            match_hint=str(raw.get("match_hint") or room_id),
            emoji=str(raw.get("emoji") or ""),
        )


DEFAULT_ROOMS: tuple[Room, ...] = (
    Room("builder", "Builder", TransportKind.SESSION_WRITE, "iTerm", "iTerm2", "builder", "🔨"),
    Room("architect", "Architect", TransportKind.KEYSTROKE, "Code", "Code", "architect", "📐"),
    Room("operator", "Operator", TransportKind.SOCKET, "kitty", "kitty", "operator", "🎩"),
    Room("vault", "Vault", TransportKind.CLI_PANE, "WezTerm", "WezTerm", "vault", "🔒"),
    Room("voice", "Voice", TransportKind.WINDOW_SCRIPT, "Terminal", "Terminal", "voice", "🎤"),
    Room("laboratory", "Laboratory", TransportKind.KEYSTROKE, "Cursor", "Cursor", "laboratory", "🧪"),
    Room("performer", "Performer", TransportKind.WINDOW_SCRIPT, "Terminal", "Terminal", "performer", "🎬"),
    Room("navigator", "Navigator", TransportKind.KEYSTROKE, "rio", "rio", "navigator", "🧭"),
    Room("network", "Network", TransportKind.KEYSTROKE, "Messages", "Messages", "network", "🌐"),
)

DEFAULT_ROOM_ID = "builder"


class RoomRegistry:
    """Immutable id -> Room mapping with default-room fallback."""

    def __init__(self, rooms: Iterable[Room] = DEFAULT_ROOMS, default_room: str = DEFAULT_ROOM_ID) -> None:
        self._rooms: dict[str, Room] = {}
        for room in rooms:
            if room.id in self._rooms:
                raise ConfigurationError(f"Duplicate room id: {room.id!r}")
            self._rooms[room.id] = room
        if default_room not in self._rooms:
            raise ConfigurationError(f"Default room {default_room!r} is not registered")
        self._default_id = default_room

    @classmethod
    def from_config(cls, rooms: list[dict[str, Any]] | None, default_room: str) -> RoomRegistry:
        if not rooms:
            return cls(DEFAULT_ROOMS, default_room)
        return cls([Room.from_dict(r) for r in rooms], default_room)

    @property
    def default(self) -> Room:
        return self._rooms[self._default_id]

    def get(self, room_id: str | None) -> Room | None:
        if room_id is None:
            return None
        return self._rooms.get(room_id)

    def resolve(self, room_id: str | None) -> Room:
        """Return the registered room or the default one.  Never fails."""
        room = self.get(room_id)
        if room is not None:
            return room
        logger.warning("Unknown room %r, falling back to %s", room_id, self._default_id)
        return self.default

    def ids(self) -> list[str]:
        return list(self._rooms)

    def __iter__(self):
        return iter(self._rooms.values())

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._rooms
