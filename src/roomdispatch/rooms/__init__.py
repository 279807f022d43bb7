"""Room registry and routing rules."""

from roomdispatch.rooms.registry import DEFAULT_ROOMS, Room, RoomRegistry, TransportKind
from roomdispatch.rooms.routing import (
    coerce_priority,
    priority_to_label,
    room_to_agent_type,
    tier_to_room,
)

__all__ = [
    "DEFAULT_ROOMS",
    "Room",
    "RoomRegistry",
    "TransportKind",
    "coerce_priority",
    "priority_to_label",
    "room_to_agent_type",
    "tier_to_room",
]
