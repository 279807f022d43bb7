"""Pure routing rules: tier -> room, priority -> label, room -> agent type."""

from __future__ import annotations

from typing import Any

DEFAULT_PRIORITY = 3

TIER_TO_ROOM: dict[str, str] = {
    "RED": "vault",
    "BLUE": "builder",
    "GREEN": "operator",
    "PURPLE": "voice",
    "CYAN": "laboratory",
    "AMBER": "performer",
    "INDIGO": "architect",
    "TEAL": "navigator",
}

PRIORITY_LABELS: dict[int, str] = {
    1: "critical",
    2: "high",
    3: "normal",
    4: "low",
    5: "low",
}

ROOM_TO_AGENT_TYPE: dict[str, str] = {
    "builder": "coder",
    "architect": "planner",
    "operator": "ops",
    "vault": "security",
    "voice": "writer",
    "laboratory": "researcher",
    "performer": "coder",
    "navigator": "researcher",
    "network": "writer",
}

DEFAULT_AGENT_TYPE = "coder"

MODEL_TIERS = ("opus", "sonnet", "haiku")

DEFAULT_MODEL_IDS: dict[str, str] = {
    "opus": "claude-opus-4-6",
    "sonnet": "claude-sonnet-4-5-20250929",
    "haiku": "claude-haiku-4-5-20251001",
}


def tier_to_room(tier: str | None, default_room: str = "builder") -> str:
    if not tier:
        return default_room
    return TIER_TO_ROOM.get(tier.upper(), default_room)


def coerce_priority(value: Any) -> int:
    """Clamp a priority into [1, 5]; anything else becomes normal (3)."""
    if isinstance(value, bool):
        return DEFAULT_PRIORITY
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            return DEFAULT_PRIORITY
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or not 1 <= value <= 5:
        return DEFAULT_PRIORITY
    return value


def priority_to_label(priority: Any) -> str:
    return PRIORITY_LABELS[coerce_priority(priority)]


def room_to_agent_type(room_id: str) -> str:
    return ROOM_TO_AGENT_TYPE.get(room_id, DEFAULT_AGENT_TYPE)


def model_tier(model: str) -> str:
    """Reduce a configured model name to opus | sonnet | haiku."""
    name = model.lower()
    if "opus" in name:
        return "opus"
    if "haiku" in name:
        return "haiku"
    return "sonnet"


def resolve_model_id(tier: str, model_ids: dict[str, str] | None = None) -> str:
    ids = {**DEFAULT_MODEL_IDS, **(model_ids or {})}
    return ids.get(tier, ids["sonnet"])
