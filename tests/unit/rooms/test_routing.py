"""Tests for routing rules."""

from __future__ import annotations

import pytest

from roomdispatch.rooms.registry import RoomRegistry
from roomdispatch.rooms.routing import (
    PRIORITY_LABELS,
    TIER_TO_ROOM,
    coerce_priority,
    model_tier,
    priority_to_label,
    resolve_model_id,
    room_to_agent_type,
    tier_to_room,
)


class TestTierToRoom:
    def test_every_tier_maps_to_registered_room(self) -> None:
        reg = RoomRegistry()
        for tier in TIER_TO_ROOM:
            assert tier_to_room(tier) in reg

    def test_case_insensitive(self) -> None:
        assert tier_to_room("red") == "vault"
        assert tier_to_room("Indigo") == "architect"

    @pytest.mark.parametrize("tier", [None, "", "MAGENTA"])
    def test_unknown_tier_uses_default(self, tier: str | None) -> None:
        assert tier_to_room(tier) == "builder"
        assert tier_to_room(tier, default_room="voice") == "voice"


class TestPriority:
    @pytest.mark.parametrize("value", [1, 2, 3, 4, 5])
    def test_in_range_kept(self, value: int) -> None:
        assert coerce_priority(value) == value

    @pytest.mark.parametrize("value", [0, 6, -1, 99, None, "high", 2.5, True, [], "  "])
    def test_out_of_range_becomes_normal(self, value: object) -> None:
        assert coerce_priority(value) == 3

    def test_numeric_strings(self) -> None:
        assert coerce_priority("1") == 1
        assert coerce_priority(4.0) == 4

    def test_labels(self) -> None:
        assert priority_to_label(1) == "critical"
        assert priority_to_label(2) == "high"
        assert priority_to_label(3) == "normal"
        assert priority_to_label(5) == "low"
        assert priority_to_label(42) == "normal"
        assert set(PRIORITY_LABELS) == {1, 2, 3, 4, 5}


class TestAgentTypeAndModel:
    def test_agent_types(self) -> None:
        assert room_to_agent_type("vault") == "security"
        assert room_to_agent_type("architect") == "planner"
        assert room_to_agent_type("unknown") == "coder"

    def test_model_tier(self) -> None:
        assert model_tier("claude-opus-4") == "opus"
        assert model_tier("HAIKU") == "haiku"
        assert model_tier("claude-sonnet-4") == "sonnet"
        assert model_tier("gpt-4o") == "sonnet"

    def test_default_model_ids(self) -> None:
        assert resolve_model_id("opus") == "claude-opus-4-6"
        assert resolve_model_id("sonnet") == "claude-sonnet-4-5-20250929"
        assert resolve_model_id("haiku") == "claude-haiku-4-5-20251001"

    def test_resolve_model_id_override(self) -> None:
        assert resolve_model_id("haiku", {"haiku": "my-haiku"}) == "my-haiku"
        assert resolve_model_id("opus").startswith("claude-opus")
        assert resolve_model_id("mystery") == resolve_model_id("sonnet")
