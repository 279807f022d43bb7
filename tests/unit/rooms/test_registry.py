"""Tests for the room registry."""

from __future__ import annotations

import logging

import pytest

from roomdispatch.errors import ConfigurationError
from roomdispatch.rooms.registry import DEFAULT_ROOMS, Room, RoomRegistry, TransportKind


class TestRoom:
    def test_requires_focus_only_for_keystroke(self) -> None:
        for room in DEFAULT_ROOMS:
            assert room.requires_focus == (room.transport is TransportKind.KEYSTROKE)

    def test_from_dict_defaults(self) -> None:
        room = Room.from_dict({"id": "lab", "transport": "socket"})
        assert room.label == "Lab"
        assert room.target_app == "lab"
        assert room.process_name == "lab"
        assert room.match_hint == "lab"

    def test_from_dict_unknown_transport(self) -> None:
        with pytest.raises(ConfigurationError):
            Room.from_dict({"id": "lab", "transport": "carrier-pigeon"})

    def test_from_dict_missing_id(self) -> None:
        with pytest.raises(ConfigurationError):
            Room.from_dict({"transport": "socket"})

    def test_room_is_immutable(self) -> None:
        room = DEFAULT_ROOMS[0]
        with pytest.raises(AttributeError):
            room.label = "changed"  # type: ignore[misc]


class TestRoomRegistry:
    def test_default_table(self) -> None:
        reg = RoomRegistry()
        assert len(reg) == 9
        assert reg.default.id == "builder"
        assert "vault" in reg

    def test_resolve_known_room(self, caplog: pytest.LogCaptureFixture) -> None:
        reg = RoomRegistry()
        with caplog.at_level(logging.WARNING):
            assert reg.resolve("vault").id == "vault"
        assert caplog.records == []

    @pytest.mark.parametrize("room_id", ["foo", "", None, "BUILDER", "vault "])
    def test_resolve_unknown_logs_one_warning(self, room_id: str | None, caplog: pytest.LogCaptureFixture) -> None:
        reg = RoomRegistry()
        with caplog.at_level(logging.WARNING, logger="roomdispatch.rooms.registry"):
            room = reg.resolve(room_id)
        assert room.id == "builder"
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1

    def test_default_must_be_registered(self) -> None:
        with pytest.raises(ConfigurationError):
            RoomRegistry(DEFAULT_ROOMS, default_room="nowhere")

    def test_duplicate_ids_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            RoomRegistry([DEFAULT_ROOMS[0], DEFAULT_ROOMS[0]], default_room="builder")

    def test_from_config_custom_rooms(self) -> None:
        reg = RoomRegistry.from_config(
            [{"id": "main", "transport": "cli_pane", "target_app": "WezTerm"}],
            default_room="main",
        )
        assert reg.ids() == ["main"]
        assert reg.default.transport is TransportKind.CLI_PANE

    def test_from_config_empty_uses_builtin(self) -> None:
        reg = RoomRegistry.from_config(None, default_room="operator")
        assert reg.default.id == "operator"
        assert len(reg) == len(DEFAULT_ROOMS)
