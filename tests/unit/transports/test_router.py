"""Tests for the terminal router."""

from __future__ import annotations

import asyncio

import pytest

from roomdispatch.rooms.registry import Room, RoomRegistry, TransportKind
from roomdispatch.transports.base import TransportResult
from roomdispatch.transports.router import TerminalRouter, default_transports
from tests.helpers.fakes import FakeRunner

ROOMS = RoomRegistry()


class SlowTransport:
    """Records overlapping sends."""

    def __init__(self, kind: TransportKind, delay: float = 0.01) -> None:
        self.kind = kind
        self.delay = delay
        self.active = 0
        self.max_active = 0
        self.sent: list[tuple[str, str]] = []

    async def send(self, room: Room, text: str) -> TransportResult:
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        await asyncio.sleep(self.delay)
        self.active -= 1
        self.sent.append((room.id, text))
        return TransportResult(True, f"ok {room.id}", room.id, str(self.kind))


class ExplodingTransport:
    kind = TransportKind.CLI_PANE

    async def send(self, room: Room, text: str) -> TransportResult:
        raise OSError("wezterm vanished")


class TestTerminalRouter:
    def test_default_transports_cover_every_kind(self) -> None:
        transports = default_transports(runner=FakeRunner())
        assert set(transports) == set(TransportKind)
        for kind, transport in transports.items():
            assert transport.kind is kind

    @pytest.mark.asyncio
    async def test_keystroke_sends_never_overlap(self) -> None:
        keystroke = SlowTransport(TransportKind.KEYSTROKE)
        router = TerminalRouter({TransportKind.KEYSTROKE: keystroke})
        rooms = [ROOMS.get(r) for r in ("architect", "laboratory", "navigator", "network")]

        results = await asyncio.gather(*(router.send(room, f"p-{room.id}") for room in rooms))

        assert all(r.success for r in results)
        assert keystroke.max_active == 1
        assert [room for room, _ in keystroke.sent] == ["architect", "laboratory", "navigator", "network"]
        assert router.queue.completed == 4

    @pytest.mark.asyncio
    async def test_non_focus_sends_bypass_queue(self) -> None:
        socket = SlowTransport(TransportKind.SESSION_WRITE)
        router = TerminalRouter({TransportKind.SESSION_WRITE: socket})
        room = ROOMS.get("builder")

        await asyncio.gather(router.send(room, "one"), router.send(room, "two"))

        assert socket.max_active == 2
        assert router.queue.completed == 0

    @pytest.mark.asyncio
    async def test_empty_text(self) -> None:
        router = TerminalRouter({})
        result = await router.send(ROOMS.get("builder"), "")
        assert not result.success
        assert result.message == "No text provided"

    @pytest.mark.asyncio
    async def test_missing_transport_is_reported(self) -> None:
        router = TerminalRouter({})
        result = await router.send(ROOMS.get("vault"), "hi")
        assert not result.success
        assert "No transport registered" in result.message

    @pytest.mark.asyncio
    async def test_transport_exception_becomes_failure(self) -> None:
        router = TerminalRouter({TransportKind.CLI_PANE: ExplodingTransport()})
        result = await router.send(ROOMS.get("vault"), "hi")
        assert not result.success
        assert "wezterm vanished" in result.message
        assert result.room == "vault"
