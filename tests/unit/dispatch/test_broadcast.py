"""Tests for broadcast fan-out."""

from __future__ import annotations

import pytest

from roomdispatch.dispatch.broadcast import broadcast
from roomdispatch.dispatch.pipeline import DispatchReceipt
from tests.helpers.fakes import FakeOrchestrator, StubLauncher, make_dispatcher


class TestBroadcast:
    @pytest.mark.asyncio
    async def test_counts_successes_and_failures(self) -> None:
        launcher = StubLauncher(fail_rooms=["vault"])
        dispatcher = make_dispatcher(FakeOrchestrator(available=False), launcher)

        result = await broadcast(dispatcher, "status report", ["builder", "vault", "voice"])

        assert result.targets == ["builder", "vault", "voice"]
        assert result.succeeded == 2
        assert result.failed == 1
        assert result.success
        assert sorted(room for room, _ in launcher.calls) == ["builder", "vault", "voice"]

    @pytest.mark.asyncio
    async def test_defaults_to_every_room(self) -> None:
        launcher = StubLauncher()
        dispatcher = make_dispatcher(FakeOrchestrator(available=False), launcher)

        result = await broadcast(dispatcher, "hello")

        assert len(result.targets) == len(dispatcher.registry)
        assert result.succeeded == len(dispatcher.registry)

    @pytest.mark.asyncio
    async def test_exception_counts_as_failure(self) -> None:
        dispatcher = make_dispatcher(FakeOrchestrator(available=False))
        original = dispatcher.dispatch

        async def flaky(room, text, priority=3) -> DispatchReceipt:
            if room == "voice":
                raise RuntimeError("lost")
            return await original(room, text, priority)

        dispatcher.dispatch = flaky  # type: ignore[method-assign]
        result = await broadcast(dispatcher, "hi", ["builder", "voice"])

        assert result.succeeded == 1
        assert result.failed == 1
        assert len(result.receipts) == 1

    @pytest.mark.asyncio
    async def test_all_failed(self) -> None:
        launcher = StubLauncher(fail_rooms=["builder", "vault"])
        dispatcher = make_dispatcher(FakeOrchestrator(available=False), launcher)
        result = await broadcast(dispatcher, "hi", ["builder", "vault"])
        assert not result.success
        assert result.failed == 2
