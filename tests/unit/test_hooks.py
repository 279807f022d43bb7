"""Tests for dispatch hooks and the chat webhook."""

from __future__ import annotations

import json

import httpx
import pytest

from roomdispatch.hooks import (
    DispatchHooks,
    WebhookNotifier,
    call_hook,
    tracking_id,
    with_chat_summaries,
)


class TestCallHook:
    @pytest.mark.asyncio
    async def test_absent_hook(self) -> None:
        assert await call_hook("x", None, 1) is None

    @pytest.mark.asyncio
    async def test_sync_and_async(self) -> None:
        async def double(n: int) -> int:
            return n * 2

        assert await call_hook("sync", lambda n: n + 1, 1) == 2
        assert await call_hook("async", double, 4) == 8

    @pytest.mark.asyncio
    async def test_raising_hook_is_contained(self, caplog: pytest.LogCaptureFixture) -> None:
        def bad() -> None:
            raise KeyError("missing")

        assert await call_hook("bad", bad) is None
        assert any("Hook bad failed" in r.getMessage() for r in caplog.records)


class TestTrackingId:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, None),
            ("", None),
            ("  rt-9 ", "rt-9"),
            ({"task_id": "a"}, "a"),
            ({"taskId": 17}, "17"),
            ({"other": 1}, None),
        ],
    )
    def test_values(self, value: object, expected: str | None) -> None:
        assert tracking_id(value) == expected


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestWebhookNotifier:
    @pytest.mark.asyncio
    async def test_posts_prefixed_content(self) -> None:
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(204)

        async with _client(handler) as client:
            notify = WebhookNotifier("https://chat.example/hook", client=client, max_chars=20)
            assert await notify("vault", "x" * 50)

        assert seen == [{"content": ("[vault] " + "x" * 50)[:20]}]

    @pytest.mark.asyncio
    async def test_http_error_returns_false(self) -> None:
        async with _client(lambda request: httpx.Response(500)) as client:
            assert not await WebhookNotifier("https://chat.example/hook", client=client)("vault", "hi")

    @pytest.mark.asyncio
    async def test_connection_error_returns_false(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _client(handler) as client:
            assert not await WebhookNotifier("https://chat.example/hook", client=client)("vault", "hi")


class TestChatSummaries:
    @pytest.mark.asyncio
    async def test_completion_posts_summary(self) -> None:
        completed: list[tuple] = []
        posted: list[tuple[str, str]] = []

        async def notifier(room: str, content: str) -> bool:
            posted.append((room, content))
            return True

        hooks = with_chat_summaries(
            DispatchHooks(on_complete=lambda *args: completed.append(args)), notifier
        )
        await hooks.on_complete("builder", "  all green  ", 0)
        await hooks.on_complete("vault", "", 2)

        assert completed == [("builder", "  all green  ", 0), ("vault", "", 2)]
        assert posted == [("builder", "completed\nall green"), ("vault", "failed (code 2)")]
        assert hooks.on_chat is notifier

    @pytest.mark.asyncio
    async def test_other_hooks_preserved(self) -> None:
        def ctx(room: str) -> str:
            return "c"

        hooks = with_chat_summaries(DispatchHooks(room_context=ctx), lambda room, content: None)
        assert hooks.room_context is ctx
        await hooks.on_complete("builder", "out", 0)
