"""Tests for wiring a command surface from configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from roomdispatch.builder import build_surface
from roomdispatch.config import DispatchConfig
from roomdispatch.hooks import DispatchHooks, WebhookNotifier
from roomdispatch.shell import CommandOutput
from tests.helpers.fakes import FakeRunner


class TestBuildSurface:
    def test_wires_config_values(self, tmp_path: Path) -> None:
        config = DispatchConfig(
            project_dir=str(tmp_path),
            worker_model="claude-3-5-haiku",
            worker_max_turns=4,
            poll_interval=2.0,
            poll_timeout=30.0,
            default_room="vault",
        )
        surface = build_surface(config, runner=FakeRunner())
        dispatcher = surface.dispatcher

        assert dispatcher.model_tier == "haiku"
        assert dispatcher.launcher.model_id == config.model_ids["haiku"]
        assert dispatcher.launcher.max_turns == 4
        assert dispatcher.poller.interval == 2.0
        assert dispatcher.poller.timeout == 30.0
        assert dispatcher.registry.default.id == "vault"
        assert dispatcher.audit.path == tmp_path / "data" / "dispatch" / "prompts.jsonl"

    def test_webhook_wraps_completion(self, tmp_path: Path) -> None:
        config = DispatchConfig(project_dir=str(tmp_path), chat_webhook_url="https://chat.example/hook")
        original = DispatchHooks(on_complete=lambda *a: None)
        surface = build_surface(config, hooks=original, runner=FakeRunner())

        assert isinstance(surface.dispatcher.hooks.on_chat, WebhookNotifier)
        assert surface.dispatcher.hooks.on_complete is not original.on_complete

    @pytest.mark.asyncio
    async def test_list_agents_through_cli_client(self, tmp_path: Path) -> None:
        runner = FakeRunner().on(
            lambda argv: argv[-2:] == ["agent", "list"], CommandOutput(0, "agent_1 coder busy\n")
        )
        config = DispatchConfig(project_dir=str(tmp_path), orchestrator_command=["cf"])
        result = await build_surface(config, runner=runner).execute({"action": "list_agents"})

        assert result.success
        assert result.message == "agent_1 coder busy"
        assert runner.calls[0].argv == ["cf", "status"]
