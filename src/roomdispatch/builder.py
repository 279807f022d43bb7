"""Wire a :class:`CommandSurface` from a :class:`DispatchConfig`."""

from __future__ import annotations

from roomdispatch.audit import AuditLog
from roomdispatch.commands import CommandSurface
from roomdispatch.config import DispatchConfig
from roomdispatch.dispatch.launcher import FallbackLauncher
from roomdispatch.dispatch.pipeline import Dispatcher
from roomdispatch.hooks import DispatchHooks, WebhookNotifier, with_chat_summaries
from roomdispatch.orchestrator.client import ClaudeFlowClient, OrchestratorClient
from roomdispatch.orchestrator.poller import CompletionPoller
from roomdispatch.rooms.routing import model_tier, resolve_model_id
from roomdispatch.shell import CommandRunner, run_command
from roomdispatch.transports.router import TerminalRouter, default_transports


def build_surface(
    config: DispatchConfig,
    *,
    hooks: DispatchHooks | None = None,
    client: OrchestratorClient | None = None,
    runner: CommandRunner = run_command,
) -> CommandSurface:
    hooks = hooks or DispatchHooks()
    if config.chat_webhook_url:
        hooks = with_chat_summaries(hooks, WebhookNotifier(config.chat_webhook_url))

    tier = model_tier(config.worker_model)
    client = client or ClaudeFlowClient(
        command=config.orchestrator_command,
        runner=runner,
        timeout=config.command_timeout,
    )
    poller = CompletionPoller(
        client,
        hooks,
        interval=config.poll_interval,
        timeout=config.poll_timeout,
    )
    launcher = FallbackLauncher(
        binary=config.claude_binary,
        model_id=resolve_model_id(tier, config.model_ids),
        max_turns=config.worker_max_turns,
        project_dir=config.project_dir,
        hooks=hooks,
        spawn_grace=config.spawn_grace,
    )
    dispatcher = Dispatcher(
        config.build_registry(),
        client,
        poller,
        launcher,
        hooks=hooks,
        audit=AuditLog(config.audit_log_path()),
        model_tier=tier,
    )
    router = TerminalRouter(
        default_transports(
            runner=runner,
            timeout=config.command_timeout,
            kitty_socket=config.kitty_socket,
            paste_threshold=config.paste_threshold,
            focus_delay=config.focus_delay,
        )
    )
    return CommandSurface(dispatcher, router)
