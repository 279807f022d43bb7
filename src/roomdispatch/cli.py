"""CLI entry point using Click."""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from roomdispatch import __version__
from roomdispatch.builder import build_surface
from roomdispatch.commands import CommandResult, CommandSurface
from roomdispatch.config import load_config
from roomdispatch.errors import ConfigurationError
from roomdispatch.hooks import DispatchHooks
from roomdispatch.logger import get_logger, setup_logging

console = Console()


def _print_output(room: str, chunk: str) -> None:
    click.echo(f"[{room}] {chunk.rstrip()}")


def _print_complete(room: str, output: str, code: int) -> None:
    status = "done" if code == 0 else f"exit {code}"
    click.echo(f"[{room}] {status}")


def _run(ctx: click.Context, command: dict[str, Any], *, wait: bool = False) -> CommandResult:
    surface: CommandSurface = ctx.obj["surface"]
    log = get_logger("roomdispatch.cli").bind(action=command.get("action"))

    async def go() -> CommandResult:
        result = await surface.execute(command)
        if wait and result.success:
            await surface.dispatcher.wait_idle()
        elif surface.dispatcher.launcher.running:
            # Worker pipes close when the event loop ends
            log.info("waiting for fallback workers", workers=surface.dispatcher.launcher.running)
            await surface.dispatcher.launcher.wait()
        return result

    result = asyncio.run(go())
    log.debug("command finished", success=result.success)
    return result


def _finish(ctx: click.Context, result: CommandResult) -> None:
    if ctx.obj["json"]:
        click.echo(json.dumps(result.to_dict(), default=str, ensure_ascii=False))
    else:
        click.echo(result.message)
    if not result.success:
        sys.exit(1)


@click.group()
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None, help="Config YAML file")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON")
@click.version_option(__version__, prog_name="roomdispatch")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, debug: bool, json_logs: bool, json_output: bool) -> None:
    """Route prompts to terminal rooms."""
    try:
        config = load_config(config_path=config_path)
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc
    setup_logging(debug=debug or config.debug, json_output=json_logs)

    hooks = DispatchHooks(on_output=_print_output, on_complete=_print_complete)
    ctx.ensure_object(dict)
    ctx.obj["surface"] = build_surface(config, hooks=hooks)
    ctx.obj["json"] = json_output


@main.command()
@click.argument("room")
@click.argument("text", nargs=-1, required=True)
@click.option("--priority", "-p", type=int, default=3, help="1 (critical) .. 5 (low)")
@click.option("--wait/--no-wait", default=True, help="Wait for orchestrated tasks to finish (fallback workers are always awaited)")
@click.pass_context
def prompt(ctx: click.Context, room: str, text: tuple[str, ...], priority: int, wait: bool) -> None:
    """Dispatch TEXT to ROOM."""
    command = {"action": "prompt", "payload": {"room": room, "prompt": " ".join(text), "priority": priority}}
    _finish(ctx, _run(ctx, command, wait=wait))


@main.command()
@click.argument("room")
@click.argument("text", nargs=-1, required=True)
@click.pass_context
def stdin(ctx: click.Context, room: str, text: tuple[str, ...]) -> None:
    """Type TEXT into ROOM's terminal."""
    _finish(ctx, _run(ctx, {"action": "stdin", "payload": {"room": room, "text": " ".join(text)}}))


@main.command(name="broadcast")
@click.argument("text", nargs=-1, required=True)
@click.option("--room", "rooms", multiple=True, help="Target room (repeatable, default: all)")
@click.option("--wait/--no-wait", default=False, help="Wait for orchestrated tasks to finish (fallback workers are always awaited)")
@click.pass_context
def broadcast_cmd(ctx: click.Context, text: tuple[str, ...], rooms: tuple[str, ...], wait: bool) -> None:
    """Dispatch TEXT to many rooms at once."""
    payload: dict[str, Any] = {"prompt": " ".join(text)}
    if rooms:
        payload["rooms"] = list(rooms)
    _finish(ctx, _run(ctx, {"action": "broadcast", "payload": payload}, wait=wait))


@main.command()
@click.pass_context
def rooms(ctx: click.Context) -> None:
    """List registered rooms."""
    result = _run(ctx, {"action": "list_terminals"})
    if ctx.obj["json"]:
        _finish(ctx, result)
        return
    table = Table(title=result.message)
    for column in ("room", "app", "ipc", "parallel", "agent"):
        table.add_column(column)
    for entry in result.data:
        table.add_row(
            f"{entry['emoji']} {entry['room']}".strip(),
            entry["app"],
            entry["ipc"],
            "yes" if entry["parallel"] else "serialized",
            entry["agent_type"],
        )
    console.print(table)


@main.command()
@click.pass_context
def agents(ctx: click.Context) -> None:
    """List orchestrator agents."""
    _finish(ctx, _run(ctx, {"action": "list_agents"}))


if __name__ == "__main__":
    main()
