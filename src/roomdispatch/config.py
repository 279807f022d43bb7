"""Configuration loading and management."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from roomdispatch.rooms.registry import DEFAULT_ROOM_ID, RoomRegistry
from roomdispatch.rooms.routing import DEFAULT_MODEL_IDS

PROJECT_DIR = ".roomdispatch"
USER_DIR_NAME = ".roomdispatch"
CONFIG_FILE = "config.yaml"
ENV_PREFIX = "ROOMDISPATCH_"


@dataclass(slots=True)
class DispatchConfig:
    """Merged configuration from all sources.

    Priority: overrides > env vars > project config > user config > defaults
    """

    # Workers
    project_dir: str = ""
    worker_model: str = "claude-opus-4"
    model_ids: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_MODEL_IDS))
    worker_max_turns: int = 25
    claude_binary: str = "claude"
    spawn_grace: float = 0.5

    # Orchestrator
    orchestrator_command: list[str] = field(default_factory=lambda: ["npx", "claude-flow"])
    poll_interval: float = 5.0
    poll_timeout: float = 120.0
    command_timeout: float = 30.0

    # Rooms
    default_room: str = DEFAULT_ROOM_ID
    rooms: list[dict[str, Any]] = field(default_factory=list)

    # Terminal IPC
    kitty_socket: str = "/tmp/kitty-operator.sock"
    paste_threshold: int = 100
    focus_delay: float = 0.3

    # Sinks
    audit_log: str = "data/dispatch/prompts.jsonl"
    chat_webhook_url: str | None = None

    debug: bool = False

    def audit_log_path(self) -> Path:
        path = Path(self.audit_log)
        if path.is_absolute():
            return path
        return Path(self.project_dir or os.getcwd()) / path

    def build_registry(self) -> RoomRegistry:
        return RoomRegistry.from_config(self.rooms, self.default_room)


# Env var -> field, with a converter
_ENV_FIELDS: dict[str, tuple[str, type]] = {
    "PROJECT_DIR": ("project_dir", str),
    "WORKER_MODEL": ("worker_model", str),
    "WORKER_MAX_TURNS": ("worker_max_turns", int),
    "CLAUDE_BINARY": ("claude_binary", str),
    "DEFAULT_ROOM": ("default_room", str),
    "POLL_INTERVAL": ("poll_interval", float),
    "POLL_TIMEOUT": ("poll_timeout", float),
    "COMMAND_TIMEOUT": ("command_timeout", float),
    "KITTY_SOCKET": ("kitty_socket", str),
    "AUDIT_LOG": ("audit_log", str),
    "CHAT_WEBHOOK_URL": ("chat_webhook_url", str),
}


def find_project_root(start: Path | None = None) -> Path | None:
    """Find the project root by looking for .roomdispatch/ or .git/."""
    current = start or Path.cwd()
    for parent in [current, *current.parents]:
        if (parent / PROJECT_DIR).exists():
            return parent
        if (parent / ".git").exists():
            return parent
    return None


def get_user_config_dir() -> Path:
    """Get the user-level config directory (~/.roomdispatch/)."""
    return Path.home() / USER_DIR_NAME


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Load a YAML config file, returning empty dict if not found."""
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        return data if isinstance(data, dict) else {}
    except (yaml.YAMLError, OSError):
        return {}


def load_config(
    *,
    config_path: str | Path | None = None,
    working_dir: str | None = None,
    overrides: dict[str, Any] | None = None,
    environ: dict[str, str] | None = None,
) -> DispatchConfig:
    """Load configuration from all sources with proper priority."""
    load_dotenv()
    env = os.environ if environ is None else environ
    config = DispatchConfig()
    config.project_dir = working_dir or os.getcwd()

    # 1. User-level config
    _apply_dict(config, load_yaml_config(get_user_config_dir() / CONFIG_FILE))

    # 2. Project-level config (or an explicit file)
    if config_path is not None:
        _apply_dict(config, load_yaml_config(Path(config_path)))
    else:
        project_root = find_project_root(Path(config.project_dir))
        if project_root:
            _apply_dict(config, load_yaml_config(project_root / PROJECT_DIR / CONFIG_FILE))

    # 3. Environment variables
    for suffix, (name, conv) in _ENV_FIELDS.items():
        raw = env.get(ENV_PREFIX + suffix)
        if raw is None or raw == "":
            continue
        try:
            setattr(config, name, conv(raw))
        except ValueError:
            continue
    if env.get(ENV_PREFIX + "DEBUG", "").lower() in ("1", "true", "yes"):
        config.debug = True

    # 4. Explicit overrides
    _apply_dict(config, overrides or {})

    # Fail early on a broken room table
    config.build_registry()
    return config


def _apply_dict(config: DispatchConfig, data: dict[str, Any]) -> None:
    allowed = {f.name for f in fields(DispatchConfig)}
    for key, value in data.items():
        if key not in allowed or value is None:
            continue
        if key == "model_ids" and isinstance(value, dict):
            config.model_ids = {**config.model_ids, **{str(k): str(v) for k, v in value.items()}}
            continue
        if key == "orchestrator_command" and isinstance(value, str):
            value = value.split()
        setattr(config, key, value)
