"""Recursion guard for fallback-spawned workers.

A fallback worker is started with two marker variables in its environment.
If the dispatcher is invoked again from inside such a worker, it refuses
instead of spawning yet another worker.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

WORKER_MARKER = "CLAUDE_FLOW_WORKER"
NO_SPAWN_MARKER = "CLAUDE_FLOW_NO_SPAWN"

# Keeps the orchestrator's own MCP tools out of the worker
_WORKER_EXTRA = {"MCP_DISABLE_CLAUDE_FLOW": "1"}

# Env vars that make a nested `claude` refuse to start
# ("cannot launch inside another session").
_STRIP_ENV_VARS = {
    "CLAUDECODE",
    "CLAUDE_DEV",
    "CLAUDE_CODE_ENTRYPOINT",
}


def is_recursive_worker(environ: Mapping[str, str] | None = None) -> bool:
    env = os.environ if environ is None else environ
    return env.get(WORKER_MARKER) == "1" or env.get(NO_SPAWN_MARKER) == "1"


def worker_env(base: Mapping[str, str] | None = None) -> dict[str, str]:
    """Environment for a fallback worker with both markers asserted."""
    env = {k: v for k, v in (os.environ if base is None else base).items() if k not in _STRIP_ENV_VARS}
    env[WORKER_MARKER] = "1"
    env[NO_SPAWN_MARKER] = "1"
    env.update(_WORKER_EXTRA)
    return env
