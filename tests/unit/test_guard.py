"""Tests for the recursion guard markers."""

from __future__ import annotations

from roomdispatch.guard import NO_SPAWN_MARKER, WORKER_MARKER, is_recursive_worker, worker_env


class TestRecursionGuard:
    def test_clean_env(self) -> None:
        assert not is_recursive_worker({})
        assert not is_recursive_worker({WORKER_MARKER: "0"})

    def test_either_marker_blocks(self) -> None:
        assert is_recursive_worker({WORKER_MARKER: "1"})
        assert is_recursive_worker({NO_SPAWN_MARKER: "1"})

    def test_worker_env_sets_markers(self) -> None:
        env = worker_env({"PATH": "/bin", "CLAUDECODE": "1", "CLAUDE_DEV": "1"})
        assert env[WORKER_MARKER] == "1"
        assert env[NO_SPAWN_MARKER] == "1"
        assert env["PATH"] == "/bin"
        assert "CLAUDECODE" not in env
        assert "CLAUDE_DEV" not in env
        assert is_recursive_worker(env)

    def test_worker_env_does_not_mutate_base(self) -> None:
        base = {"PATH": "/bin"}
        worker_env(base)
        assert base == {"PATH": "/bin"}
