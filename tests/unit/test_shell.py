"""Tests for async command execution."""

from __future__ import annotations

import pytest

from roomdispatch.shell import CommandOutput, run_command


class TestRunCommand:
    @pytest.mark.asyncio
    async def test_stdin_passed_verbatim(self) -> None:
        text = "$(whoami) `id` ; 'quoted' \"double\""
        out = await run_command(["cat"], input_text=text)
        assert out.ok
        assert out.stdout == text

    @pytest.mark.asyncio
    async def test_missing_binary(self) -> None:
        out = await run_command(["definitely-not-a-real-binary-xyz"])
        assert out.returncode == 127
        assert "command not found" in out.stderr

    @pytest.mark.asyncio
    async def test_nonzero_exit(self) -> None:
        out = await run_command(["sh", "-c", "echo oops >&2; exit 3"])
        assert out.returncode == 3
        assert out.stderr == "oops"
        assert not out.ok

    @pytest.mark.asyncio
    async def test_timeout_kills(self) -> None:
        out = await run_command(["sleep", "5"], timeout=0.1)
        assert out.returncode == -1
        assert "timed out" in out.stderr


class TestCommandOutput:
    def test_combined(self) -> None:
        assert CommandOutput(0, "a", "b").combined == "a\nb"
        assert CommandOutput(0, "", "b").combined == "b"
        assert CommandOutput(0, "a").combined == "a"
