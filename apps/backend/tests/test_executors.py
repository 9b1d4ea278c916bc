"""Tests for task executor adapters."""

from __future__ import annotations

import asyncio
import os
import shutil
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from docbot.config import Settings
from docbot.errors import ExecutorError, ExecutorInitError
from docbot.services.executor import (
    ClaudeExecutor,
    CommandExecutor,
    artifact_filename,
    create_executor,
    executor_session,
)


class TestArtifactFilename:
    def test_slug_from_first_line(self) -> None:
        prompt = "\n  Write a README for the CLI!\nMore details here"
        assert artifact_filename(prompt, 2) == "03-write-a-readme-for-the-cli.md"

    def test_fallback_slug(self) -> None:
        assert artifact_filename("!!!", 0) == "01-prompt.md"

    def test_slug_is_truncated(self) -> None:
        name = artifact_filename("x" * 200, 9)
        assert name == "10-" + "x" * 48 + ".md"


class TestExecutorSession:
    @pytest.mark.asyncio
    async def test_closes_on_error(self) -> None:
        executor = MagicMock()
        executor.start = AsyncMock()
        executor.close = AsyncMock()

        with pytest.raises(RuntimeError):
            async with executor_session(executor):
                raise RuntimeError("mid-loop failure")
        executor.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_start_failure_skips_close(self) -> None:
        executor = MagicMock()
        executor.start = AsyncMock(side_effect=ExecutorInitError("no session"))
        executor.close = AsyncMock()

        with pytest.raises(ExecutorInitError):
            async with executor_session(executor):
                pass
        executor.close.assert_not_awaited()


class TestCreateExecutor:
    def test_claude(self) -> None:
        assert isinstance(create_executor(Settings(executor_backend="claude")), ClaudeExecutor)

    def test_command(self) -> None:
        executor = create_executor(Settings(executor_backend="command", executor_command="cat"))
        assert isinstance(executor, CommandExecutor)

    def test_unknown(self) -> None:
        with pytest.raises(ExecutorInitError):
            create_executor(Settings(executor_backend="browser"))


@pytest.mark.skipif(shutil.which("cat") is None, reason="requires cat")
class TestCommandExecutor:
    @pytest.mark.asyncio
    async def test_stdout_becomes_artifact(self, tmp_path: Path) -> None:
        executor = CommandExecutor("cat")
        await executor.start()
        filename = await executor.run_unit("Hello docs", tmp_path, 0)
        await executor.close()

        assert filename == "01-hello-docs.md"
        assert (tmp_path / filename).read_text(encoding="utf-8") == "Hello docs"

    @pytest.mark.asyncio
    async def test_missing_binary(self) -> None:
        with pytest.raises(ExecutorInitError, match="not found"):
            await CommandExecutor("definitely-not-a-real-binary-xyz").start()

    @pytest.mark.asyncio
    async def test_empty_command(self) -> None:
        with pytest.raises(ExecutorInitError):
            await CommandExecutor("").start()

    @pytest.mark.asyncio
    @pytest.mark.skipif(shutil.which("false") is None, reason="requires false")
    async def test_non_zero_exit(self, tmp_path: Path) -> None:
        executor = CommandExecutor("false")
        await executor.start()
        with pytest.raises(ExecutorError, match="non-zero"):
            await executor.run_unit("anything", tmp_path, 0)

    @pytest.mark.asyncio
    async def test_not_started(self, tmp_path: Path) -> None:
        with pytest.raises(ExecutorError):
            await CommandExecutor("cat").run_unit("x", tmp_path, 0)

    @pytest.mark.asyncio
    @pytest.mark.skipif(shutil.which("sh") is None, reason="requires sh")
    async def test_scratch_files_stay_out_of_output_dir(self, tmp_path: Path) -> None:
        executor = CommandExecutor("sh -c 'touch scratch.tmp; cat'")
        await executor.start()
        filename = await executor.run_unit("hello", tmp_path, 0)
        await executor.close()

        assert sorted(p.name for p in tmp_path.iterdir()) == [filename] == ["01-hello.md"]

    @pytest.mark.asyncio
    @pytest.mark.skipif(shutil.which("sh") is None, reason="requires sh")
    async def test_command_timeout_kills_child(self, tmp_path: Path) -> None:
        pidfile = tmp_path / "pid"
        executor = CommandExecutor(f"sh -c 'echo $$ > {pidfile}; exec sleep 30'", timeout=1)
        await executor.start()
        with pytest.raises(ExecutorError, match="timed out"):
            await executor.run_unit("x", tmp_path, 0)

        with pytest.raises(ProcessLookupError):
            os.kill(int(pidfile.read_text()), 0)

    @pytest.mark.asyncio
    @pytest.mark.skipif(shutil.which("sh") is None, reason="requires sh")
    async def test_cancelled_unit_kills_child(self, tmp_path: Path) -> None:
        pidfile = tmp_path / "pid"
        executor = CommandExecutor(f"sh -c 'echo $$ > {pidfile}; exec sleep 30'")
        await executor.start()
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(executor.run_unit("x", tmp_path, 0), timeout=1)

        with pytest.raises(ProcessLookupError):
            os.kill(int(pidfile.read_text()), 0)


class TestClaudeExecutor:
    @pytest.mark.asyncio
    async def test_requires_api_key(self, monkeypatch) -> None:
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        with pytest.raises(ExecutorInitError, match="no API key"):
            await ClaudeExecutor(api_key=None).start()

    @pytest.mark.asyncio
    async def test_writes_reply(self, tmp_path: Path) -> None:
        client = MagicMock()
        client.messages.create = AsyncMock(
            return_value=SimpleNamespace(
                content=[
                    SimpleNamespace(type="text", text="# Guide\n"),
                    SimpleNamespace(type="text", text="Body"),
                ]
            )
        )
        client.close = AsyncMock()

        with patch("docbot.services.executor.providers.claude.anthropic.AsyncAnthropic", return_value=client):
            executor = ClaudeExecutor(api_key="test-key", model="claude-test")
            await executor.start()
            filename = await executor.run_unit("Write a guide", tmp_path, 4)
            await executor.close()

        assert filename == "05-write-a-guide.md"
        assert (tmp_path / filename).read_text(encoding="utf-8") == "# Guide\nBody"
        kwargs = client.messages.create.await_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert kwargs["messages"] == [{"role": "user", "content": "Write a guide"}]
        client.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_empty_reply_is_failure(self, tmp_path: Path) -> None:
        client = MagicMock()
        client.messages.create = AsyncMock(return_value=SimpleNamespace(content=[]))
        client.close = AsyncMock()

        with patch("docbot.services.executor.providers.claude.anthropic.AsyncAnthropic", return_value=client):
            executor = ClaudeExecutor(api_key="test-key")
            await executor.start()
            with pytest.raises(ExecutorError, match="empty"):
                await executor.run_unit("Write", tmp_path, 0)
        assert list(tmp_path.iterdir()) == []
