"""Command-line task executor."""

from __future__ import annotations

import asyncio
import logging
import shlex
import shutil
import tempfile
from pathlib import Path

from docbot.errors import ExecutorError, ExecutorInitError
from docbot.services.executor.base import artifact_filename

logger = logging.getLogger(__name__)


class CommandExecutor:
    """Task executor that pipes each prompt into an external command.

    The command receives the prompt on stdin; its stdout becomes the
    Markdown artifact. A non-zero exit code is a failure. Each run gets a
    scratch working directory, so only the artifact reaches ``output_dir``.
    The child is killed if the call times out or is cancelled.
    """

    def __init__(self, command: str, timeout: float = 300.0) -> None:
        self._argv = shlex.split(command)
        self._timeout = timeout
        self._binary: str | None = None

    @property
    def name(self) -> str:
        return "command"

    async def start(self) -> None:
        if not self._argv:
            raise ExecutorInitError("Command executor has no command configured")
        self._binary = shutil.which(self._argv[0])
        if self._binary is None:
            raise ExecutorInitError(f"Command not found in PATH: {self._argv[0]}")
        logger.info("Command executor started (%s)", self._binary)

    async def run_unit(self, prompt: str, output_dir: Path, index: int) -> str:
        if self._binary is None:
            raise ExecutorError("Command executor is not started")

        cmd = [self._binary, *self._argv[1:]]
        with tempfile.TemporaryDirectory(prefix="docbot-cmd-") as workdir:
            stdout, stderr, returncode = await self._communicate(cmd, prompt, workdir)

        if returncode != 0:
            raise ExecutorError(
                f"Command returned non-zero exit code {returncode}: {stderr[:500]}"
            )
        if not stdout.strip():
            raise ExecutorError("Command produced no output")

        filename = artifact_filename(prompt, index)
        await asyncio.to_thread(
            (output_dir / filename).write_text, stdout, encoding="utf-8"
        )
        return filename

    async def _communicate(self, cmd: list[str], prompt: str, cwd: str) -> tuple[str, str, int]:
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
            )
        except OSError as exc:
            raise ExecutorError(f"Command execution failed: {exc}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(prompt.encode("utf-8")), timeout=self._timeout
            )
        except TimeoutError as exc:
            raise ExecutorError(f"Command timed out after {self._timeout:g}s") from exc
        finally:
            if proc.returncode is None:
                logger.warning("Killing command (pid %d)", proc.pid)
                proc.kill()
                await proc.wait()

        return (
            stdout.decode("utf-8", errors="replace"),
            stderr.decode("utf-8", errors="replace"),
            proc.returncode,
        )

    async def close(self) -> None:
        self._binary = None
