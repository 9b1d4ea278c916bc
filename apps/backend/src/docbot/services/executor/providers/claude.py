"""Claude task executor."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

import anthropic

from docbot.errors import ExecutorError, ExecutorInitError
from docbot.services.executor.base import artifact_filename

logger = logging.getLogger(__name__)


class ClaudeExecutor:
    """Task executor using the Anthropic Claude API.

    Each prompt is sent as a single user message; the text of the reply is
    written as a Markdown artifact.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "claude-sonnet-4-20250514",
        max_tokens: int = 8192,
    ) -> None:
        """Initialize the Claude executor.

        Args:
            api_key: Anthropic API key. Falls back to ANTHROPIC_API_KEY env var.
            model: Claude model used for every prompt.
            max_tokens: Reply size limit per prompt.
        """
        self._api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self._model = model
        self._max_tokens = max_tokens
        self._client: anthropic.AsyncAnthropic | None = None

    @property
    def name(self) -> str:
        return "claude"

    async def start(self) -> None:
        if not self._api_key:
            raise ExecutorInitError("Claude executor is not available (no API key)")
        self._client = anthropic.AsyncAnthropic(api_key=self._api_key)
        logger.info("Claude executor started (model %s)", self._model)

    async def run_unit(self, prompt: str, output_dir: Path, index: int) -> str:
        if self._client is None:
            raise ExecutorError("Claude executor is not started")

        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as exc:
            raise ExecutorError(f"Claude API error: {exc}") from exc

        text = "".join(block.text for block in response.content if block.type == "text")
        if not text.strip():
            raise ExecutorError("Claude returned an empty response")

        filename = artifact_filename(prompt, index)
        await asyncio.to_thread((output_dir / filename).write_text, text, encoding="utf-8")
        return filename

    async def close(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            await client.close()
