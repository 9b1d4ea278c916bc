"""Default prompt source: one prompt per ``.txt`` file."""

from __future__ import annotations

import logging
from pathlib import Path

from docbot.errors import PromptSourceError

logger = logging.getLogger(__name__)


class PromptSource:
    """Loads prompts from a directory of text files, sorted by filename."""

    def __init__(self, prompts_dir: Path) -> None:
        self.prompts_dir = Path(prompts_dir)

    def load(self) -> list[str]:
        """Return the stripped contents of every non-empty ``*.txt`` file.

        Raises:
            PromptSourceError: If the directory is missing, unreadable or
                yields no prompts.
        """
        directory = self.prompts_dir.resolve()
        if not directory.is_dir():
            raise PromptSourceError(f"Prompts folder not found: {directory}")

        files = sorted(p for p in directory.glob("*.txt") if p.is_file())
        if not files:
            raise PromptSourceError(f"No .txt files found in prompts folder: {directory}")

        prompts: list[str] = []
        for path in files:
            try:
                text = path.read_text(encoding="utf-8").strip()
            except (OSError, UnicodeDecodeError) as exc:
                raise PromptSourceError(f"Cannot read prompt file {path.name}: {exc}") from exc
            if text:
                prompts.append(text)
            else:
                logger.warning("Skipping empty prompt file %s", path.name)

        if not prompts:
            raise PromptSourceError(f"All .txt files in {directory} are empty")
        logger.info("Loaded %d prompt(s) from %s", len(prompts), directory)
        return prompts
