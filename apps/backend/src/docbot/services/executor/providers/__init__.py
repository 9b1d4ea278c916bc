"""Task executor implementations."""

from docbot.services.executor.providers.claude import ClaudeExecutor
from docbot.services.executor.providers.command import CommandExecutor

__all__ = ["ClaudeExecutor", "CommandExecutor"]
