"""Services module for Docbot."""

from docbot.services.executor import ITaskExecutor, create_executor
from docbot.services.prompt_source import PromptSource

__all__ = ["ITaskExecutor", "PromptSource", "create_executor"]
