"""Custom exceptions for Docbot."""


class DocBotError(Exception):
    """Base exception for Docbot."""

    pass


class PromptSourceError(DocBotError):
    """No prompts could be loaded for a job."""

    pass


class ExecutorError(DocBotError):
    """Task executor failed to produce an artifact for one prompt."""

    pass


class ExecutorInitError(ExecutorError):
    """Task executor session could not be started."""

    pass


class InvalidJobTransition(DocBotError):
    """A job mutation would violate the job lifecycle."""

    pass


class JobConflictError(DocBotError):
    """A new job was refused because another one is still active."""

    pass
