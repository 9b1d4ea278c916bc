"""Configuration management for Docbot."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 3001
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    # Directories
    outputs_dir: Path = Path("./outputs")
    prompts_dir: Path = Path("./prompts")

    # Jobs
    retention_ttl_seconds: float = 3600.0
    unit_timeout_seconds: float = 300.0
    subscriber_queue_size: int = 256
    reject_concurrent_jobs: bool = False

    # Task executor
    executor_backend: str = "claude"  # "claude" or "command"
    anthropic_api_key: str | None = None
    anthropic_model: str = "claude-sonnet-4-20250514"
    anthropic_max_tokens: int = 8192
    executor_command: str = ""

    def ensure_directories(self) -> None:
        """Create required directories if they don't exist."""
        self.outputs_dir.mkdir(parents=True, exist_ok=True)
        self.prompts_dir.mkdir(parents=True, exist_ok=True)


# Global settings instance
settings = Settings()
