"""Request and response schemas for the Docbot API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serializes with camelCase keys, accepts both spellings on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ------------------------------------------------------------------
# Requests
# ------------------------------------------------------------------


class RunRequest(CamelModel):
    prompts: list[str] | None = Field(
        None, description="Prompts to run, in order; the prompts folder is used when empty"
    )


# ------------------------------------------------------------------
# Responses
# ------------------------------------------------------------------


class RunResponse(CamelModel):
    job_id: str
    status: str = "started"


class UnitResultResponse(CamelModel):
    index: int
    success: bool
    artifact_ref: str | None = None
    error_message: str | None = None
    timestamp: datetime


class JobStatusResponse(CamelModel):
    id: str
    status: str
    progress: int = 0
    total: int = 0
    current_task: str = ""
    results: list[UnitResultResponse] = Field(default_factory=list)
    created_at: datetime
    completed_at: datetime | None = None
    error: str | None = None


class OutputFile(CamelModel):
    filename: str
    download_url: str


class OutputsResponse(CamelModel):
    outputs: list[OutputFile] = Field(default_factory=list)


class HealthResponse(CamelModel):
    status: str
    timestamp: datetime
    version: str
    active_jobs: int = 0
    observers: int = 0
