"""Job management endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from docbot.api.deps import get_job_manager
from docbot.api.schemas import (
    JobStatusResponse,
    OutputFile,
    OutputsResponse,
    RunRequest,
    RunResponse,
)
from docbot.errors import JobConflictError
from docbot.jobs.manager import JobManager
from docbot.jobs.models import Job

router = APIRouter(prefix="/api", tags=["jobs"])


def _to_response(job: Job) -> JobStatusResponse:
    return JobStatusResponse.model_validate(job.to_public())


def _require_job(mgr: JobManager, job_id: str) -> Job:
    job = mgr.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


@router.post("/run", response_model=RunResponse)
async def run_job(
    req: RunRequest | None = None,
    mgr: JobManager = Depends(get_job_manager),
) -> RunResponse:
    prompts = req.prompts if req is not None else None
    try:
        job = mgr.create_job(prompts)
    except JobConflictError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return RunResponse(job_id=job.id)


@router.get("/jobs", response_model=list[JobStatusResponse])
async def list_jobs(mgr: JobManager = Depends(get_job_manager)) -> list[JobStatusResponse]:
    return [_to_response(j) for j in mgr.list_jobs()]


@router.get("/status/{job_id}", response_model=JobStatusResponse)
async def get_status(
    job_id: str,
    mgr: JobManager = Depends(get_job_manager),
) -> JobStatusResponse:
    return _to_response(_require_job(mgr, job_id))


@router.get("/outputs/{job_id}", response_model=OutputsResponse)
async def list_outputs(
    job_id: str,
    mgr: JobManager = Depends(get_job_manager),
) -> OutputsResponse:
    _require_job(mgr, job_id)
    return OutputsResponse(
        outputs=[
            OutputFile(filename=name, download_url=f"/outputs/{job_id}/{name}")
            for name in mgr.list_outputs(job_id)
        ]
    )
