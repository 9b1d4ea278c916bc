"""Artifact download endpoint."""

from __future__ import annotations

import mimetypes

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from docbot.api.deps import get_job_manager
from docbot.jobs.manager import JobManager

router = APIRouter(prefix="/outputs", tags=["outputs"])


@router.get("/{job_id}/{filename}")
async def download_output(
    job_id: str,
    filename: str,
    mgr: JobManager = Depends(get_job_manager),
) -> FileResponse:
    if mgr.get_job(job_id) is None:
        raise HTTPException(status_code=404, detail="Job not found")

    path = mgr.resolve_output(job_id, filename)
    if path is None:
        raise HTTPException(status_code=404, detail="File not found")

    if path.suffix == ".md":
        media_type = "text/markdown"
    else:
        media_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return FileResponse(path=path, media_type=media_type, filename=path.name)
