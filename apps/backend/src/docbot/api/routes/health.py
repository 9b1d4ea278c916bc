"""Health check endpoint."""

from fastapi import APIRouter, Depends

from docbot.api.deps import get_job_manager
from docbot.api.schemas import HealthResponse
from docbot.jobs.manager import JobManager
from docbot.jobs.models import utcnow

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(mgr: JobManager = Depends(get_job_manager)) -> HealthResponse:
    """Return the health status of the application."""
    from docbot import __version__

    return HealthResponse(
        status="ok",
        timestamp=utcnow(),
        version=__version__,
        active_jobs=mgr.active_jobs,
        observers=mgr.broadcaster.subscriber_count,
    )
