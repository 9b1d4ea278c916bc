"""Main entry point for the Docbot API server."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from docbot import __version__
from docbot.api.deps import get_job_manager, init_job_manager
from docbot.api.routes import events, health, jobs, outputs
from docbot.config import Settings, settings
from docbot.jobs.runner import ExecutorFactory
from docbot.services.prompt_source import PromptSource

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    """Install a root handler; uvicorn keeps its own loggers."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )


async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app(
    app_settings: Settings | None = None,
    executor_factory: ExecutorFactory | None = None,
    prompt_source: PromptSource | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    cfg = app_settings or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Initialize the job manager on startup, stop it on shutdown."""
        cfg.ensure_directories()
        init_job_manager(cfg, executor_factory, prompt_source)
        logger.info("Docbot API %s started, outputs in %s", __version__, cfg.outputs_dir)
        try:
            yield
        finally:
            await get_job_manager().shutdown()
            logger.info("Docbot API stopped")

    app = FastAPI(
        title="Docbot",
        description="Prompt job orchestration with live progress",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(Exception, _unhandled_error)

    app.include_router(health.router)
    app.include_router(jobs.router)
    app.include_router(outputs.router)
    app.include_router(events.router)

    return app


app = create_app()


def main() -> None:
    """Run the application."""
    configure_logging(settings.log_level)
    uvicorn.run(
        "docbot.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
