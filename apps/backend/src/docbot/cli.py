"""Docbot command-line interface with subcommands.

Usage:
    docbot-cli serve [--host HOST] [--port PORT]
    docbot-cli run [-p PROMPT ...] [--prompts-dir DIR] [--outputs-dir DIR]
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from docbot.config import settings
from docbot.jobs.events import Event, EventType
from docbot.jobs.manager import JobManager
from docbot.jobs.models import JobStatus
from docbot.main import configure_logging

_TERMINAL_EVENTS = {EventType.JOB_COMPLETED, EventType.JOB_FAILED}


def _print_event(event: Event) -> None:
    message = event.to_message()
    if event.type == EventType.JOB_UPDATE:
        job = message["job"]
        print(f"  [{job['status']}] {job['progress']}/{job['total']} {job['currentTask']}")
    elif event.type == EventType.LOG:
        print(f"  {message['message']}")
    elif event.type in _TERMINAL_EVENTS:
        print(message["message"])


# --- Run subcommand ---


async def cmd_run(args: argparse.Namespace) -> int:
    """Run one job in-process, printing live events until it finishes."""
    cfg = settings.model_copy(
        update={
            "prompts_dir": Path(args.prompts_dir) if args.prompts_dir else settings.prompts_dir,
            "outputs_dir": Path(args.outputs_dir) if args.outputs_dir else settings.outputs_dir,
        }
    )
    cfg.outputs_dir.mkdir(parents=True, exist_ok=True)

    mgr = JobManager(cfg)
    sub = mgr.broadcaster.subscribe()
    job = mgr.create_job(args.prompt or None)
    print(f"Job {job.id} started, outputs in {mgr.output_dir(job.id)}")

    async for event in sub:
        _print_event(event)
        if event.type in _TERMINAL_EVENTS and event.job_id == job.id:
            break

    await mgr.wait_idle()
    # Outputs are kept; the process exits before any retention timer fires.
    await mgr.retention.shutdown()

    final = mgr.get_job(job.id)
    if final is None or final.status != JobStatus.COMPLETED:
        return 1
    for name in mgr.list_outputs(job.id):
        print(f"  -> {mgr.output_dir(job.id) / name}")
    return 0


# --- Serve subcommand ---


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("docbot.main:app", host=args.host, port=args.port, reload=settings.debug)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="docbot-cli", description="Docbot prompt job runner")
    parser.add_argument("--log-level", default=settings.log_level)
    sub = parser.add_subparsers(dest="command", required=True)

    p_serve = sub.add_parser("serve", help="Run the API server")
    p_serve.add_argument("--host", default=settings.host)
    p_serve.add_argument("--port", type=int, default=settings.port)

    p_run = sub.add_parser("run", help="Run one job without the API server")
    p_run.add_argument(
        "-p", "--prompt", action="append", help="Prompt text (repeatable, keeps order)"
    )
    p_run.add_argument("--prompts-dir", help="Folder of .txt prompts (default from settings)")
    p_run.add_argument("--outputs-dir", help="Outputs root (default from settings)")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    if args.command == "serve":
        sys.exit(cmd_serve(args))
    sys.exit(asyncio.run(cmd_run(args)))


if __name__ == "__main__":
    main()
