"""Shared fixtures: a scriptable task executor and job manager wiring."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path

import pytest

from docbot.config import Settings
from docbot.errors import ExecutorError, ExecutorInitError
from docbot.jobs.manager import JobManager
from docbot.services.executor import artifact_filename


class ConcurrencyProbe:
    """Records how many executor calls overlap."""

    def __init__(self) -> None:
        self.in_flight = 0
        self.max_in_flight = 0
        self.calls: list[str] = []

    def enter(self, prompt: str) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        self.calls.append(prompt)

    def exit(self) -> None:
        self.in_flight -= 1


class FakeExecutor:
    """In-memory executor: writes the prompt back as the artifact."""

    def __init__(
        self,
        probe: ConcurrencyProbe | None = None,
        fail_on: set[str] | None = None,
        hang_on: set[str] | None = None,
        timeout_on: set[str] | None = None,
        delay: float = 0.0,
        fail_start: bool = False,
    ) -> None:
        self.probe = probe or ConcurrencyProbe()
        self.fail_on = fail_on or set()
        self.hang_on = hang_on or set()
        self.timeout_on = timeout_on or set()
        self.delay = delay
        self.fail_start = fail_start
        self.started = False
        self.closed = False

    @property
    def name(self) -> str:
        return "fake"

    async def start(self) -> None:
        if self.fail_start:
            raise ExecutorInitError("session cookie rejected")
        self.started = True

    async def run_unit(self, prompt: str, output_dir: Path, index: int) -> str:
        self.probe.enter(prompt)
        try:
            if prompt in self.hang_on:
                await asyncio.sleep(3600)
            if self.delay:
                await asyncio.sleep(self.delay)
            else:
                await asyncio.sleep(0)
            if prompt in self.fail_on:
                raise ExecutorError(f"could not process {prompt!r}")
            if prompt in self.timeout_on:
                raise TimeoutError("read timed out")
            filename = artifact_filename(prompt, index)
            (output_dir / filename).write_text(f"# {prompt}\n", encoding="utf-8")
            return filename
        finally:
            self.probe.exit()

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    prompts_dir = tmp_path / "prompts"
    outputs_dir = tmp_path / "outputs"
    prompts_dir.mkdir()
    outputs_dir.mkdir()
    return Settings(
        outputs_dir=outputs_dir,
        prompts_dir=prompts_dir,
        retention_ttl_seconds=3600,
        unit_timeout_seconds=5,
        subscriber_queue_size=1000,
    )


@pytest.fixture
def probe() -> ConcurrencyProbe:
    return ConcurrencyProbe()


@pytest.fixture
def executors() -> list[FakeExecutor]:
    """Every executor built by ``make_manager`` managers, in creation order."""
    return []


@pytest.fixture
def make_manager(
    settings: Settings, probe: ConcurrencyProbe, executors: list[FakeExecutor]
) -> Callable[..., JobManager]:
    def factory(**executor_kwargs) -> JobManager:
        def build() -> FakeExecutor:
            executor = FakeExecutor(probe=probe, **executor_kwargs)
            executors.append(executor)
            return executor

        return JobManager(settings, executor_factory=build)

    return factory
