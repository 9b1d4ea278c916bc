"""Tests for job domain models."""

from docbot.jobs.events import Event, EventType
from docbot.jobs.models import Job, JobStatus, UnitResult


class TestJobStatus:
    def test_terminal_states(self) -> None:
        assert JobStatus.COMPLETED.is_terminal
        assert JobStatus.FAILED.is_terminal
        assert not JobStatus.PENDING.is_terminal
        assert not JobStatus.RUNNING.is_terminal


class TestJob:
    def test_defaults(self) -> None:
        job = Job()
        assert job.status == JobStatus.PENDING
        assert job.progress == 0
        assert job.total == 0
        assert job.results == []
        assert job.completed_at is None
        assert job.error is None

    def test_ids_are_unique(self) -> None:
        assert Job().id != Job().id

    def test_public_snapshot_uses_camel_case(self) -> None:
        job = Job(total=2, progress=1, current_task="Prompt 1/2 completed")
        job.results.append(UnitResult.ok(0, "01-intro.md"))
        data = job.to_public()
        assert data["currentTask"] == "Prompt 1/2 completed"
        assert data["status"] == "pending"
        assert data["completedAt"] is None
        assert data["results"][0]["artifactRef"] == "01-intro.md"
        assert data["results"][0]["errorMessage"] is None
        assert isinstance(data["createdAt"], str)

    def test_successful_count(self) -> None:
        job = Job(total=2, progress=2)
        job.results = [UnitResult.ok(0, "a.md"), UnitResult.failed(1, "boom")]
        assert job.successful == 1


class TestEvent:
    def test_log_message(self) -> None:
        message = Event.log("job-1", "[1/2] done").to_message()
        assert message["type"] == "log"
        assert message["jobId"] == "job-1"
        assert message["message"] == "[1/2] done"
        assert "timestamp" in message

    def test_connected_has_no_job(self) -> None:
        message = Event.connected().to_message()
        assert message["type"] == EventType.CONNECTED.value
        assert "jobId" not in message

    def test_completed_summary(self) -> None:
        job = Job(total=2, progress=2)
        job.results = [UnitResult.ok(0, "a.md"), UnitResult.failed(1, "boom")]
        message = Event.job_completed(job).to_message()
        assert message["successful"] == 1
        assert message["total"] == 2
        assert "1/2" in message["message"]
        assert len(message["results"]) == 2
