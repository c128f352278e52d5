from unittest.mock import MagicMock, patch

from tendermatch.processor.models import JobState, JobStatus, ProcessingJob
from tendermatch.worker.job_runner import UNEXPECTED_FAILURE_MESSAGE, JobRunner


def _make_runner() -> tuple[JobRunner, MagicMock, MagicMock]:
    """Create a JobRunner with mocked dependencies."""
    mock_tracker = MagicMock()
    mock_repo = MagicMock()
    mock_tracker.run_to_completion.return_value = JobStatus(
        job_id=1,
        document_id=10,
        state=JobState.COMPLETED,
        label="Document processed successfully",
    )
    runner = JobRunner(mock_tracker, mock_repo)
    return runner, mock_tracker, mock_repo


def _make_job() -> ProcessingJob:
    return ProcessingJob(id=1, document_id=10, state=JobState.PROCESSING)


class TestSuccessfulProcessing:
    def test_runs_claimed_job_to_completion(self) -> None:
        runner, mock_tracker, _repo = _make_runner()

        runner.run(_make_job())

        mock_tracker.run_to_completion.assert_called_once_with(1, claimed=True)

    def test_does_not_touch_job_state(self) -> None:
        runner, _tracker, mock_repo = _make_runner()

        runner.run(_make_job())

        mock_repo.mark_error.assert_not_called()


class TestUnexpectedFailure:
    def test_marks_job_error_with_generic_message(self) -> None:
        runner, mock_tracker, mock_repo = _make_runner()
        mock_tracker.run_to_completion.side_effect = RuntimeError("connection reset")

        runner.run(_make_job())

        mock_repo.mark_error.assert_called_once_with(1, UNEXPECTED_FAILURE_MESSAGE)

    def test_is_not_retried(self) -> None:
        runner, mock_tracker, _repo = _make_runner()
        mock_tracker.run_to_completion.side_effect = RuntimeError("boom")

        runner.run(_make_job())

        assert mock_tracker.run_to_completion.call_count == 1

    def test_logs_the_failure(self) -> None:
        runner, mock_tracker, _repo = _make_runner()
        mock_tracker.run_to_completion.side_effect = RuntimeError("boom")

        with patch("tendermatch.worker.job_runner.Log") as mock_log:
            runner.run(_make_job())

        mock_log.exception.assert_called_once()

    def test_failure_to_record_error_does_not_raise(self) -> None:
        runner, mock_tracker, mock_repo = _make_runner()
        mock_tracker.run_to_completion.side_effect = RuntimeError("boom")
        mock_repo.mark_error.side_effect = RuntimeError("db down")

        runner.run(_make_job())  # Should not raise
