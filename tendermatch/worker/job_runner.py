from tendermatch.database.repositories.job_repository import JobRepository
from tendermatch.logging.logger import Log
from tendermatch.processor.models import ProcessingJob
from tendermatch.processor.tracker import ProcessingJobTracker

UNEXPECTED_FAILURE_MESSAGE = "An unexpected error occurred while processing the document."


class JobRunner:
    """Run one claimed job to a resting state and contain unexpected failures.

    Adapter failures are already recorded on the job by the tracker; anything
    else escaping it moves the job to 'error' with a generic message. Jobs are
    never retried here.
    """

    def __init__(self, tracker: ProcessingJobTracker, job_repo: JobRepository) -> None:
        self._tracker = tracker
        self._job_repo = job_repo

    def run(self, job: ProcessingJob) -> None:
        """Execute a single claimed job with error handling."""
        Log.info("Running job", job_id=job.id, document_id=job.document_id, stage=job.state.value)
        try:
            status = self._tracker.run_to_completion(job.id, claimed=True)
        except Exception as exc:
            self._handle_failure(job, exc)
            return
        Log.info(f"Job is '{status.state.value}'", job_id=job.id)

    def _handle_failure(self, job: ProcessingJob, exc: Exception) -> None:
        Log.exception(f"Job failed unexpectedly: {exc}", job_id=job.id)
        try:
            self._job_repo.mark_error(job.id, UNEXPECTED_FAILURE_MESSAGE)
        except Exception as mark_exc:
            Log.error(f"Could not record failure: {mark_exc}", job_id=job.id)
