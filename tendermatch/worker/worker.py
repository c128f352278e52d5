import threading

from tendermatch.config.settings import Settings
from tendermatch.database.connection import get_connection
from tendermatch.database.repositories.job_repository import JobRepository
from tendermatch.logging.logger import Log
from tendermatch.processor.models import ProcessingJob
from tendermatch.processor.tracker import ProcessingJobTracker
from tendermatch.worker.job_runner import JobRunner


class Worker:
    """Background loop that drives triggered jobs to a terminal state.

    Each iteration expires stale jobs, claims at most one triggered job and
    hands it to the runner. When nothing is claimable the worker waits for
    the poll interval, or until ``stop()`` is called.
    """

    def __init__(
        self,
        job_repo: JobRepository,
        job_runner: JobRunner,
        tracker: ProcessingJobTracker,
        settings: Settings,
    ) -> None:
        self._job_repo = job_repo
        self._job_runner = job_runner
        self._tracker = tracker
        self._poll_interval = settings.job_poll_interval_seconds
        self._stopping = threading.Event()

    def run(self, max_jobs: int | None = None) -> int:
        """Poll until stopped or interrupted. Returns the number of jobs run.

        If max_jobs is set, return once that many jobs have been run.
        """
        Log.info("Worker started, polling for jobs")
        jobs_done = 0
        try:
            while not self._stopping.is_set():
                if max_jobs is not None and jobs_done >= max_jobs:
                    break
                if self.run_once():
                    jobs_done += 1
                else:
                    self._stopping.wait(self._poll_interval)
        except KeyboardInterrupt:
            Log.info("Worker interrupted")
        Log.info(f"Worker stopped after {jobs_done} jobs")
        return jobs_done

    def run_once(self) -> bool:
        """One poll iteration. Returns True when a job was claimed and run."""
        self._expire_stale_jobs()
        job = self._try_claim_job()
        if job is None:
            Log.debug("No jobs available")
            return False
        self._job_runner.run(job)
        return True

    def stop(self) -> None:
        """Ask the loop to exit after the job in flight, if any."""
        self._stopping.set()

    def _try_claim_job(self) -> ProcessingJob | None:
        try:
            with get_connection() as conn:
                return self._job_repo.claim_next_job(conn)
        except Exception as exc:
            Log.warning(f"Could not claim a job, will retry: {exc}")
            return None

    def _expire_stale_jobs(self) -> None:
        try:
            self._tracker.expire_stale_jobs()
        except Exception as exc:
            Log.warning(f"Could not expire stale jobs, will retry: {exc}")
