import signal
from types import FrameType

import uvicorn

from tendermatch.api.app import build_app
from tendermatch.config.settings import Settings
from tendermatch.database.connection import close_pool, init_pool
from tendermatch.database.repositories.job_repository import JobRepository
from tendermatch.logging.logger import Log
from tendermatch.processor.tracker import build_tracker
from tendermatch.worker.job_runner import JobRunner
from tendermatch.worker.worker import Worker


def main() -> None:
    """Worker entry point: initialize pool, build dependencies, poll until SIGTERM."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        tracker = build_tracker(settings)
        job_repo = JobRepository()
        worker = Worker(job_repo, JobRunner(tracker, job_repo), tracker, settings)

        def handle_sigterm(signum: int, frame: FrameType | None) -> None:
            Log.info("SIGTERM received, finishing current job")
            worker.stop()

        signal.signal(signal.SIGTERM, handle_sigterm)
        worker.run()
    finally:
        close_pool()


def serve() -> None:
    """Entry point for the HTTP API."""
    settings = Settings()
    uvicorn.run(build_app(settings), host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
