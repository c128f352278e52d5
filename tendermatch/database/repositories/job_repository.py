from typing import Any

import psycopg
from psycopg.rows import dict_row

from tendermatch.database.connection import get_connection
from tendermatch.database.models import StageClaim
from tendermatch.processor.exceptions import JobNotFoundError
from tendermatch.processor.models import JobState, ProcessingJob
from tendermatch.processor.state_machine import ensure_transition

_JOB_COLUMNS = """
    id, document_id, state, apply_attempts, error_message,
    locked_at, created_at, updated_at
"""

_ACTIVE_STATES = (
    JobState.UPLOADING.value,
    JobState.PROCESSING.value,
    JobState.ANALYZING.value,
)


def _row_to_job(row: dict[str, Any]) -> ProcessingJob:
    return ProcessingJob(
        id=row["id"],
        document_id=row["document_id"],
        state=JobState(row["state"]),
        apply_attempts=row["apply_attempts"],
        error_message=row["error_message"],
        locked_at=row["locked_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class JobRepository:
    """Database operations for the processing_jobs table.

    Every state change is a conditional UPDATE on the expected current state,
    so concurrent callers cannot move a job backwards or apply a stage twice.
    """

    def create(self, conn: psycopg.Connection[Any], document_id: int) -> ProcessingJob:
        """Insert a job in 'uploading' on the caller's transaction."""
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"""
                INSERT INTO processing_jobs (document_id, state)
                VALUES (%s, %s)
                RETURNING {_JOB_COLUMNS}
                """,
                (document_id, JobState.UPLOADING.value),
            )
            row = cur.fetchone()
        assert row is not None
        return _row_to_job(row)

    def find_by_id(self, job_id: int) -> ProcessingJob:
        """Find a job by ID.

        Raises:
            JobNotFoundError: if no job with this ID exists.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_JOB_COLUMNS} FROM processing_jobs WHERE id = %s",
                    (job_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise JobNotFoundError(f"Job {job_id} not found")
        return _row_to_job(row)

    def find_by_document_id(self, document_id: int) -> ProcessingJob:
        """Find the job owning a document.

        Raises:
            JobNotFoundError: if the document has no job.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_JOB_COLUMNS} FROM processing_jobs WHERE document_id = %s",
                    (document_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise JobNotFoundError(f"No job found for document {document_id}")
        return _row_to_job(row)

    def claim_next_job(self, conn: psycopg.Connection[Any]) -> ProcessingJob | None:
        """Claim the stage of the oldest triggered job using SELECT FOR UPDATE SKIP LOCKED."""
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"""
                UPDATE processing_jobs
                SET locked_at = NOW(), updated_at = NOW()
                WHERE id = (
                    SELECT id
                    FROM processing_jobs
                    WHERE state IN (%s, %s)
                      AND locked_at IS NULL
                    ORDER BY created_at
                    LIMIT 1
                    FOR UPDATE SKIP LOCKED
                )
                RETURNING {_JOB_COLUMNS}
                """,
                (JobState.PROCESSING.value, JobState.ANALYZING.value),
            )
            row = cur.fetchone()
        conn.commit()

        if row is None:
            return None
        return _row_to_job(row)

    def transition(self, job_id: int, from_state: JobState, to_state: JobState) -> bool:
        """Move a job forward if it is still in from_state. Releases the stage claim.

        Raises:
            InvalidTransitionError: if from_state -> to_state is not a legal move.
        """
        ensure_transition(from_state, to_state)
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE processing_jobs
                    SET state = %s, locked_at = NULL, updated_at = NOW()
                    WHERE id = %s AND state = %s
                    """,
                    (to_state.value, job_id, from_state.value),
                )
                changed = cur.rowcount == 1
            conn.commit()
        return changed

    def claim_stage(
        self, job_id: int, state: JobState, stale_after_seconds: int
    ) -> StageClaim:
        """Claim the job's current stage unless another caller holds a fresh claim."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    UPDATE processing_jobs AS j
                    SET locked_at = NOW(), updated_at = NOW()
                    FROM (
                        SELECT id, locked_at AS previous
                        FROM processing_jobs
                        WHERE id = %s
                        FOR UPDATE
                    ) AS p
                    WHERE j.id = p.id
                      AND j.state = %s
                      AND (
                          j.locked_at IS NULL
                          OR j.locked_at < NOW() - make_interval(secs => %s)
                      )
                    RETURNING p.previous
                    """,
                    (job_id, state.value, stale_after_seconds),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            return StageClaim(acquired=False)
        return StageClaim(acquired=True, reclaimed=row["previous"] is not None)

    def release_stage(self, job_id: int) -> None:
        """Drop the stage claim without changing state."""
        with get_connection() as conn:
            conn.execute(
                "UPDATE processing_jobs SET locked_at = NULL WHERE id = %s",
                (job_id,),
            )
            conn.commit()

    def increment_apply_attempts(self, job_id: int) -> int:
        """Count one more profile-apply attempt and return the new total."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE processing_jobs
                    SET apply_attempts = apply_attempts + 1, updated_at = NOW()
                    WHERE id = %s
                    RETURNING apply_attempts
                    """,
                    (job_id,),
                )
                row = cur.fetchone()
            conn.commit()
        if row is None:
            raise JobNotFoundError(f"Job {job_id} not found")
        return int(row[0])

    def mark_error(self, job_id: int, error: str) -> bool:
        """Move a non-terminal job to 'error' with a message."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE processing_jobs
                    SET state = %s, error_message = %s, locked_at = NULL, updated_at = NOW()
                    WHERE id = %s AND state IN (%s, %s, %s)
                    """,
                    (JobState.ERROR.value, error, job_id, *_ACTIVE_STATES),
                )
                changed = cur.rowcount == 1
            conn.commit()
        return changed

    def fail_stale_jobs(self, max_age_seconds: int, error: str) -> list[int]:
        """Move every non-terminal job untouched for max_age_seconds to 'error'."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE processing_jobs
                    SET state = %s, error_message = %s, locked_at = NULL, updated_at = NOW()
                    WHERE state IN (%s, %s, %s)
                      AND updated_at < NOW() - make_interval(secs => %s)
                    RETURNING id
                    """,
                    (JobState.ERROR.value, error, *_ACTIVE_STATES, max_age_seconds),
                )
                rows = cur.fetchall()
            conn.commit()
        return [int(r[0]) for r in rows]
