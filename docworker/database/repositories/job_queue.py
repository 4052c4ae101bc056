from typing import Any

import psycopg
from psycopg.rows import dict_row

from docworker.config.settings import Settings
from docworker.database.connection import Database
from docworker.database.models import Job


class JobQueue:
    """Durable at-least-once job queue backed by the file_jobs table.

    A job is handed to one worker at a time. It is redelivered when the worker
    nacks it (after ``retry_delay_seconds``) or when its lock is older than
    ``visibility_timeout_seconds`` (worker died mid-pipeline).
    """

    def __init__(self, db: Database, settings: Settings) -> None:
        self._db = db
        self._visibility_timeout = settings.visibility_timeout_seconds
        self._retry_delay = settings.retry_delay_seconds

    def enqueue(self, file_id: int, conn: psycopg.Connection[Any] | None = None) -> int:
        """Insert a pending job for a file and return the job id.

        When ``conn`` is given the insert joins the caller's transaction, so the
        job becomes visible only together with the QUEUED source file row.
        """
        if conn is not None:
            return self._insert_job(conn, file_id)
        with self._db.transaction() as own_conn:
            return self._insert_job(own_conn, file_id)

    @staticmethod
    def _insert_job(conn: psycopg.Connection[Any], file_id: int) -> int:
        with conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO file_jobs (source_file_id, status, attempts)
                VALUES (%s, 'pending', 0)
                RETURNING id
                """,
                (file_id,),
            )
            row = cur.fetchone()
        if row is None:
            raise RuntimeError(f"Failed to enqueue job for file {file_id}")
        return int(row[0])

    def claim_next(self) -> Job | None:
        """Claim the next deliverable job using SELECT FOR UPDATE SKIP LOCKED."""
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, source_file_id, status, attempts
                    FROM file_jobs
                    WHERE (status = 'pending' AND available_at <= NOW())
                       OR (status = 'processing'
                           AND locked_at < NOW() - %s * INTERVAL '1 second')
                    ORDER BY created_at
                    LIMIT 1
                    FOR UPDATE SKIP LOCKED
                    """,
                    (self._visibility_timeout,),
                )
                row = cur.fetchone()

            if row is None:
                conn.rollback()
                return None

            # An expired lock means the previous delivery died; it counts as an attempt.
            attempts = row["attempts"] + (1 if row["status"] == "processing" else 0)
            conn.execute(
                """
                UPDATE file_jobs
                SET status = 'processing', attempts = %s,
                    locked_at = NOW(), updated_at = NOW()
                WHERE id = %s
                """,
                (attempts, row["id"]),
            )
            conn.commit()

        return Job(
            id=row["id"],
            file_id=row["source_file_id"],
            attempt=attempts,
            status="processing",
        )

    def ack(self, job_id: int) -> None:
        """Mark a job as done."""
        with self._db.transaction() as conn:
            conn.execute(
                """
                UPDATE file_jobs
                SET status = 'done', locked_at = NULL, updated_at = NOW()
                WHERE id = %s
                """,
                (job_id,),
            )

    def nack(self, job_id: int, error: str) -> None:
        """Increment the attempt count and return the job to pending after the retry delay."""
        with self._db.transaction() as conn:
            conn.execute(
                """
                UPDATE file_jobs
                SET attempts = attempts + 1, status = 'pending', error_message = %s,
                    available_at = NOW() + %s * INTERVAL '1 second',
                    locked_at = NULL, updated_at = NOW()
                WHERE id = %s
                """,
                (error, self._retry_delay, job_id),
            )

    def fail(self, job_id: int, error: str, conn: psycopg.Connection[Any] | None = None) -> None:
        """Mark a job as permanently failed."""
        sql = """
            UPDATE file_jobs
            SET status = 'failed', attempts = attempts + 1, error_message = %s,
                locked_at = NULL, updated_at = NOW()
            WHERE id = %s
        """
        if conn is not None:
            conn.execute(sql, (error, job_id))
            return
        with self._db.transaction() as own_conn:
            own_conn.execute(sql, (error, job_id))

    def find_by_id(self, job_id: int) -> Job | None:
        """Find a job by ID. Useful for tests and operator tooling."""
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, source_file_id, status, attempts, error_message,
                           locked_at, available_at, created_at, updated_at
                    FROM file_jobs
                    WHERE id = %s
                    """,
                    (job_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None

        return Job(
            id=row["id"],
            file_id=row["source_file_id"],
            attempt=row["attempts"],
            status=row["status"],
            error_message=row["error_message"],
            locked_at=row["locked_at"],
            available_at=row["available_at"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
