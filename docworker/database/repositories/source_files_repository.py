from typing import Any

import psycopg
from psycopg.rows import dict_row

from docworker.database.connection import Database
from docworker.processor.exceptions import SourceFileNotFoundError
from docworker.processor.models import SourceFile
from docworker.processor.status import (
    CLAIMABLE_STATUSES,
    OCRStatus,
    ProcessingStatus,
)

_SELECT_COLUMNS = """
    id, original_name, storage_key, file_type, file_size, uploaded_by,
    status, ocr_status, extracted_text, ocr_processed_at, error_message
"""


def _row_to_source_file(row: dict[str, Any]) -> SourceFile:
    return SourceFile(
        id=row["id"],
        original_name=row["original_name"],
        storage_key=row["storage_key"],
        file_type=row["file_type"],
        file_size=row["file_size"],
        uploaded_by=row["uploaded_by"],
        status=ProcessingStatus(row["status"]),
        ocr_status=OCRStatus(row["ocr_status"]),
        extracted_text=row["extracted_text"],
        ocr_processed_at=row["ocr_processed_at"],
        error_message=row["error_message"],
    )


class SourceFileRepository:
    """Database operations for the source_files table.

    Only single-field status transitions live here; the final COMPLETED write
    belongs to ResultCommitter.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    def find_by_id(self, file_id: int) -> SourceFile:
        """Find a source file by ID.

        Raises:
            SourceFileNotFoundError: if no file with this ID exists.
        """
        with self._db.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_SELECT_COLUMNS} FROM source_files WHERE id = %s",  # noqa: S608
                    (file_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise SourceFileNotFoundError(f"Source file {file_id} not found")
        return _row_to_source_file(row)

    def create(
        self,
        conn: psycopg.Connection[Any],
        *,
        original_name: str,
        storage_key: str,
        file_type: str,
        file_size: int,
        uploaded_by: str,
        ocr_status: OCRStatus,
    ) -> SourceFile:
        """Insert a QUEUED source file inside the caller's transaction."""
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"""
                INSERT INTO source_files
                    (original_name, storage_key, file_type, file_size, uploaded_by,
                     status, ocr_status)
                VALUES (%s, %s, %s, %s, %s, %s, %s)
                RETURNING {_SELECT_COLUMNS}
                """,  # noqa: S608
                (
                    original_name,
                    storage_key,
                    file_type,
                    file_size,
                    uploaded_by,
                    ProcessingStatus.QUEUED.value,
                    ocr_status.value,
                ),
            )
            row = cur.fetchone()
        if row is None:
            raise RuntimeError(f"Failed to create source file '{original_name}'")
        return _row_to_source_file(row)

    def mark_processing(self, file_id: int) -> bool:
        """QUEUED -> PROCESSING (or re-claim of PROCESSING on redelivery).

        Returns False when the file is already terminal and must not be touched.
        """
        with self._db.transaction() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE source_files
                    SET status = %s, updated_at = NOW()
                    WHERE id = %s AND status = ANY(%s)
                    """,
                    (
                        ProcessingStatus.PROCESSING.value,
                        file_id,
                        [s.value for s in CLAIMABLE_STATUSES],
                    ),
                )
                return cur.rowcount == 1

    def record_attempt_error(self, file_id: int, message: str) -> None:
        """Keep the last error on a file that stays PROCESSING while its job retries."""
        with self._db.transaction() as conn:
            conn.execute(
                """
                UPDATE source_files
                SET error_message = %s, updated_at = NOW()
                WHERE id = %s AND status = %s
                """,
                (message, file_id, ProcessingStatus.PROCESSING.value),
            )

    def mark_error(
        self,
        file_id: int,
        message: str,
        conn: psycopg.Connection[Any] | None = None,
    ) -> bool:
        """PROCESSING -> ERROR with error_message populated. ocr_status is left as is."""
        if conn is not None:
            return self._mark_error(conn, file_id, message)
        with self._db.transaction() as own_conn:
            return self._mark_error(own_conn, file_id, message)

    @staticmethod
    def _mark_error(conn: psycopg.Connection[Any], file_id: int, message: str) -> bool:
        with conn.cursor() as cur:
            cur.execute(
                """
                UPDATE source_files
                SET status = %s, error_message = %s, updated_at = NOW()
                WHERE id = %s AND status = %s
                """,
                (
                    ProcessingStatus.ERROR.value,
                    message,
                    file_id,
                    ProcessingStatus.PROCESSING.value,
                ),
            )
            return cur.rowcount == 1

    def count_cleaned_records(self, file_id: int) -> int:
        with self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT COUNT(*) FROM cleaned_records WHERE source_file_id = %s",
                    (file_id,),
                )
                row = cur.fetchone()
        return int(row[0]) if row else 0
