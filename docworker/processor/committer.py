import psycopg
from psycopg.types.json import Jsonb

from docworker.database.connection import Database
from docworker.logging.logger import Log
from docworker.processor.exceptions import CommitError
from docworker.processor.models import PipelineResult, SourceFile
from docworker.processor.status import (
    OCRStatus,
    ProcessingStatus,
    ReviewStatus,
    ensure_transition,
    ocr_status_on_commit,
)


class _AlreadyFinished(Exception):
    """Internal: the guarded status update matched no row."""


class ResultCommitter:
    """Applies a PipelineResult in one all-or-nothing transaction.

    The source file moves PROCESSING -> COMPLETED and exactly one cleaned
    record is inserted, or nothing is written at all.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    def commit(self, source_file: SourceFile, result: PipelineResult) -> bool:
        """Persist the result.

        Returns:
            True when committed; False when another delivery already moved the
            file out of PROCESSING (nothing written).

        Raises:
            CommitError: if the transaction could not be committed.
        """
        ensure_transition(ProcessingStatus.PROCESSING, ProcessingStatus.COMPLETED)
        ocr_status = ocr_status_on_commit(source_file.ocr_status)
        stamp_ocr = source_file.ocr_status is OCRStatus.PENDING

        try:
            with self._db.transaction() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        UPDATE source_files
                        SET status = %s,
                            extracted_text = %s,
                            ocr_status = %s,
                            ocr_processed_at = CASE WHEN %s THEN NOW() ELSE ocr_processed_at END,
                            error_message = NULL,
                            updated_at = NOW()
                        WHERE id = %s AND status = %s
                        """,
                        (
                            ProcessingStatus.COMPLETED.value,
                            result.extracted_text,
                            ocr_status.value,
                            stamp_ocr,
                            source_file.id,
                            ProcessingStatus.PROCESSING.value,
                        ),
                    )
                    if cur.rowcount != 1:
                        raise _AlreadyFinished

                    cur.execute(
                        """
                        INSERT INTO cleaned_records
                            (source_file_id, cleaned_text, category, keywords,
                             quality_score, confidence_score, review_status, cleaning_ops)
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                        RETURNING id
                        """,
                        (
                            source_file.id,
                            result.cleaned_text,
                            result.category,
                            list(result.keywords),
                            result.quality_score,
                            result.confidence_score,
                            ReviewStatus.PENDING.value,
                            Jsonb(result.cleaning_ops),
                        ),
                    )
                    row = cur.fetchone()
        except _AlreadyFinished:
            Log.warning(
                f"File {source_file.id} is no longer PROCESSING; result discarded"
            )
            return False
        except (psycopg.Error, RuntimeError) as exc:
            raise CommitError(f"commit failed for file {source_file.id}: {exc}") from exc

        Log.info(
            f"Committed file {source_file.id}: cleaned record {row[0] if row else '?'}, "
            f"category '{result.category}'"
        )
        return True
