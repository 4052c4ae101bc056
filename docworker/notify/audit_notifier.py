from typing import Any

from psycopg.types.json import Jsonb

from docworker.database.connection import Database
from docworker.notify.base import BaseNotifier
from docworker.processor.models import PipelineResult, SourceFile


class AuditLogNotifier(BaseNotifier):
    """Records uploads and processing outcomes in the audit_logs table.

    Each entry is written in its own transaction, after the upload or result
    commit, so an audit failure can never undo the recorded work.
    """

    RESOURCE = "file"

    def __init__(self, db: Database) -> None:
        self._db = db

    def file_uploaded(self, source_file: SourceFile) -> None:
        self._write(
            "UPLOAD_FILE",
            source_file,
            {"name": source_file.original_name, "size": source_file.file_size},
        )

    def file_completed(self, source_file: SourceFile, result: PipelineResult) -> None:
        self._write(
            "PROCESS_FILE_COMPLETED",
            source_file,
            {
                "name": source_file.original_name,
                "category": result.category,
                "quality_score": result.quality_score,
                "confidence_score": result.confidence_score,
            },
        )

    def file_failed(self, source_file: SourceFile, error_message: str) -> None:
        self._write(
            "PROCESS_FILE_FAILED",
            source_file,
            {"name": source_file.original_name, "error": error_message},
        )

    def _write(self, action: str, source_file: SourceFile, details: dict[str, Any]) -> None:
        with self._db.transaction() as conn:
            conn.execute(
                """
                INSERT INTO audit_logs (action, resource, resource_id, details)
                VALUES (%s, %s, %s, %s)
                """,
                (action, self.RESOURCE, str(source_file.id), Jsonb(details)),
            )
