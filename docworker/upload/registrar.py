from pathlib import PurePosixPath

from docworker.config.settings import Settings
from docworker.database.connection import Database
from docworker.database.repositories.job_queue import JobQueue
from docworker.database.repositories.source_files_repository import SourceFileRepository
from docworker.logging.logger import Log
from docworker.notify.base import BaseNotifier, notify_uploaded
from docworker.processor.models import SourceFile
from docworker.processor.status import initial_ocr_status


def file_type_from_name(original_name: str) -> str:
    """Lowercase extension without the dot; empty when the name has none."""
    return PurePosixPath(original_name).suffix.lower().lstrip(".")


class UploadRegistrar:
    """Upload-flow side of the queue: records a stored upload and enqueues it.

    The source file row (status QUEUED) and its job are written in the same
    transaction, so no worker can see a job whose file is not committed yet.
    The optional notifier records the upload once that transaction committed.
    """

    def __init__(
        self,
        db: Database,
        files: SourceFileRepository,
        queue: JobQueue,
        settings: Settings,
        notifier: BaseNotifier | None = None,
    ) -> None:
        self._db = db
        self._files = files
        self._queue = queue
        self._ocr_types = settings.ocr_types()
        self._notifier = notifier

    def register(
        self,
        *,
        original_name: str,
        storage_key: str,
        file_size: int,
        uploaded_by: str,
    ) -> tuple[SourceFile, int]:
        """Create the QUEUED source file and its job. Returns (file, job_id)."""
        file_type = file_type_from_name(original_name)
        ocr_status = initial_ocr_status(file_type, self._ocr_types)
        with self._db.transaction() as conn:
            source_file = self._files.create(
                conn,
                original_name=original_name,
                storage_key=storage_key,
                file_type=file_type,
                file_size=file_size,
                uploaded_by=uploaded_by,
                ocr_status=ocr_status,
            )
            job_id = self._queue.enqueue(source_file.id, conn=conn)
        Log.info(
            f"Queued file {source_file.id} ('{original_name}', type={file_type or '?'}, "
            f"ocr={ocr_status.value}) as job {job_id}"
        )
        if self._notifier is not None:
            notify_uploaded(self._notifier, source_file)
        return source_file, job_id
