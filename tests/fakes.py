"""In-memory stand-ins for the queue, source-file repository and committer.

They follow the same status rules as the SQL implementations so worker
scenarios can be exercised without PostgreSQL.
"""

from collections import defaultdict
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

from docworker.database.models import Job
from docworker.extraction.base import BaseTextExtractor
from docworker.notify.base import BaseNotifier
from docworker.processor.exceptions import (
    CommitError,
    ExtractionError,
    FetchError,
    SourceFileNotFoundError,
)
from docworker.processor.models import PipelineResult, SourceFile
from docworker.processor.status import (
    CLAIMABLE_STATUSES,
    ProcessingStatus,
    ReviewStatus,
    ensure_transition,
    initial_ocr_status,
    ocr_status_on_commit,
)
from docworker.storage.base import BaseStorage

OCR_TYPES = frozenset({"pdf", "png", "jpg", "jpeg"})


@dataclass
class CleanedRecordRow:
    """A cleaned_records row as InMemoryCommitter stores it."""

    id: int
    source_file_id: int
    cleaned_text: str
    category: str
    keywords: list[str]
    quality_score: float
    confidence_score: float
    review_status: str
    cleaning_ops: dict[str, Any] = field(default_factory=dict)


class InMemoryFiles:
    def __init__(self) -> None:
        self.files: dict[int, SourceFile] = {}
        self.records: list[CleanedRecordRow] = []
        self.history: dict[int, list[ProcessingStatus]] = defaultdict(list)
        self._next_id = 1

    def add(self, original_name: str, storage_key: str | None = None) -> SourceFile:
        file_type = original_name.rsplit(".", 1)[-1].lower() if "." in original_name else ""
        source_file = SourceFile(
            id=self._next_id,
            original_name=original_name,
            storage_key=storage_key or original_name,
            file_type=file_type,
            file_size=0,
            uploaded_by="user-1",
            status=ProcessingStatus.QUEUED,
            ocr_status=initial_ocr_status(file_type, OCR_TYPES),
        )
        self._next_id += 1
        self.files[source_file.id] = source_file
        self.history[source_file.id].append(ProcessingStatus.QUEUED)
        return source_file

    def find_by_id(self, file_id: int) -> SourceFile:
        if file_id not in self.files:
            raise SourceFileNotFoundError(f"Source file {file_id} not found")
        return self.files[file_id]

    def mark_processing(self, file_id: int) -> bool:
        if self.files[file_id].status not in CLAIMABLE_STATUSES:
            return False
        self._set(file_id, status=ProcessingStatus.PROCESSING)
        return True

    def record_attempt_error(self, file_id: int, message: str) -> None:
        if self.files[file_id].status is ProcessingStatus.PROCESSING:
            self.files[file_id] = replace(self.files[file_id], error_message=message)

    def mark_error(self, file_id: int, message: str, conn: Any = None) -> bool:
        if self.files[file_id].status is not ProcessingStatus.PROCESSING:
            return False
        self._set(file_id, status=ProcessingStatus.ERROR, error_message=message)
        return True

    def count_cleaned_records(self, file_id: int) -> int:
        return sum(1 for r in self.records if r.source_file_id == file_id)

    def _set(self, file_id: int, **changes: Any) -> None:
        current = self.files[file_id]
        target = changes.get("status", current.status)
        ensure_transition(current.status, target)
        self.files[file_id] = replace(current, **changes)
        if target is not current.status:
            self.history[file_id].append(target)


class InMemoryQueue:
    def __init__(self) -> None:
        self.jobs: dict[int, Job] = {}
        self._next_id = 1

    def enqueue(self, file_id: int, conn: Any = None) -> int:
        job_id = self._next_id
        self._next_id += 1
        self.jobs[job_id] = Job(id=job_id, file_id=file_id, attempt=0, status="pending")
        return job_id

    def claim_next(self) -> Job | None:
        for job in self.jobs.values():
            if job.status == "pending":
                job.status = "processing"
                return replace(job)
        return None

    def expire_lock(self, job_id: int) -> None:
        """Redeliver a claimed job as if its worker died; counts as an attempt."""
        job = self.jobs[job_id]
        job.attempt += 1
        job.status = "pending"

    def ack(self, job_id: int) -> None:
        self.jobs[job_id].status = "done"

    def nack(self, job_id: int, error: str) -> None:
        job = self.jobs[job_id]
        job.attempt += 1
        job.status = "pending"
        job.error_message = error

    def fail(self, job_id: int, error: str, conn: Any = None) -> None:
        job = self.jobs[job_id]
        job.attempt += 1
        job.status = "failed"
        job.error_message = error


class InMemoryCommitter:
    """Mirrors ResultCommitter: guarded on PROCESSING, all-or-nothing."""

    def __init__(self, files: InMemoryFiles, failures: int = 0) -> None:
        self._files = files
        self.failures = failures
        self._next_id = 1

    def commit(self, source_file: SourceFile, result: PipelineResult) -> bool:
        if self.failures > 0:
            self.failures -= 1
            raise CommitError(f"commit failed for file {source_file.id}: database unavailable")
        current = self._files.files[source_file.id]
        if current.status is not ProcessingStatus.PROCESSING:
            return False
        stamp = datetime.now(timezone.utc) if current.ocr_required else current.ocr_processed_at
        self._files._set(
            source_file.id,
            status=ProcessingStatus.COMPLETED,
            extracted_text=result.extracted_text,
            ocr_status=ocr_status_on_commit(current.ocr_status),
            ocr_processed_at=stamp,
            error_message=None,
        )
        self._files.records.append(
            CleanedRecordRow(
                id=self._next_id,
                source_file_id=source_file.id,
                cleaned_text=result.cleaned_text,
                category=result.category,
                keywords=list(result.keywords),
                quality_score=result.quality_score,
                confidence_score=result.confidence_score,
                review_status=ReviewStatus.PENDING.value,
                cleaning_ops=dict(result.cleaning_ops),
            )
        )
        self._next_id += 1
        return True


class RecordingNotifier(BaseNotifier):
    def __init__(self) -> None:
        self.uploaded: list[int] = []
        self.completed: list[int] = []
        self.failed: list[tuple[int, str]] = []

    def file_uploaded(self, source_file: SourceFile) -> None:
        self.uploaded.append(source_file.id)

    def file_completed(self, source_file: SourceFile, result: PipelineResult) -> None:
        self.completed.append(source_file.id)

    def file_failed(self, source_file: SourceFile, error_message: str) -> None:
        self.failed.append((source_file.id, error_message))


class DictStorage(BaseStorage):
    def __init__(self, objects: dict[str, bytes] | None = None) -> None:
        self.objects = dict(objects or {})

    def fetch(self, storage_key: str) -> bytes:
        if storage_key not in self.objects:
            raise FetchError(f"Object not found: {storage_key}")
        return self.objects[storage_key]

    def put(self, storage_key: str, data: bytes, content_type: str | None = None) -> None:
        self.objects[storage_key] = data


class StubExtractor(BaseTextExtractor):
    """Returns fixed text, or raises ExtractionError for the first ``failures`` calls."""

    def __init__(self, text: str = "", failures: int = 0) -> None:
        self.text = text
        self.failures = failures
        self.calls = 0

    def extract(self, data: bytes, file_type: str) -> str:
        self.calls += 1
        if self.failures > 0:
            self.failures -= 1
            raise ExtractionError(f"OCR backend unavailable (call {self.calls})")
        return self.text
