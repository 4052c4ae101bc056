from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, TypeVar

from docworker.processor.exceptions import StageError
from docworker.processor.status import OCRStatus, ProcessingStatus


@dataclass(frozen=True)
class SourceFile:
    """Domain model for an uploaded source file (subset of DB columns)."""

    id: int
    original_name: str
    storage_key: str
    file_type: str
    file_size: int
    uploaded_by: str
    status: ProcessingStatus
    ocr_status: OCRStatus
    extracted_text: str | None = None
    ocr_processed_at: datetime | None = None
    error_message: str | None = None

    @property
    def ocr_required(self) -> bool:
        return self.ocr_status is OCRStatus.PENDING


@dataclass(frozen=True)
class PipelineResult:
    """Pipeline -> committer contract. Passed by value, discarded after commit."""

    extracted_text: str
    cleaned_text: str
    category: str
    keywords: list[str]
    quality_score: float
    confidence_score: float
    cleaning_ops: dict[str, Any] = field(default_factory=dict)


T = TypeVar("T")
E = TypeVar("E", bound=StageError)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    @property
    def stage(self) -> str:
        return self.error.stage


PipelineOutcome = Ok[PipelineResult] | Err[StageError]
