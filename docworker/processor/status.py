"""Processing-status state machine for source files and their OCR sub-status.

ProcessingStatus:  QUEUED -> PROCESSING -> {COMPLETED | ERROR}
OCRStatus:         NOT_REQUIRED (fixed at upload)  or  PENDING -> COMPLETED

PROCESSING -> PROCESSING is allowed so a redelivered job can re-claim a file
whose previous attempt died or failed to commit. Nothing leaves a terminal
state and QUEUED is never re-entered.
"""

from collections.abc import Iterable
from enum import Enum

from docworker.processor.exceptions import InvalidTransitionError


class ProcessingStatus(str, Enum):
    QUEUED = "QUEUED"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"


class OCRStatus(str, Enum):
    NOT_REQUIRED = "NOT_REQUIRED"
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


class ReviewStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


TERMINAL_STATUSES = frozenset({ProcessingStatus.COMPLETED, ProcessingStatus.ERROR})

_ALLOWED: dict[ProcessingStatus, frozenset[ProcessingStatus]] = {
    ProcessingStatus.QUEUED: frozenset({ProcessingStatus.PROCESSING}),
    ProcessingStatus.PROCESSING: frozenset(
        {
            ProcessingStatus.PROCESSING,
            ProcessingStatus.COMPLETED,
            ProcessingStatus.ERROR,
        }
    ),
    ProcessingStatus.COMPLETED: frozenset(),
    ProcessingStatus.ERROR: frozenset(),
}

# Statuses from which a worker may claim a file.
CLAIMABLE_STATUSES = frozenset(
    status for status, targets in _ALLOWED.items() if ProcessingStatus.PROCESSING in targets
)


def is_terminal(status: ProcessingStatus) -> bool:
    return status in TERMINAL_STATUSES


def can_transition(current: ProcessingStatus, target: ProcessingStatus) -> bool:
    return target in _ALLOWED[current]


def ensure_transition(current: ProcessingStatus, target: ProcessingStatus) -> None:
    """Raise InvalidTransitionError unless current -> target is a legal move."""
    if not can_transition(current, target):
        raise InvalidTransitionError(
            f"Illegal status transition {current.value} -> {target.value}"
        )


def initial_ocr_status(file_type: str, ocr_types: Iterable[str]) -> OCRStatus:
    """OCR requirement is decided once, at upload time, from the file type."""
    if file_type.lower().lstrip(".") in {t.lower() for t in ocr_types}:
        return OCRStatus.PENDING
    return OCRStatus.NOT_REQUIRED


def ocr_status_on_commit(current: OCRStatus) -> OCRStatus:
    if current is OCRStatus.PENDING:
        return OCRStatus.COMPLETED
    return current
