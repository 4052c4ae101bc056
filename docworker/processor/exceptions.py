class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class SourceFileNotFoundError(ProcessorError):
    """Raised when a source file cannot be found in the database."""


class InvalidTransitionError(ProcessorError):
    """Raised when a processing status change violates the state machine."""


class StageError(ProcessorError):
    """A pipeline stage failed. ``stage`` names the failing stage."""

    stage: str = "pipeline"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def describe(self) -> str:
        """Operator-facing message stored verbatim in source_files.error_message."""
        return f"{self.stage} failed: {self.message}"


class FetchError(StageError):
    """Object missing from storage or the read could not complete."""

    stage = "fetch"


class ExtractionError(StageError):
    """OCR / text extraction backend failure."""

    stage = "extraction"


class CleaningError(StageError):
    stage = "cleaning"


class ClassificationError(StageError):
    stage = "classification"


class ScoringError(StageError):
    stage = "scoring"


class CommitError(ProcessorError):
    """The result transaction could not be committed. Retried until attempts run out."""
