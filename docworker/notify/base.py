from abc import ABC, abstractmethod

from docworker.logging.logger import Log
from docworker.processor.models import PipelineResult, SourceFile


class BaseNotifier(ABC):
    """Audit / notification hook for upload and processing outcomes. Best effort only."""

    @abstractmethod
    def file_uploaded(self, source_file: SourceFile) -> None:
        """Called after the QUEUED file and its job were committed."""

    @abstractmethod
    def file_completed(self, source_file: SourceFile, result: PipelineResult) -> None:
        """Called after the result transaction committed."""

    @abstractmethod
    def file_failed(self, source_file: SourceFile, error_message: str) -> None:
        """Called after the file reached ERROR."""


def notify_uploaded(notifier: BaseNotifier, source_file: SourceFile) -> None:
    """Run the upload hook; its failures are logged and never propagate."""
    try:
        notifier.file_uploaded(source_file)
    except Exception as exc:
        Log.warning(f"Notifier failed for uploaded file {source_file.id}: {exc}")


def notify_completed(notifier: BaseNotifier, source_file: SourceFile, result: PipelineResult) -> None:
    """Run the completion hook; its failures are logged and never propagate."""
    try:
        notifier.file_completed(source_file, result)
    except Exception as exc:
        Log.warning(f"Notifier failed for completed file {source_file.id}: {exc}")


def notify_failed(notifier: BaseNotifier, source_file: SourceFile, error_message: str) -> None:
    """Run the failure hook; its failures are logged and never propagate."""
    try:
        notifier.file_failed(source_file, error_message)
    except Exception as exc:
        Log.warning(f"Notifier failed for errored file {source_file.id}: {exc}")
