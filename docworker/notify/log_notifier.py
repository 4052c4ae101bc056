from docworker.logging.logger import Log
from docworker.notify.base import BaseNotifier
from docworker.processor.models import PipelineResult, SourceFile


class LogNotifier(BaseNotifier):
    """Writes processing outcomes to the application log."""

    def file_uploaded(self, source_file: SourceFile) -> None:
        Log.info(
            f"File {source_file.id} ('{source_file.original_name}') uploaded: "
            f"{source_file.file_size} bytes"
        )

    def file_completed(self, source_file: SourceFile, result: PipelineResult) -> None:
        Log.info(
            f"File {source_file.id} ('{source_file.original_name}') processed: "
            f"category='{result.category}' quality={result.quality_score} "
            f"confidence={result.confidence_score}"
        )

    def file_failed(self, source_file: SourceFile, error_message: str) -> None:
        Log.error(
            f"File {source_file.id} ('{source_file.original_name}') failed: {error_message}"
        )
