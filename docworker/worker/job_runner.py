from dataclasses import replace

from docworker.config.settings import Settings
from docworker.database.models import Job
from docworker.database.repositories.job_queue import JobQueue
from docworker.database.repositories.source_files_repository import SourceFileRepository
from docworker.logging.logger import Log
from docworker.notify.base import BaseNotifier, notify_completed, notify_failed
from docworker.processor.committer import ResultCommitter
from docworker.processor.exceptions import CommitError, SourceFileNotFoundError
from docworker.processor.models import Err, SourceFile
from docworker.processor.pipeline import Pipeline
from docworker.processor.status import ProcessingStatus


class JobRunner:
    """Run one job: claim the file, run the pipeline, commit, then ack or nack.

    Stage failures and commit failures go back to the queue for redelivery
    until ``max_job_attempts`` is reached; only then is the file marked ERROR.
    A commit failure leaves the file PROCESSING so a retry can complete it.
    A job redelivered after its lock expired with every attempt already used
    (the worker died each time) is failed without running the pipeline again.
    """

    CRASH_MESSAGE = "attempts exhausted: worker stopped before finishing"

    def __init__(
        self,
        pipeline: Pipeline,
        files: SourceFileRepository,
        queue: JobQueue,
        committer: ResultCommitter,
        notifier: BaseNotifier,
        settings: Settings,
    ) -> None:
        self._pipeline = pipeline
        self._files = files
        self._queue = queue
        self._committer = committer
        self._notifier = notifier
        self._settings = settings

    def run(self, job: Job) -> None:
        """Execute a single job. Never raises."""
        Log.info(f"Running job {job.id} for file {job.file_id} (attempt {job.attempt + 1})")
        try:
            self._process(job)
        except Exception as exc:
            # Infrastructure failure while recording the outcome: the job stays
            # locked and the visibility timeout redelivers it.
            Log.exception(f"Job {job.id} aborted without acknowledgement: {exc}")

    def attempts_exhausted(self, job: Job) -> bool:
        return job.attempt + 1 >= self._settings.max_job_attempts

    def deliveries_used_up(self, job: Job) -> bool:
        """True when earlier deliveries already consumed every allowed attempt."""
        return job.attempt >= self._settings.max_job_attempts

    def _process(self, job: Job) -> None:
        try:
            source_file = self._files.find_by_id(job.file_id)
        except SourceFileNotFoundError as exc:
            self._queue.fail(job.id, str(exc))
            Log.error(f"Job {job.id} dropped: {exc}")
            return

        if not self._files.mark_processing(source_file.id):
            Log.info(
                f"File {source_file.id} already {source_file.status.value}; "
                f"acknowledging redelivered job {job.id}"
            )
            self._queue.ack(job.id)
            return
        source_file = replace(source_file, status=ProcessingStatus.PROCESSING)
        Log.info(f"File {source_file.id} marked as processing")

        if self.deliveries_used_up(job):
            self._give_up(job, source_file, source_file.error_message or self.CRASH_MESSAGE)
            return

        outcome = self._pipeline.run(source_file)
        if isinstance(outcome, Err):
            self._handle_stage_failure(job, source_file, outcome.error.describe())
            return

        try:
            committed = self._committer.commit(source_file, outcome.value)
        except CommitError as exc:
            self._handle_commit_failure(job, source_file, str(exc))
            return

        self._queue.ack(job.id)
        if committed:
            Log.info(f"Job {job.id} completed successfully")
            notify_completed(self._notifier, source_file, outcome.value)

    def _handle_stage_failure(self, job: Job, source_file: SourceFile, message: str) -> None:
        if self.attempts_exhausted(job):
            self._give_up(job, source_file, message)
            return
        self._files.record_attempt_error(source_file.id, message)
        self._queue.nack(job.id, message)
        Log.warning(f"Job {job.id} will be retried (attempt {job.attempt + 1} failed: {message})")

    def _handle_commit_failure(self, job: Job, source_file: SourceFile, message: str) -> None:
        if self.attempts_exhausted(job):
            self._give_up(job, source_file, message)
            return
        self._queue.nack(job.id, message)
        Log.warning(f"Job {job.id} commit failed, file stays PROCESSING for retry: {message}")

    def _give_up(self, job: Job, source_file: SourceFile, message: str) -> None:
        marked = self._files.mark_error(source_file.id, message)
        self._queue.fail(job.id, message)
        attempts = min(job.attempt + 1, self._settings.max_job_attempts)
        Log.error(f"Job {job.id} permanently failed after {attempts} attempts: {message}")
        if marked:
            notify_failed(
                self._notifier,
                replace(source_file, status=ProcessingStatus.ERROR, error_message=message),
                message,
            )
