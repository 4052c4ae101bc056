from docworker.config.settings import Settings
from docworker.database.connection import Database
from docworker.database.repositories.job_queue import JobQueue
from docworker.database.repositories.source_files_repository import SourceFileRepository
from docworker.logging.logger import Log
from docworker.notify.factory import NotifierFactory
from docworker.processor.builder import build_pipeline
from docworker.processor.committer import ResultCommitter
from docworker.worker.job_runner import JobRunner
from docworker.worker.pool import WorkerPool


def main() -> None:
    """Entry point: open database -> build dependencies -> start worker pool."""
    settings = Settings()
    Log.configure(settings.log_level)
    db = Database(settings)
    db.open()

    try:
        db.apply_schema()
        queue = JobQueue(db, settings)
        job_runner = JobRunner(
            pipeline=build_pipeline(settings),
            files=SourceFileRepository(db),
            queue=queue,
            committer=ResultCommitter(db),
            notifier=NotifierFactory.create(settings, db),
            settings=settings,
        )
        WorkerPool(queue, job_runner, settings).run()
    finally:
        db.close()


if __name__ == "__main__":
    main()
