import threading
import time
from concurrent.futures import ThreadPoolExecutor

from docworker.config.settings import Settings
from docworker.database.models import Job
from docworker.database.repositories.job_queue import JobQueue
from docworker.logging.logger import Log
from docworker.worker.job_runner import JobRunner


class WorkerPool:
    """Poll loop over a fixed number of slots: acquire slot -> claim -> dispatch.

    At most ``queue_concurrency`` pipelines run at once. A slot is released
    when its job finishes, whether it succeeded or failed.
    """

    def __init__(
        self,
        queue: JobQueue,
        job_runner: JobRunner,
        settings: Settings,
    ) -> None:
        self._queue = queue
        self._job_runner = job_runner
        self._settings = settings
        self._concurrency = max(1, settings.queue_concurrency)
        self._slots = threading.BoundedSemaphore(self._concurrency)

    @property
    def concurrency(self) -> int:
        return self._concurrency

    def run(self, max_jobs: int | None = None) -> None:
        """Main poll loop. Runs forever until interrupted.

        If max_jobs is set, stop after dispatching that many jobs (for testing).
        In-flight jobs are always allowed to finish before returning.
        """
        Log.info(f"Worker pool started with {self._concurrency} slots, polling for jobs")
        dispatched = 0
        executor = ThreadPoolExecutor(
            max_workers=self._concurrency,
            thread_name_prefix="docworker",
        )
        try:
            while max_jobs is None or dispatched < max_jobs:
                self._slots.acquire()
                job = self._try_claim_job()
                if job is None:
                    self._slots.release()
                    Log.debug("No jobs available, sleeping")
                    time.sleep(self._settings.job_poll_interval_seconds)
                    continue
                executor.submit(self._run_in_slot, job)
                dispatched += 1
        except KeyboardInterrupt:
            Log.info("Worker pool shutting down gracefully")
        finally:
            executor.shutdown(wait=True)
        Log.info(f"Worker pool stopped after dispatching {dispatched} jobs")

    def _run_in_slot(self, job: Job) -> None:
        try:
            self._job_runner.run(job)
        except Exception as exc:
            Log.exception(f"Unhandled error in job {job.id}: {exc}")
        finally:
            self._slots.release()

    def _try_claim_job(self) -> Job | None:
        """Attempt to claim the next job. Gracefully handle DB errors."""
        try:
            return self._queue.claim_next()
        except Exception as exc:
            Log.warning(f"Database error, will retry: {exc}")
            return None
