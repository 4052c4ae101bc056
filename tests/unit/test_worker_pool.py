import threading
import time
from unittest.mock import MagicMock, patch

from docworker.database.models import Job
from docworker.worker.pool import WorkerPool


def _make_pool(concurrency: int = 5) -> tuple[WorkerPool, MagicMock, MagicMock]:
    """Create a WorkerPool with mocked dependencies."""
    mock_queue = MagicMock()
    mock_runner = MagicMock()
    settings = MagicMock(queue_concurrency=concurrency, job_poll_interval_seconds=1)
    pool = WorkerPool(mock_queue, mock_runner, settings)
    return pool, mock_queue, mock_runner


def _make_job(job_id: int = 1) -> Job:
    return Job(id=job_id, file_id=10, attempt=0)


class TestWorkerPoolDispatch:
    def test_dispatches_job_to_runner(self) -> None:
        pool, _queue, mock_runner = _make_pool()
        job = _make_job()

        with patch.object(pool, "_try_claim_job", side_effect=[job, KeyboardInterrupt]):
            pool.run()

        mock_runner.run.assert_called_once_with(job)

    def test_dispatches_multiple_jobs(self) -> None:
        pool, _queue, mock_runner = _make_pool()
        jobs = [_make_job(1), _make_job(2)]

        with patch.object(pool, "_try_claim_job", side_effect=[*jobs, KeyboardInterrupt]):
            pool.run()

        assert mock_runner.run.call_count == 2

    def test_stops_after_max_jobs(self) -> None:
        pool, mock_queue, mock_runner = _make_pool()
        mock_queue.claim_next.side_effect = [_make_job(i) for i in range(1, 4)]

        pool.run(max_jobs=2)

        assert mock_runner.run.call_count == 2
        assert mock_queue.claim_next.call_count == 2


class TestWorkerPoolConcurrency:
    def test_concurrency_from_settings(self) -> None:
        pool, *_ = _make_pool(concurrency=3)

        assert pool.concurrency == 3

    def test_concurrency_is_at_least_one(self) -> None:
        pool, *_ = _make_pool(concurrency=0)

        assert pool.concurrency == 1

    def test_never_exceeds_slot_count(self) -> None:
        pool, mock_queue, mock_runner = _make_pool(concurrency=2)
        mock_queue.claim_next.side_effect = [_make_job(i) for i in range(1, 7)]
        lock = threading.Lock()
        active = 0
        peak = 0

        def slow_run(job: Job) -> None:
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            time.sleep(0.05)
            with lock:
                active -= 1

        mock_runner.run.side_effect = slow_run

        pool.run(max_jobs=6)

        assert mock_runner.run.call_count == 6
        assert peak <= 2

    def test_failed_job_releases_slot(self) -> None:
        pool, mock_queue, mock_runner = _make_pool(concurrency=1)
        mock_queue.claim_next.side_effect = [_make_job(i) for i in range(1, 4)]
        mock_runner.run.side_effect = RuntimeError("boom")

        pool.run(max_jobs=3)  # Would block forever if the slot leaked

        assert mock_runner.run.call_count == 3


class TestWorkerPoolSleep:
    def test_sleeps_when_no_job(self) -> None:
        pool, _queue, _runner = _make_pool()

        with (
            patch.object(pool, "_try_claim_job", side_effect=[None, KeyboardInterrupt]),
            patch("docworker.worker.pool.time.sleep") as mock_sleep,
        ):
            pool.run()

        mock_sleep.assert_called_once_with(1)

    def test_claim_error_is_treated_as_no_job(self) -> None:
        pool, mock_queue, _runner = _make_pool()
        mock_queue.claim_next.side_effect = RuntimeError("connection refused")

        assert pool._try_claim_job() is None


class TestWorkerPoolShutdown:
    def test_handles_keyboard_interrupt(self) -> None:
        pool, _queue, _runner = _make_pool()

        with patch.object(pool, "_try_claim_job", side_effect=KeyboardInterrupt):
            pool.run()  # Should not raise

    def test_waits_for_in_flight_jobs(self) -> None:
        pool, _queue, mock_runner = _make_pool()
        finished = threading.Event()

        def slow_run(job: Job) -> None:
            time.sleep(0.05)
            finished.set()

        mock_runner.run.side_effect = slow_run

        with patch.object(pool, "_try_claim_job", side_effect=[_make_job(), KeyboardInterrupt]):
            pool.run()

        assert finished.is_set()
