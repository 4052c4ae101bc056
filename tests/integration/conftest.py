import os
from collections.abc import Generator
from pathlib import Path

import pytest

from docworker.config.settings import Settings
from docworker.database.connection import Database
from docworker.database.repositories.job_queue import JobQueue
from docworker.database.repositories.source_files_repository import SourceFileRepository
from docworker.notify.audit_notifier import AuditLogNotifier
from docworker.processor.models import SourceFile
from docworker.storage.local_adapter import LocalStorage
from docworker.upload.registrar import UploadRegistrar


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "docworker_test")
    return Settings(retry_delay_seconds=0, job_poll_interval_seconds=0)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def database(test_settings: Settings) -> Generator[Database, None, None]:
    db = Database(test_settings)
    try:
        db.open()
        db.apply_schema()
    except Exception as e:
        db.close()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to a test database")
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def clean_tables(request: pytest.FixtureRequest) -> Generator[None, None, None]:
    if request.node.get_closest_marker("integration") is None:
        yield
        return
    db: Database = request.getfixturevalue("database")
    _truncate(db)
    yield
    _truncate(db)


def _truncate(db: Database) -> None:
    with db.transaction() as conn:
        conn.execute(
            "TRUNCATE audit_logs, cleaned_records, file_jobs, source_files RESTART IDENTITY"
        )


@pytest.fixture
def files(database: Database) -> SourceFileRepository:
    return SourceFileRepository(database)


@pytest.fixture
def queue(database: Database, test_settings: Settings) -> JobQueue:
    return JobQueue(database, test_settings)


@pytest.fixture
def storage(tmp_path: Path) -> LocalStorage:
    return LocalStorage(root=tmp_path)


@pytest.fixture
def registrar(
    database: Database,
    files: SourceFileRepository,
    queue: JobQueue,
    test_settings: Settings,
) -> UploadRegistrar:
    return UploadRegistrar(database, files, queue, test_settings, AuditLogNotifier(database))


@pytest.fixture
def upload(registrar: UploadRegistrar, storage: LocalStorage):  # type: ignore[no-untyped-def]
    """Store bytes and register them the way the upload flow does. Returns (file, job_id)."""

    def _upload(original_name: str, data: bytes | None) -> tuple[SourceFile, int]:
        storage_key = f"uploads/{original_name}"
        if data is not None:
            storage.put(storage_key, data)
        return registrar.register(
            original_name=original_name,
            storage_key=storage_key,
            file_size=len(data or b""),
            uploaded_by="user-1",
        )

    return _upload
