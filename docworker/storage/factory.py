from collections.abc import Callable
from pathlib import Path
from typing import ClassVar

from docworker.config.settings import Settings
from docworker.storage.base import BaseStorage
from docworker.storage.local_adapter import LocalStorage
from docworker.storage.s3_adapter import S3Storage


def _local(settings: Settings) -> BaseStorage:
    return LocalStorage(root=Path(settings.storage_root))


def _s3(settings: Settings) -> BaseStorage:
    return S3Storage.from_credentials(
        bucket=settings.s3_bucket,
        endpoint_url=settings.s3_endpoint_url,
        access_key=settings.s3_access_key,
        secret_key=settings.s3_secret_key,
        region=settings.s3_region,
    )


class StorageFactory:
    """Creates the storage adapter named by settings.storage_backend."""

    BACKENDS: ClassVar[dict[str, Callable[[Settings], BaseStorage]]] = {
        "local": _local,
        "s3": _s3,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseStorage:
        backend = settings.storage_backend.lower()
        builder = cls.BACKENDS.get(backend)
        if builder is None:
            raise ValueError(
                f"Unknown storage backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
            )
        return builder(settings)
