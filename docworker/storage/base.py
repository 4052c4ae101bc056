from abc import ABC, abstractmethod


class BaseStorage(ABC):
    """Contract for object storage adapters."""

    @abstractmethod
    def fetch(self, storage_key: str) -> bytes:
        """Read an object's bytes.

        Raises:
            FetchError: if the object is missing or the read cannot complete.
        """

    @abstractmethod
    def put(self, storage_key: str, data: bytes, content_type: str | None = None) -> None:
        """Write an object. Used by upload tooling and tests, never by the pipeline."""
