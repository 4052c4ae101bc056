from pathlib import Path

from docworker.processor.exceptions import FetchError
from docworker.storage.base import BaseStorage


class LocalStorage(BaseStorage):
    """Stores objects as files under a root directory: {root}/{storage_key}."""

    DEFAULT_ROOT = Path("/app/files")

    def __init__(self, root: Path | None = None) -> None:
        self._root = (root if root is not None else self.DEFAULT_ROOT).resolve()

    def fetch(self, storage_key: str) -> bytes:
        path = self._resolve_path(storage_key)
        if not path.is_file():
            raise FetchError(f"Object not found: {storage_key}")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise FetchError(f"Cannot read object {storage_key}: {exc}") from exc

    def put(self, storage_key: str, data: bytes, content_type: str | None = None) -> None:
        path = self._resolve_path(storage_key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    def _resolve_path(self, storage_key: str) -> Path:
        path = (self._root / storage_key).resolve()
        if not path.is_relative_to(self._root):
            raise FetchError(f"Storage key escapes storage root: {storage_key}")
        return path
