"""File-backed key/value storage.

Each key is one UTF-8 file inside ``root_dir``. Writes go to a temporary file
in the same directory and are moved into place with ``os.replace``, so
readers never observe a half-written value.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path

from brandplot.adapters.storage.base import AbstractKeyValueStorage
from brandplot.core.errors import StorageAppError

logger = logging.getLogger(__name__)

STORAGE_KEY_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_.-]*$"
_VALID_KEY = re.compile(STORAGE_KEY_PATTERN)


class FileKeyValueStorage(AbstractKeyValueStorage):
    """Durable storage rooted at a directory, created lazily on first write."""

    def __init__(self, root_dir: str | os.PathLike[str], *, max_value_bytes: int | None = None) -> None:
        self._root = Path(root_dir)
        self._max_value_bytes = max_value_bytes

    @property
    def root_dir(self) -> Path:
        return self._root

    def validate_key(self, key: str) -> None:
        if not _VALID_KEY.match(key):
            raise ValueError(f"invalid storage key: {key!r}")

    def path_for(self, key: str) -> Path:
        """Resolve the file holding ``key``.

        Raises:
            ValueError: If the key could escape the storage directory.
        """
        self.validate_key(key)
        return self._root / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageAppError(
                code="storage_read_failed",
                message="Could not read from storage",
                details={"storage_key": key, "reason": type(exc).__name__},
            ) from exc

    def set_item(self, key: str, value: str) -> None:
        path = self.path_for(key)
        data = value.encode("utf-8")
        if self._max_value_bytes is not None and len(data) > self._max_value_bytes:
            raise StorageAppError(
                code="storage_quota_exceeded",
                message="Value exceeds the storage quota",
                details={"storage_key": key, "reason": f"{len(data)} > {self._max_value_bytes} bytes"},
            )

        tmp_name: str | None = None
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "wb", dir=self._root, prefix=f".{key}.", suffix=".tmp", delete=False
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, path)
        except OSError as exc:
            if tmp_name is not None:
                _discard_temp_file(tmp_name)
            raise StorageAppError(
                code="storage_write_failed",
                message="Could not write to storage",
                details={"storage_key": key, "reason": type(exc).__name__},
            ) from exc

        logger.debug("storage.written", extra={"storage_key": key, "size": len(data)})

    def remove_item(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageAppError(
                code="storage_delete_failed",
                message="Could not delete from storage",
                details={"storage_key": key, "reason": type(exc).__name__},
            ) from exc


def _discard_temp_file(path: str) -> None:
    """Best-effort removal of a leftover temporary file."""
    try:
        os.unlink(path)
    except OSError:
        logger.debug("storage.tmp_cleanup_failed", extra={"path": path})
