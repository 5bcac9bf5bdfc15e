"""Dict-backed key/value storage for tests and ephemeral processes."""

from __future__ import annotations

import threading

from brandplot.adapters.storage.base import AbstractKeyValueStorage
from brandplot.core.errors import StorageAppError


class InMemoryKeyValueStorage(AbstractKeyValueStorage):
    """Keeps values in a dict. Optional ``max_value_bytes`` emulates a quota."""

    def __init__(self, *, max_value_bytes: int | None = None) -> None:
        self._items: dict[str, str] = {}
        self._lock = threading.Lock()
        self._max_value_bytes = max_value_bytes

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._items

    def get_item(self, key: str) -> str | None:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        size = len(value.encode("utf-8"))
        if self._max_value_bytes is not None and size > self._max_value_bytes:
            raise StorageAppError(
                code="storage_quota_exceeded",
                message="Value exceeds the storage quota",
                details={"storage_key": key, "reason": f"{size} > {self._max_value_bytes} bytes"},
            )
        with self._lock:
            self._items[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)
