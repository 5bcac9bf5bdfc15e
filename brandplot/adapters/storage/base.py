"""Durable key/value storage interface.

Mirrors the browser ``localStorage`` contract the dashboard relies on: string
keys mapped to serialized string values, one read/write/delete per call.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class AbstractKeyValueStorage(ABC):
    """Interface for string key/value stores.

    Implementations raise ``StorageAppError`` for any backend failure
    (unavailable medium, quota exceeded, I/O error).
    """

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""
        raise NotImplementedError

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        raise NotImplementedError

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete ``key``. Removing an absent key is not an error."""
        raise NotImplementedError

    def validate_key(self, key: str) -> None:
        """Raise ``ValueError`` when ``key`` cannot be stored by this backend."""
