"""Durable key/value storage adapters (the service-side ``localStorage``)."""

from brandplot.adapters.storage.base import AbstractKeyValueStorage
from brandplot.adapters.storage.file import FileKeyValueStorage
from brandplot.adapters.storage.in_memory import InMemoryKeyValueStorage

__all__ = [
    "AbstractKeyValueStorage",
    "FileKeyValueStorage",
    "InMemoryKeyValueStorage",
]
