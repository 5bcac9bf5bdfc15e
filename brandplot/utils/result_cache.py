"""Durable single-record cache for the last generated brand result.

The dashboard keeps one result object (``idUnico``, company name, diagnosis,
questionnaire answers, ...) under a fixed storage key so pages can skip a
refetch. Records expire ``ttl_hours`` after their last write: ``update``
re-stamps the record, so expiry slides with every change.

Storage and serialization failures never propagate. Reads degrade to "not
cached" and writes report a ``CacheWriteResult`` that callers may inspect or
ignore.
"""

from __future__ import annotations

import json
import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from brandplot.adapters.storage.base import AbstractKeyValueStorage
from brandplot.core.errors import StorageAppError

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "brandplotData"
DEFAULT_TTL_HOURS = 24
TIMESTAMP_FIELD = "timestamp"
ID_FIELD = "idUnico"


@dataclass(frozen=True)
class CacheWriteResult:
    """Outcome of a mutating cache operation.

    Attributes:
        ok: Whether the storage now reflects the requested change.
        reason: Machine-readable failure reason when ``ok`` is False.
    """

    ok: bool
    reason: str | None = None

    @classmethod
    def success(cls) -> "CacheWriteResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, reason: str) -> "CacheWriteResult":
        return cls(ok=False, reason=reason)

    def __bool__(self) -> bool:
        return self.ok


class BrandResultCache:
    """Get/set/update/clear for one timestamped JSON record.

    Attributes:
        storage_key: Key the record is stored under.
        ttl_hours: Validity window measured from the last write.
    """

    def __init__(
        self,
        storage: AbstractKeyValueStorage,
        *,
        storage_key: str = DEFAULT_STORAGE_KEY,
        ttl_hours: float = DEFAULT_TTL_HOURS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if ttl_hours <= 0:
            raise ValueError("ttl_hours must be > 0")
        storage.validate_key(storage_key)

        self._storage = storage
        self.storage_key = storage_key
        self.ttl_hours = ttl_hours
        self._ttl_ms = ttl_hours * 60 * 60 * 1000
        self._clock = clock

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return f"BrandResultCache(storage_key={self.storage_key!r}, ttl_hours={self.ttl_hours})"

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def set(self, data: Mapping[str, Any]) -> CacheWriteResult:
        """Stamp ``data`` with the current time and overwrite the stored record.

        Args:
            data: Result payload. A ``timestamp`` key, if present, is replaced.

        Returns:
            CacheWriteResult; failures are logged, never raised.
        """

        record = dict(data)
        record[TIMESTAMP_FIELD] = self._now_ms()

        try:
            serialized = json.dumps(record, ensure_ascii=False)
        except (TypeError, ValueError, RecursionError) as exc:
            logger.error(
                "cache.set_failed",
                extra={"reason": "serialization_failed", "error_type": type(exc).__name__},
            )
            return CacheWriteResult.failure("serialization_failed")

        try:
            self._storage.set_item(self.storage_key, serialized)
        except StorageAppError as exc:
            logger.error(
                "cache.set_failed",
                extra={"reason": exc.code, "storage_key": self.storage_key},
            )
            return CacheWriteResult.failure(exc.code)

        logger.info(
            "cache.set",
            extra={"id_unico": record.get(ID_FIELD), "storage_key": self.storage_key},
        )
        return CacheWriteResult.success()

    def get(self) -> dict[str, Any] | None:
        """Return the stored record (with its ``timestamp``) or None.

        Missing, expired, unreadable and malformed records all read as None.
        An expired record is deleted as part of the read.
        """

        try:
            raw = self._storage.get_item(self.storage_key)
        except StorageAppError as exc:
            logger.error("cache.get_failed", extra={"reason": exc.code})
            return None

        if raw is None:
            logger.debug("cache.miss", extra={"reason": "not_found"})
            return None

        try:
            record = json.loads(raw)
        except (ValueError, RecursionError):
            logger.error("cache.get_failed", extra={"reason": "deserialization_failed"})
            return None

        timestamp = record.get(TIMESTAMP_FIELD) if isinstance(record, dict) else None
        if (
            isinstance(timestamp, bool)
            or not isinstance(timestamp, (int, float))
            or (isinstance(timestamp, float) and not math.isfinite(timestamp))
        ):
            logger.error("cache.get_failed", extra={"reason": "malformed_record"})
            return None

        if self._now_ms() - timestamp > self._ttl_ms:
            logger.info("cache.miss", extra={"reason": "expired"})
            self.clear()
            return None

        logger.debug("cache.hit", extra={"id_unico": record.get(ID_FIELD)})
        return record

    def get_id_unico(self) -> str | None:
        """Shortcut for the cached record's ``idUnico``."""

        record = self.get()
        if record is None:
            return None
        return record.get(ID_FIELD) or None

    def update(self, updates: Mapping[str, Any]) -> CacheWriteResult:
        """Merge ``updates`` over the cached record and store it again.

        Unspecified fields are kept and the timestamp is refreshed. When
        nothing is cached this is a no-op reported as ``not_cached``.
        """

        current = self.get()
        if current is None:
            logger.debug("cache.update_skipped", extra={"reason": "not_cached"})
            return CacheWriteResult.failure("not_cached")

        return self.set({**current, **updates})

    def clear(self) -> CacheWriteResult:
        """Delete the stored record. Safe to call when nothing is cached."""

        try:
            self._storage.remove_item(self.storage_key)
        except StorageAppError as exc:
            logger.error("cache.clear_failed", extra={"reason": exc.code})
            return CacheWriteResult.failure(exc.code)

        logger.info("cache.cleared", extra={"storage_key": self.storage_key})
        return CacheWriteResult.success()
