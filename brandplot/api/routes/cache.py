"""Endpoints over the durable brand result cache."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from brandplot.adapters.storage.file import FileKeyValueStorage
from brandplot.core.auth import verify_api_key
from brandplot.core.config import settings
from brandplot.core.errors import NotFoundAppError, StorageAppError
from brandplot.schemas.brand import BrandResult, BrandResultUpdate, CacheWriteResponse
from brandplot.utils.result_cache import BrandResultCache, CacheWriteResult

router = APIRouter(
    prefix="/brand/cache",
    tags=["Cache"],
    dependencies=[Depends(verify_api_key)],
)

_cache: BrandResultCache | None = None


def get_result_cache() -> BrandResultCache:
    """Process-wide cache backed by files under ``CACHE_STORAGE_DIR``."""

    global _cache
    if _cache is None:
        storage = FileKeyValueStorage(
            settings.cache.storage_dir,
            max_value_bytes=settings.cache.max_value_bytes,
        )
        _cache = BrandResultCache(
            storage,
            storage_key=settings.cache.storage_key,
            ttl_hours=settings.cache.ttl_hours,
        )
    return _cache


CacheDep = Annotated[BrandResultCache, Depends(get_result_cache)]


def _raise_for_failure(result: CacheWriteResult) -> None:
    if result.ok:
        return
    if result.reason == "not_cached":
        raise NotFoundAppError(code="cache_miss", message="No brand result is cached")
    raise StorageAppError(
        code="cache_write_failed",
        message="The brand result cache could not be updated",
        details={"reason": result.reason or "unknown"},
    )


@router.get("")
def read_cached_result(cache: CacheDep) -> dict[str, Any]:
    """Return the cached brand result including its ``timestamp``."""
    record = cache.get()
    if record is None:
        raise NotFoundAppError(code="cache_miss", message="No brand result is cached")
    return record


@router.get("/id")
def read_cached_id(cache: CacheDep) -> dict[str, str]:
    id_unico = cache.get_id_unico()
    if id_unico is None:
        raise NotFoundAppError(code="cache_miss", message="No brand result is cached")
    return {"idUnico": id_unico}


@router.put("", response_model=CacheWriteResponse)
def store_result(body: BrandResult, cache: CacheDep) -> CacheWriteResponse:
    """Replace the cached brand result."""
    result = cache.set(body.model_dump(by_alias=True, exclude_none=True))
    _raise_for_failure(result)
    return CacheWriteResponse(ok=result.ok, reason=result.reason)


@router.patch("", response_model=CacheWriteResponse)
def update_result(body: BrandResultUpdate, cache: CacheDep) -> CacheWriteResponse:
    """Merge the sent fields into the cached result and refresh its expiry."""
    result = cache.update(body.model_dump(by_alias=True, exclude_unset=True))
    _raise_for_failure(result)
    return CacheWriteResponse(ok=result.ok, reason=result.reason)


@router.delete("", response_model=CacheWriteResponse)
def clear_result(cache: CacheDep) -> CacheWriteResponse:
    result = cache.clear()
    _raise_for_failure(result)
    return CacheWriteResponse(ok=result.ok, reason=result.reason)
