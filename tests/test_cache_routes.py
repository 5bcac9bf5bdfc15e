"""Tests for the brand result cache endpoints."""

import pytest
from fastapi.testclient import TestClient

from brandplot.adapters.storage.in_memory import InMemoryKeyValueStorage
from brandplot.api.routes.cache import get_result_cache
from brandplot.main import app
from brandplot.utils.result_cache import BrandResultCache

HOUR = 60 * 60

SAMPLE = {
    "idUnico": "cafco-brandplot",
    "companyName": "Café & Co.",
    "diagnostico": "Marca acolhedora",
    "answers": ["Café & Co.", "Paixão por café"],
}


@pytest.fixture
def storage() -> InMemoryKeyValueStorage:
    return InMemoryKeyValueStorage()


@pytest.fixture
def client(storage, clock):
    cache = BrandResultCache(storage, clock=clock)
    app.dependency_overrides[get_result_cache] = lambda: cache
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_result_cache, None)


def test_get_when_empty_returns_404(client, valid_api_key_headers) -> None:
    resp = client.get("/v1/brand/cache", headers=valid_api_key_headers)

    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "cache_miss"


def test_put_then_get_round_trip(client, clock, valid_api_key_headers) -> None:
    put = client.put("/v1/brand/cache", json=SAMPLE, headers=valid_api_key_headers)
    assert put.status_code == 200
    assert put.json() == {"ok": True, "reason": None}

    resp = client.get("/v1/brand/cache", headers=valid_api_key_headers)

    assert resp.status_code == 200
    assert resp.json() == {**SAMPLE, "timestamp": int(clock() * 1000)}


def test_put_keeps_unknown_fields(client, valid_api_key_headers) -> None:
    client.put("/v1/brand/cache", json={**SAMPLE, "contexto": "setor de cafés"}, headers=valid_api_key_headers)

    assert client.get("/v1/brand/cache", headers=valid_api_key_headers).json()["contexto"] == "setor de cafés"


def test_put_validates_payload(client, valid_api_key_headers) -> None:
    resp = client.put("/v1/brand/cache", json={"companyName": "x"}, headers=valid_api_key_headers)

    assert resp.status_code == 422


def test_get_id(client, valid_api_key_headers) -> None:
    assert client.get("/v1/brand/cache/id", headers=valid_api_key_headers).status_code == 404

    client.put("/v1/brand/cache", json=SAMPLE, headers=valid_api_key_headers)
    resp = client.get("/v1/brand/cache/id", headers=valid_api_key_headers)

    assert resp.json() == {"idUnico": "cafco-brandplot"}


def test_patch_merges_fields(client, clock, valid_api_key_headers) -> None:
    client.put("/v1/brand/cache", json=SAMPLE, headers=valid_api_key_headers)
    clock.advance(30)

    resp = client.patch("/v1/brand/cache", json={"scoreDiagnostico": "87"}, headers=valid_api_key_headers)
    assert resp.status_code == 200

    record = client.get("/v1/brand/cache", headers=valid_api_key_headers).json()
    assert record["scoreDiagnostico"] == "87"
    assert record["diagnostico"] == SAMPLE["diagnostico"]
    assert record["timestamp"] == int(clock() * 1000)


def test_patch_without_record_returns_404(client, storage, valid_api_key_headers) -> None:
    resp = client.patch("/v1/brand/cache", json={"diagnostico": "x"}, headers=valid_api_key_headers)

    assert resp.status_code == 404
    assert storage.get_item("brandplotData") is None


def test_delete_is_idempotent(client, valid_api_key_headers) -> None:
    client.put("/v1/brand/cache", json=SAMPLE, headers=valid_api_key_headers)

    assert client.delete("/v1/brand/cache", headers=valid_api_key_headers).json() == {"ok": True, "reason": None}
    assert client.delete("/v1/brand/cache", headers=valid_api_key_headers).status_code == 200
    assert client.get("/v1/brand/cache", headers=valid_api_key_headers).status_code == 404


def test_expired_record_returns_404(client, clock, storage, valid_api_key_headers) -> None:
    client.put("/v1/brand/cache", json=SAMPLE, headers=valid_api_key_headers)
    clock.advance(24 * HOUR + 1)

    assert client.get("/v1/brand/cache", headers=valid_api_key_headers).status_code == 404
    assert storage.get_item("brandplotData") is None


def test_storage_failure_returns_503(clock, valid_api_key_headers) -> None:
    cache = BrandResultCache(InMemoryKeyValueStorage(max_value_bytes=16), clock=clock)
    app.dependency_overrides[get_result_cache] = lambda: cache
    try:
        resp = TestClient(app).put("/v1/brand/cache", json=SAMPLE, headers=valid_api_key_headers)
    finally:
        app.dependency_overrides.pop(get_result_cache, None)

    assert resp.status_code == 503
    body = resp.json()["error"]
    assert body["code"] == "cache_write_failed"
    assert body["details"]["reason"] == "storage_quota_exceeded"


def test_cache_routes_require_api_key(client) -> None:
    assert client.get("/v1/brand/cache").status_code == 403
    assert client.put("/v1/brand/cache", json=SAMPLE).status_code == 403


def test_default_cache_is_file_backed(tmp_path, monkeypatch) -> None:
    from brandplot.adapters.storage.file import FileKeyValueStorage
    from brandplot.api.routes import cache as cache_module

    monkeypatch.setattr(cache_module, "_cache", None)
    monkeypatch.setattr(cache_module.settings.cache, "storage_dir", str(tmp_path))

    cache = get_result_cache()
    cache.set(SAMPLE)

    assert cache is get_result_cache()
    assert isinstance(cache._storage, FileKeyValueStorage)
    assert (tmp_path / "brandplotData.json").is_file()
