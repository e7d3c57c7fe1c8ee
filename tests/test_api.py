from unittest.mock import AsyncMock

import pytest

from core.errors import StorageError
from tests.conftest import insert_rows, make_payload


@pytest.mark.asyncio
async def test_submit_then_count(client):
    resp = await client.post("/api/application", json=make_payload(nickname="Ann", telegram="ann_dev01", role="dev"))

    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["data"]["nickname"] == "Ann"
    assert body["data"]["telegram_notified"] is False
    assert isinstance(body["data"]["id"], int)

    assert body["data"]["role"] == "dev"

    resp = await client.get("/api/count", params={"role": "dev"})
    assert resp.json()["count"] >= 1


@pytest.mark.asyncio
async def test_submit_missing_field_returns_400(client):
    payload = make_payload()
    del payload["role"]

    resp = await client.post("/api/application", json=payload)

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "missing required field: role"}


@pytest.mark.asyncio
async def test_submit_invalid_handle_returns_400(client):
    resp = await client.post("/api/application", json=make_payload(telegram="ab"))

    assert resp.status_code == 400
    assert resp.json()["error"] == "invalid handle"


@pytest.mark.asyncio
async def test_submit_malformed_json_returns_400(client):
    resp = await client.post(
        "/api/application",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert resp.status_code == 400
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_duplicate_submission_returns_429(client):
    first = await client.post("/api/application", json=make_payload())
    second = await client.post("/api/application", json=make_payload())

    assert first.status_code == 201
    assert second.status_code == 429
    assert int(second.headers["Retry-After"]) > 0

    count = await client.get("/api/count")
    assert count.json()["count"] == 1


@pytest.mark.asyncio
async def test_storage_failure_returns_generic_error(client, services, monkeypatch):
    monkeypatch.setattr(
        "services.submission.create_application",
        AsyncMock(side_effect=StorageError("database statement timed out")),
    )

    resp = await client.post("/api/application", json=make_payload())

    assert resp.status_code == 503
    assert resp.json() == {"success": False, "error": "Ошибка сервера, попробуйте позже"}
    assert len(services.guard) == 0


# =========================
# Чтение
# =========================
@pytest.mark.asyncio
async def test_list_caps_limit(client, pool):
    await insert_rows(pool, 105)

    resp = await client.get("/api/applications", params={"limit": 1000})

    body = resp.json()
    assert resp.status_code == 200
    assert len(body["data"]) <= 100
    assert body["pagination"] == {"total": 105, "limit": 100, "offset": 0, "hasMore": True}


@pytest.mark.asyncio
async def test_list_filters_and_reports_cache(client, pool):
    await insert_rows(pool, 2, role="dev")
    await insert_rows(pool, 3, role="qa")

    first = await client.get("/api/applications", params={"role": "qa", "limit": 2, "offset": 1})
    second = await client.get("/api/applications", params={"role": "qa", "limit": 2, "offset": 1})

    body = first.json()
    assert [a["role"] for a in body["data"]] == ["qa", "qa"]
    assert body["pagination"]["total"] == 3
    assert body["pagination"]["hasMore"] is False
    assert body["cached"] is False
    assert second.json()["cached"] is True

    status = await client.get("/api/status")
    assert status.json()["counters"]["cache_hits"] >= 1


@pytest.mark.asyncio
async def test_list_unknown_sort_falls_back(client, pool):
    await insert_rows(pool, 3)

    default = await client.get("/api/applications")
    injected = await client.get("/api/applications", params={"sort": "1; DROP TABLE applications", "order": "nope"})

    assert injected.status_code == 200
    assert [a["id"] for a in injected.json()["data"]] == [a["id"] for a in default.json()["data"]]


@pytest.mark.asyncio
async def test_non_integer_limit_returns_400(client):
    resp = await client.get("/api/applications", params={"limit": "many"})

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "invalid parameter: limit"}


@pytest.mark.asyncio
async def test_count_by_role(client, pool):
    await insert_rows(pool, 2, role="builder")
    await insert_rows(pool, 1, role="media")

    resp = await client.get("/api/count", params={"role": "builder"})

    assert resp.json() == {"success": True, "count": 2}


@pytest.mark.asyncio
async def test_count_storage_failure_returns_503(client, services, monkeypatch):
    monkeypatch.setattr(services.queries, "count", AsyncMock(side_effect=StorageError()))

    resp = await client.get("/api/count")

    assert resp.status_code == 503
    assert resp.json()["success"] is False


# =========================
# Статус
# =========================
@pytest.mark.asyncio
async def test_status_reports_counters(client):
    await client.post("/api/application", json=make_payload())
    await client.post("/api/application", json=make_payload(age=3))

    resp = await client.get("/api/status")

    body = resp.json()
    assert resp.status_code == 200
    assert body["database"] == "connected"
    assert body["telegram_bot"] == "inactive"
    assert body["applications_count"] == 1
    assert body["counters"]["submissions_accepted"] == 1
    assert body["counters"]["submissions_rejected"] == 1
    assert body["counters"]["db_connections_in_use"] == 0


@pytest.mark.asyncio
async def test_status_when_database_is_down(client, monkeypatch):
    monkeypatch.setattr("api.status.count_applications", AsyncMock(side_effect=StorageError()))

    resp = await client.get("/api/status")

    assert resp.status_code == 503
    assert resp.json()["database"] == "disconnected"


@pytest.mark.asyncio
async def test_health_and_info(client):
    health = await client.get("/api/health")
    info = await client.get("/api/info")

    assert health.status_code == 200
    assert health.json()["database"] is True
    assert info.json()["endpoints"]["submit_application"] == "POST /api/application"
    assert info.json()["notifications"] == "disabled"


@pytest.mark.asyncio
async def test_health_when_pool_closed(client, pool):
    await pool.close()

    resp = await client.get("/api/health")

    assert resp.status_code == 503
    assert resp.json()["database"] is False
