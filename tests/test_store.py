import pytest

from db import applications as store
from tests.conftest import insert_rows, make_payload


def _fields(**overrides) -> dict:
    payload = make_payload(**overrides)
    payload["age"] = int(payload["age"])
    return payload


@pytest.mark.asyncio
async def test_create_application_assigns_id_and_created_at(pool):
    app = await store.create_application(pool, _fields())

    assert app.id > 0
    assert app.created_at.tzinfo is not None
    assert app.status == "new"
    assert app.nickname == "Ann"
    assert app.portfolio == "https://example.com/ann"


@pytest.mark.asyncio
async def test_created_at_is_non_decreasing_and_newest_first(pool):
    created = [await store.create_application(pool, _fields(telegram=f"user_{i:03d}")) for i in range(5)]

    stamps = [a.created_at for a in created]
    assert stamps == sorted(stamps)

    rows = await store.list_applications(pool, limit=5)
    assert [r.id for r in rows] == [a.id for a in reversed(created)]


@pytest.mark.asyncio
async def test_role_all_means_no_filter(pool):
    await insert_rows(pool, 3, role="dev")
    await insert_rows(pool, 2, role="qa")

    assert await store.count_applications(pool) == 5
    assert await store.count_applications(pool, role="all") == 5
    assert await store.count_applications(pool, role="qa") == 2


@pytest.mark.asyncio
async def test_status_filter_is_exact(pool):
    await insert_rows(pool, 2, role="dev", status="new")
    await insert_rows(pool, 1, role="dev", status="accepted")

    assert await store.count_applications(pool, role="dev", status="accepted") == 1
    rows = await store.list_applications(pool, status="new")
    assert {r.status for r in rows} == {"new"}


@pytest.mark.asyncio
async def test_count_matches_list_length(pool):
    await insert_rows(pool, 7, role="builder")
    await insert_rows(pool, 4, role="media")

    for role in ("builder", "media", "all"):
        total = await store.count_applications(pool, role=role)
        rows = await store.list_applications(pool, role=role, limit=total)
        assert len(rows) == total


@pytest.mark.asyncio
async def test_limit_is_capped_at_100(pool):
    await insert_rows(pool, 105)

    rows = await store.list_applications(pool, limit=1000)
    assert len(rows) == 100


@pytest.mark.asyncio
async def test_negative_offset_is_clamped(pool):
    await insert_rows(pool, 3)

    assert len(await store.list_applications(pool, offset=-5)) == 3


@pytest.mark.asyncio
async def test_unknown_sort_and_order_fall_back_to_created_at_desc(pool):
    await insert_rows(pool, 4)

    default = await store.list_applications(pool)
    fallback = await store.list_applications(pool, sort="password; DROP TABLE applications", order="sideways")

    assert [r.id for r in fallback] == [r.id for r in default]
    assert await store.count_applications(pool) == 4


@pytest.mark.asyncio
async def test_sort_by_nickname_ascending(pool):
    for name in ("charlie", "alice", "bob"):
        await store.create_application(pool, _fields(nickname=name, telegram=f"{name}_tg"))

    rows = await store.list_applications(pool, sort="nickname", order="asc")
    assert [r.nickname for r in rows] == ["alice", "bob", "charlie"]


@pytest.mark.asyncio
async def test_list_with_total(pool):
    await insert_rows(pool, 12)

    rows, total = await store.list_applications_with_total(pool, limit=5, offset=10)
    assert total == 12
    assert len(rows) == 2


def test_normalizers():
    assert store.normalize_sort("age") == "age"
    assert store.normalize_sort("id") == "created_at"
    assert store.normalize_order("asc") == "ASC"
    assert store.normalize_order(None) == "DESC"
    assert store.clamp_limit(0) == 1
    assert store.clamp_limit(None) == 10
    assert store.clamp_offset(-1) == 0
