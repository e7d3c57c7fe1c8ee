import os

# config.settings падает без DATABASE_URL, а хендлеры импортируют его косвенно
os.environ.setdefault("DATABASE_URL", "sqlite:///test-applications.db")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from api.app import create_app
from core.container import build_services
from db.base import ConnectionPool
from db.init import initialize_database

ADMIN_ID = 100
STRANGER_ID = 555


def make_payload(**overrides) -> dict:
    payload = {
        "nickname": "Ann",
        "age": 20,
        "telegram": "ann_dev01",
        "role": "dev",
        "timezone": "UTC+3",
        "discord": "ann#0001",
        "experience": "2 years of Python",
        "minecraft_exp": "since 1.8",
        "motivation": "I like the server",
        "portfolio": "https://example.com/ann",
        "time_available": "4h/day",
    }
    payload.update(overrides)
    return payload


async def insert_rows(pool: ConnectionPool, count: int, role: str = "dev", status: str = "new") -> None:
    rows = [
        (f"user{i}", 20 + i % 50, f"handle_{i:05d}", role, status)
        for i in range(count)
    ]
    async with pool.connection() as db:
        await db.executemany(
            "INSERT INTO applications (nickname, age, telegram, role, status) VALUES (?, ?, ?, ?, ?)",
            rows,
        )
        await db.commit()


@pytest_asyncio.fixture
async def pool(tmp_path):
    pool = ConnectionPool(str(tmp_path / "applications.db"), size=3, timeout=2.0)
    await pool.open()
    await initialize_database(pool)
    yield pool
    await pool.close()


@pytest.fixture
def services(pool):
    return build_services(
        pool,
        bot=None,
        admin_ids={str(ADMIN_ID)},
        admin_chat_id=None,
        cache_ttl=60,
        cooldown=300,
    )


@pytest_asyncio.fixture
async def client(services):
    app = create_app(services)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
