import asyncio
import logging
import os
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Iterable, Optional, TypeVar

import aiosqlite

from core.errors import StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")

REQUIRED_TABLES = {"applications"}


def parse_db_path(database_url: str) -> str:
    if database_url.startswith("sqlite:///"):
        return database_url.replace("sqlite:///", "", 1)
    if database_url.startswith("sqlite:"):
        return database_url.replace("sqlite:", "", 1)
    return database_url


def ensure_db_directory(db_path: str) -> None:
    db_dir = os.path.dirname(db_path)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)


class ConnectionPool:
    """Ограниченный пул соединений aiosqlite.

    Соединения открываются заранее в open(). Каждое обращение берёт одно
    соединение из очереди (ждёт не дольше timeout) и возвращает его на
    любом пути выхода. run() ограничивает время одного запроса тем же
    timeout и переводит ошибки драйвера в StorageError.
    """

    def __init__(self, db_path: str, size: int = 5, timeout: float = 5.0) -> None:
        if size < 1:
            raise ValueError("pool size must be >= 1")
        self.db_path = db_path
        self.size = size
        self.timeout = timeout
        self._idle: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue()
        self._opened = 0
        self._closing = False

    @classmethod
    def from_url(cls, database_url: str, size: int = 5, timeout: float = 5.0) -> "ConnectionPool":
        return cls(parse_db_path(database_url), size=size, timeout=timeout)

    @property
    def in_use(self) -> int:
        return self._opened - self._idle.qsize()

    async def _connect(self) -> aiosqlite.Connection:
        db = await aiosqlite.connect(self.db_path)
        db.row_factory = aiosqlite.Row
        await db.execute(f"PRAGMA busy_timeout={int(self.timeout * 1000)};")
        await db.execute("PRAGMA journal_mode=WAL;")
        await db.execute("PRAGMA foreign_keys=ON;")
        return db

    async def open(self) -> None:
        ensure_db_directory(self.db_path)
        try:
            while self._opened < self.size:
                self._idle.put_nowait(await self._connect())
                self._opened += 1
        except (OSError, aiosqlite.Error) as e:
            logger.exception("❌ Не удалось открыть соединение с БД %s", self.db_path)
            raise StorageError("database unreachable") from e
        logger.info("✅ Пул БД открыт: %s соединений (%s)", self.size, self.db_path)

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        if self._closing:
            raise StorageError("database pool is closed")
        if self._opened == 0:
            await self.open()
        try:
            db = await asyncio.wait_for(self._idle.get(), self.timeout)
        except asyncio.TimeoutError:
            raise StorageError("timed out waiting for a database connection") from None
        try:
            yield db
        finally:
            self._idle.put_nowait(db)

    async def run(self, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, self.timeout)
        except asyncio.TimeoutError:
            logger.warning("⏱ Запрос к БД превысил %.1f с", self.timeout)
            raise StorageError("database statement timed out") from None
        except aiosqlite.OperationalError as e:
            # locked / disk / connection problems: повтор может помочь
            logger.exception("❌ Ошибка соединения с БД")
            raise StorageError("database unavailable") from e
        except aiosqlite.Error as e:
            logger.exception("❌ Ошибка выполнения запроса")
            raise StorageError("database statement failed", retryable=False) from e

    async def fetch_all(self, query: str, params: Iterable[Any] = ()) -> list[aiosqlite.Row]:
        async with self.connection() as db:
            cur = await self.run(db.execute(query, tuple(params)))
            return list(await self.run(cur.fetchall()))

    async def fetch_one(self, query: str, params: Iterable[Any] = ()) -> Optional[aiosqlite.Row]:
        async with self.connection() as db:
            cur = await self.run(db.execute(query, tuple(params)))
            return await self.run(cur.fetchone())

    async def fetch_value(self, query: str, params: Iterable[Any] = ()) -> Any:
        row = await self.fetch_one(query, params)
        return row[0] if row else None

    async def close(self) -> None:
        """Ждёт возврата всех соединений (не дольше timeout на каждое) и закрывает их."""
        self._closing = True
        drained = []
        try:
            while len(drained) < self._opened:
                drained.append(await asyncio.wait_for(self._idle.get(), self.timeout))
        except asyncio.TimeoutError:
            logger.warning(
                "⚠️ %s соединений БД не вернулись в пул до закрытия",
                self._opened - len(drained),
            )
        for db in drained:
            await db.close()
        self._opened -= len(drained)
        logger.info("🔌 Пул БД закрыт")


async def db_health_check(pool: ConnectionPool) -> None:
    rows = await pool.fetch_all("SELECT name FROM sqlite_master WHERE type='table'")
    tables = {row["name"] for row in rows}

    missing = REQUIRED_TABLES - tables
    if missing:
        raise RuntimeError(f"❌ Missing DB tables: {missing}")

    logger.info("✅ DB health check passed")


async def ping(pool: ConnectionPool) -> bool:
    try:
        return await pool.fetch_value("SELECT 1") == 1
    except StorageError:
        return False
