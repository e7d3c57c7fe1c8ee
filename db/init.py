import logging

from .base import ConnectionPool

logger = logging.getLogger(__name__)


async def initialize_database(pool: ConnectionPool) -> int:
    """Создаёт таблицу заявок и индексы, возвращает текущее число заявок."""
    async with pool.connection() as db:
        await pool.run(db.execute("""
        CREATE TABLE IF NOT EXISTS applications (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            nickname VARCHAR(100) NOT NULL,
            age INTEGER NOT NULL,
            timezone VARCHAR(50),
            telegram VARCHAR(100) NOT NULL,
            discord VARCHAR(100),
            role VARCHAR(50) NOT NULL,
            experience TEXT,
            minecraft_exp TEXT,
            motivation TEXT,
            portfolio TEXT,
            time_available VARCHAR(100),
            created_at DATETIME NOT NULL DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now')),
            status VARCHAR(20) NOT NULL DEFAULT 'new'
        )
        """))

        await pool.run(db.execute(
            "CREATE INDEX IF NOT EXISTS idx_applications_created_at ON applications(created_at)"
        ))
        await pool.run(db.execute(
            "CREATE INDEX IF NOT EXISTS idx_applications_role_status ON applications(role, status)"
        ))
        await pool.run(db.execute(
            "CREATE INDEX IF NOT EXISTS idx_applications_telegram ON applications(telegram)"
        ))

        await pool.run(db.commit())

        cur = await pool.run(db.execute("SELECT COUNT(*) FROM applications"))
        row = await pool.run(cur.fetchone())

    count = row[0] if row else 0
    logger.info("✅ Таблица \"applications\" создана/проверена, заявок в базе: %s", count)
    return count
