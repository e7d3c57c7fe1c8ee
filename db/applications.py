import asyncio
from typing import Optional

from database.models import Application, OPTIONAL_FIELDS
from .base import ConnectionPool

# =========================
# APPLICATIONS
# =========================

MAX_LIMIT = 100
SORT_COLUMNS = ("created_at", "nickname", "role", "age")
SORT_ORDERS = ("ASC", "DESC")

INSERT_COLUMNS = ("nickname", "age", "telegram", "role") + OPTIONAL_FIELDS


def normalize_sort(sort: Optional[str]) -> str:
    return sort if sort in SORT_COLUMNS else "created_at"


def normalize_order(order: Optional[str]) -> str:
    order = (order or "").upper()
    return order if order in SORT_ORDERS else "DESC"


def clamp_limit(limit: Optional[int]) -> int:
    if limit is None:
        return 10
    return max(1, min(int(limit), MAX_LIMIT))


def clamp_offset(offset: Optional[int]) -> int:
    return max(0, int(offset or 0))


def _where(role: Optional[str], status: Optional[str]) -> tuple[str, list]:
    clauses, params = [], []
    if role and role != "all":
        clauses.append("role = ?")
        params.append(role)
    if status:
        clauses.append("status = ?")
        params.append(status)
    if not clauses:
        return "", params
    return " WHERE " + " AND ".join(clauses), params


async def create_application(pool: ConnectionPool, fields: dict) -> Application:
    """Вставляет заявку и возвращает её вместе с id и created_at из БД."""
    columns = ", ".join(INSERT_COLUMNS)
    placeholders = ", ".join("?" for _ in INSERT_COLUMNS)
    params = tuple(fields.get(c) for c in INSERT_COLUMNS)

    async with pool.connection() as db:
        cur = await pool.run(db.execute(
            f"INSERT INTO applications ({columns}) VALUES ({placeholders})",
            params
        ))
        application_id = cur.lastrowid
        await pool.run(db.commit())

        cur = await pool.run(db.execute(
            "SELECT * FROM applications WHERE id = ?",
            (application_id,)
        ))
        row = await pool.run(cur.fetchone())

    return Application.from_row(row)


async def count_applications(
    pool: ConnectionPool,
    role: Optional[str] = None,
    status: Optional[str] = None,
) -> int:
    where, params = _where(role, status)
    value = await pool.fetch_value(f"SELECT COUNT(*) FROM applications{where}", params)
    return int(value or 0)


async def list_applications(
    pool: ConnectionPool,
    role: Optional[str] = None,
    status: Optional[str] = None,
    limit: Optional[int] = 10,
    offset: Optional[int] = 0,
    sort: Optional[str] = None,
    order: Optional[str] = None,
) -> list[Application]:
    where, params = _where(role, status)
    column = normalize_sort(sort)
    direction = normalize_order(order)

    # column/direction берутся только из allow-list выше
    query = (
        f"SELECT * FROM applications{where} "
        f"ORDER BY {column} {direction}, id {direction} "
        "LIMIT ? OFFSET ?"
    )
    rows = await pool.fetch_all(query, params + [clamp_limit(limit), clamp_offset(offset)])
    return [Application.from_row(r) for r in rows]


async def list_applications_with_total(
    pool: ConnectionPool,
    role: Optional[str] = None,
    status: Optional[str] = None,
    limit: Optional[int] = 10,
    offset: Optional[int] = 0,
    sort: Optional[str] = None,
    order: Optional[str] = None,
) -> tuple[list[Application], int]:
    # два независимых чтения на разных соединениях пула
    rows, total = await asyncio.gather(
        list_applications(pool, role, status, limit, offset, sort, order),
        count_applications(pool, role, status),
    )
    return rows, total


async def count_by_role(pool: ConnectionPool) -> dict[str, int]:
    rows = await pool.fetch_all(
        "SELECT role, COUNT(*) AS cnt FROM applications GROUP BY role ORDER BY cnt DESC"
    )
    return {r["role"]: r["cnt"] for r in rows}
