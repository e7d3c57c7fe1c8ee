from dataclasses import dataclass, field
from typing import Optional

from core.errors import NotFoundRecord
from database.models import Application
from db import applications as store
from db.base import ConnectionPool
from .query_cache import QueryCache


@dataclass
class QueryResult:
    rows: list[Application]
    total: Optional[int]
    limit: int
    offset: int
    cached: bool = field(default=False)

    @property
    def has_more(self) -> bool:
        if self.total is None:
            return False
        return self.offset + len(self.rows) < self.total


def _role_key(role: Optional[str]) -> Optional[str]:
    return None if not role or role == "all" else role


class QueryService:
    def __init__(self, pool: ConnectionPool, cache: Optional[QueryCache] = None) -> None:
        self.pool = pool
        self.cache = cache if cache is not None else QueryCache(ttl=0)

    async def count(self, role: Optional[str] = None, status: Optional[str] = None) -> int:
        key = ("count", _role_key(role), status or None)
        hit, value = self.cache.get(key)
        if hit:
            return value
        total = await store.count_applications(self.pool, role, status)
        self.cache.set(key, total)
        return total

    async def list(
        self,
        role: Optional[str] = None,
        status: Optional[str] = None,
        limit: Optional[int] = 10,
        offset: Optional[int] = 0,
        sort: Optional[str] = None,
        order: Optional[str] = None,
        include_total: bool = True,
    ) -> QueryResult:
        limit = store.clamp_limit(limit)
        offset = store.clamp_offset(offset)
        sort = store.normalize_sort(sort)
        order = store.normalize_order(order)

        key = ("list", _role_key(role), status or None, limit, offset, sort, order, include_total)
        hit, value = self.cache.get(key)
        if hit:
            rows, total = value
            return QueryResult(list(rows), total, limit, offset, cached=True)

        if include_total:
            rows, total = await store.list_applications_with_total(
                self.pool, role, status, limit, offset, sort, order
            )
        else:
            rows = await store.list_applications(self.pool, role, status, limit, offset, sort, order)
            total = None

        self.cache.set(key, (tuple(rows), total))
        return QueryResult(rows, total, limit, offset)

    async def record_at(self, role: Optional[str] = None, offset: int = 0, status: Optional[str] = None) -> Application:
        """Одна заявка по смещению (новые первыми). Нет такой позиции: NotFoundRecord."""
        result = await self.list(role, status, limit=1, offset=offset, include_total=False)
        if not result.rows:
            raise NotFoundRecord(f"no application at offset {offset}")
        return result.rows[0]

    async def count_by_role(self) -> dict[str, int]:
        return await store.count_by_role(self.pool)

    def invalidate(self) -> None:
        self.cache.clear()
