import time
from typing import Any, Callable, Hashable, Optional


class QueryCache:
    """TTL-кеш результатов чтения, ключ — точная комбинация фильтра и пагинации.

    ttl <= 0 отключает кеш. После новой заявки кеш очищается целиком.
    """

    def __init__(self, ttl: float = 60.0, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[Hashable, tuple[float, Any]] = {}
        self.hits = 0
        self.misses = 0

    @property
    def enabled(self) -> bool:
        return self.ttl > 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: Hashable) -> tuple[bool, Optional[Any]]:
        if not self.enabled:
            return False, None
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return False, None
        expires_at, value = entry
        if expires_at <= self._clock():
            del self._entries[key]
            self.misses += 1
            return False, None
        self.hits += 1
        return True, value

    def set(self, key: Hashable, value: Any) -> None:
        if self.enabled:
            self._entries[key] = (self._clock() + self.ttl, value)

    def clear(self) -> None:
        self._entries.clear()

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [k for k, (exp, _) in self._entries.items() if exp <= now]
        for k in expired:
            del self._entries[k]
        return len(expired)
