import time
from typing import Callable, Hashable

from core.errors import RateLimitedError


class SubmissionGuard:
    """Защита от двойного клика: один и тот же ключ не чаще раза в cooldown секунд.

    Хранится в памяти процесса и сбрасывается при перезапуске. Просроченные
    ключи удаляются при чтении и периодически через sweep().
    """

    def __init__(self, cooldown: float = 300.0, clock: Callable[[], float] = time.monotonic) -> None:
        self.cooldown = cooldown
        self._clock = clock
        self._expires: dict[Hashable, float] = {}

    def __len__(self) -> int:
        return len(self._expires)

    def remaining(self, key: Hashable) -> float:
        expires_at = self._expires.get(key)
        if expires_at is None:
            return 0.0
        left = expires_at - self._clock()
        if left <= 0:
            del self._expires[key]
            return 0.0
        return left

    def check(self, key: Hashable) -> None:
        left = self.remaining(key)
        if left > 0:
            raise RateLimitedError(
                "duplicate submission, try again later",
                retry_after=left,
            )

    def register(self, key: Hashable) -> None:
        if self.cooldown > 0:
            self._expires[key] = self._clock() + self.cooldown

    def acquire(self, key: Hashable) -> None:
        """check + register без await между ними: одновременный дубль получает 429."""
        self.check(key)
        self.register(key)

    def release(self, key: Hashable) -> None:
        self._expires.pop(key, None)

    def sweep(self) -> int:
        now = self._clock()
        expired = [k for k, exp in self._expires.items() if exp <= now]
        for k in expired:
            del self._expires[k]
        return len(expired)
