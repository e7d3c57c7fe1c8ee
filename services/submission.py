import asyncio
import logging
from typing import Any, Callable, Optional

from core.errors import RateLimitedError, StorageError, ValidationError
from database.models import Application, FIELD_LIMITS, OPTIONAL_FIELDS
from db.applications import create_application
from db.base import ConnectionPool
from utils.validation import clean_text, is_valid_telegram, parse_int
from .notifier import ApplicationNotifier
from .query import QueryService
from .submission_guard import SubmissionGuard

logger = logging.getLogger(__name__)

Scheduler = Callable[..., Any]


class SubmissionService:
    def __init__(
        self,
        pool: ConnectionPool,
        guard: SubmissionGuard,
        notifier: ApplicationNotifier,
        queries: Optional[QueryService] = None,
        age_check: bool = True,
        age_min: int = 14,
        age_max: int = 100,
    ) -> None:
        self.pool = pool
        self.guard = guard
        self.notifier = notifier
        self.queries = queries
        self.age_check = age_check
        self.age_min = age_min
        self.age_max = age_max
        self.accepted = 0
        self.rejected = 0
        self.rate_limited = 0
        self._tasks: set[asyncio.Task] = set()

    def validate(self, payload: dict) -> dict:
        """Проверяет заявку и возвращает очищенные поля для вставки."""
        if not isinstance(payload, dict):
            raise ValidationError("request body must be a JSON object")

        fields = {
            name: clean_text(payload.get(name), FIELD_LIMITS[name])
            for name in ("nickname", "telegram", "role") + OPTIONAL_FIELDS
        }
        raw_age = payload.get("age")
        if isinstance(raw_age, str):
            raw_age = raw_age.strip() or None

        missing = [
            name for name in ("nickname", "age", "telegram", "role")
            if (raw_age if name == "age" else fields[name]) is None
        ]
        if missing:
            raise ValidationError(f"missing required field: {', '.join(missing)}")

        age = parse_int(raw_age)
        if age is None:
            raise ValidationError("invalid age")

        # regex проверяет исходное значение, а не обрезанное
        if not is_valid_telegram(str(payload["telegram"]).strip()):
            raise ValidationError("invalid handle")

        if self.age_check and not (self.age_min <= age <= self.age_max):
            raise ValidationError("age out of range")

        fields["age"] = age
        return fields

    async def submit(self, payload: dict, schedule: Optional[Scheduler] = None) -> Application:
        try:
            fields = self.validate(payload)
        except ValidationError as e:
            self.rejected += 1
            logger.info("Заявка отклонена: %s", e.message)
            raise

        key = (fields["telegram"].lower(), fields["role"])
        try:
            self.guard.acquire(key)
        except RateLimitedError:
            self.rate_limited += 1
            logger.info("Повторная заявка от @%s на роль %s отклонена", fields["telegram"], fields["role"])
            raise

        try:
            application = await create_application(self.pool, fields)
        except StorageError:
            # заявка не сохранена: повтор должен пройти
            self.guard.release(key)
            logger.error("❌ Ошибка сохранения заявки от @%s", fields["telegram"])
            raise

        self.accepted += 1
        if self.queries is not None:
            self.queries.invalidate()
        logger.info("✅ Заявка сохранена. ID: %s", application.id)

        if schedule is not None:
            schedule(self.notifier.notify, application)
        else:
            task = asyncio.create_task(self.notifier.notify(application))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

        return application

    async def drain(self) -> None:
        """Дожидается фоновых уведомлений (для остановки и тестов)."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
