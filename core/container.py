import time
from dataclasses import dataclass, field
from datetime import tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

from aiogram import Bot

from db.base import ConnectionPool
from services.access import AccessGate
from services.navigator import CursorStore, Navigator
from services.notifier import ApplicationNotifier
from services.query import QueryService
from services.query_cache import QueryCache
from services.submission import SubmissionService
from services.submission_guard import SubmissionGuard


@dataclass
class AppServices:
    pool: ConnectionPool
    queries: QueryService
    submissions: SubmissionService
    notifier: ApplicationNotifier
    gate: AccessGate
    navigator: Navigator
    guard: SubmissionGuard
    cache: QueryCache
    bot: Optional[Bot] = None
    public_url: str = ""
    started_at: float = field(default_factory=time.monotonic)


def build_services(
    pool: ConnectionPool,
    bot: Optional[Bot] = None,
    *,
    admin_ids=(),
    admin_chat_id=None,
    cache_ttl: float = 60.0,
    cooldown: float = 300.0,
    age_check: bool = True,
    age_min: int = 14,
    age_max: int = 100,
    tz: Optional[tzinfo] = None,
    public_url: str = "",
) -> AppServices:
    cache = QueryCache(ttl=cache_ttl)
    queries = QueryService(pool, cache)
    guard = SubmissionGuard(cooldown=cooldown)
    notifier = ApplicationNotifier(bot, admin_chat_id, tz)
    submissions = SubmissionService(
        pool,
        guard,
        notifier,
        queries,
        age_check=age_check,
        age_min=age_min,
        age_max=age_max,
    )
    return AppServices(
        pool=pool,
        queries=queries,
        submissions=submissions,
        notifier=notifier,
        gate=AccessGate(admin_ids),
        navigator=Navigator(queries, CursorStore(), tz),
        guard=guard,
        cache=cache,
        bot=bot,
        public_url=public_url,
    )


def build_from_settings(pool: ConnectionPool, bot: Optional[Bot] = None) -> AppServices:
    from config import settings

    return build_services(
        pool,
        bot,
        admin_ids=settings.ADMIN_IDS,
        admin_chat_id=settings.ADMIN_CHAT_ID,
        cache_ttl=settings.QUERY_CACHE_TTL,
        cooldown=settings.SUBMIT_COOLDOWN,
        age_check=settings.AGE_CHECK_ENABLED,
        age_min=settings.AGE_MIN,
        age_max=settings.AGE_MAX,
        tz=ZoneInfo(settings.DISPLAY_TIMEZONE),
        public_url=settings.PUBLIC_URL,
    )
