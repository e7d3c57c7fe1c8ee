import logging

from core.container import AppServices

logger = logging.getLogger(__name__)


async def purge_expired_state(services: AppServices) -> tuple[int, int]:
    """Удаляет просроченные ключи защиты от дублей и записи кеша."""
    guard_removed = services.guard.sweep()
    cache_removed = services.cache.purge_expired()
    if guard_removed or cache_removed:
        logger.debug(
            "Очистка: ключей защиты от дублей %s, записей кеша %s",
            guard_removed,
            cache_removed,
        )
    return guard_removed, cache_removed
