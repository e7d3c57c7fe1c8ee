import sys
import os
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

import asyncio
import logging

import uvicorn
from aiogram import Bot, Dispatcher

from config import settings
from api.app import create_app
from core.bot_instance import set_bot_commands, setup_bot, setup_scheduler
from core.container import build_from_settings
from db.base import ConnectionPool, db_health_check
from db.init import initialize_database

logger = logging.getLogger(__name__)


async def main():
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    pool = ConnectionPool.from_url(
        settings.DATABASE_URL,
        size=settings.DB_POOL_SIZE,
        timeout=settings.DB_TIMEOUT,
    )
    await pool.open()
    await initialize_database(pool)
    await db_health_check(pool)

    bot = Bot(token=settings.BOT_TOKEN) if settings.BOT_TOKEN else None
    if bot is None:
        logger.info("ℹ️ Telegram бот не настроен. Добавьте BOT_TOKEN в .env")

    services = build_from_settings(pool, bot)
    app = create_app(services)

    scheduler = setup_scheduler(services)
    scheduler.start()

    polling = None
    if bot is not None:
        dp = Dispatcher()
        setup_bot(dp, services)
        await set_bot_commands(bot)
        await bot.delete_webhook(drop_pending_updates=True)
        # сигналы обрабатывает uvicorn, polling останавливаем сами
        polling = asyncio.create_task(dp.start_polling(bot, handle_signals=False))
        logger.info("🤖 Telegram бот запущен")

    server = uvicorn.Server(uvicorn.Config(
        app,
        host="0.0.0.0",
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    ))
    logger.info("🚀 Сервер заявок запускается на порту %s (%s)", settings.PORT, settings.PUBLIC_URL)

    try:
        await server.serve()
    finally:
        if polling is not None:
            polling.cancel()
            await asyncio.gather(polling, return_exceptions=True)
        scheduler.shutdown(wait=False)
        await services.submissions.drain()
        await pool.close()
        if bot is not None:
            await bot.session.close()
        logger.info("👋 Сервер остановлен")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
