from aiogram import Bot, Dispatcher
from aiogram.types import BotCommand
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from database.models import ROLES
from handlers import register_all_handlers
from jobs.cleanup_job import purge_expired_state
from services.formatting import ROLE_LABELS
from .container import AppServices


async def set_bot_commands(bot: Bot):
    commands = [
        BotCommand(command="start", description="Начать работу"),
        BotCommand(command="menu", description="Выбрать роль"),
        BotCommand(command="latest", description="Последняя заявка"),
        BotCommand(command="count", description="Количество заявок"),
        BotCommand(command="help", description="Помощь"),
    ]
    commands += [
        BotCommand(command=role, description=f"Заявки: {ROLE_LABELS[role]}")
        for role in ROLES
    ]
    await bot.set_my_commands(commands)


def setup_scheduler(services: AppServices) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(
        purge_expired_state,
        "interval",
        minutes=1,
        kwargs={"services": services}
    )
    return scheduler


def setup_bot(dp: Dispatcher, services: AppServices) -> None:
    # сервисы попадают в хендлеры по имени параметра
    dp["services"] = services
    register_all_handlers(dp)
