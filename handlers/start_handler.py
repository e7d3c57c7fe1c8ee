import logging
from datetime import datetime, timezone

from aiogram import Router, types
from aiogram.filters import Command

from core.container import AppServices
from core.errors import StorageError
from services.formatting import DENIED_TEXT, format_stats
from utils.keyboards import get_roles_menu_kb, view_keyboard
from .admin_applications_handler import is_admin

logger = logging.getLogger(__name__)
router = Router()

HELP_TEXT = (
    "📋 <b>Доступные команды:</b>\n"
    "/menu — выбрать роль и листать заявки\n"
    "/latest — последняя заявка\n"
    "/count — количество заявок\n"
    "/media /dev /support /qa /builder /moderator — заявки по роли\n"
    "/help — эта справка"
)


@router.message(Command("start"))
async def cmd_start(message: types.Message, services: AppServices):
    if not is_admin(message.from_user, services):
        await message.answer(DENIED_TEXT)
        return

    name = message.from_user.first_name or "друг"
    await message.answer(
        f"👋 Привет, {name}!\n\n"
        "Я бот для просмотра заявок.\n\n"
        f"{HELP_TEXT}",
        reply_markup=get_roles_menu_kb(),
        parse_mode="HTML"
    )


@router.message(Command("help"))
async def cmd_help(message: types.Message, services: AppServices):
    if not is_admin(message.from_user, services):
        await message.answer(DENIED_TEXT)
        return

    await message.answer(HELP_TEXT, parse_mode="HTML")


@router.message(Command("menu"))
async def cmd_menu(message: types.Message, services: AppServices):
    if not is_admin(message.from_user, services):
        await message.answer(DENIED_TEXT)
        return

    view = services.navigator.menu(message.chat.id)
    await message.answer(
        view.text,
        reply_markup=view_keyboard(view),
        parse_mode="HTML"
    )


@router.message(Command("count"))
async def cmd_count(message: types.Message, services: AppServices):
    if not is_admin(message.from_user, services):
        await message.answer(DENIED_TEXT)
        return

    try:
        total = await services.queries.count()
        by_role = await services.queries.count_by_role()
    except StorageError:
        logger.warning("Ошибка подсчета заявок", exc_info=True)
        await message.answer("❌ Ошибка подсчета заявок.")
        return

    await message.answer(
        format_stats(total, by_role, datetime.now(timezone.utc), services.navigator.tz),
        parse_mode="HTML"
    )
