import logging

from aiogram import F, Router, types
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import Command, CommandObject

from core.container import AppServices
from database.models import ROLES
from services.formatting import DENIED_TEXT
from services.navigator import TOKEN_PREFIX, NavigatorView, parse_token
from utils.keyboards import view_keyboard

logger = logging.getLogger(__name__)
router = Router()


# --------------------
# Админские проверки
# --------------------
def is_admin(user: types.User | None, services: AppServices) -> bool:
    if user is None:
        return False
    if not services.gate.is_authorized(user.id):
        logger.info("Отказ в доступе для %s", user.id)
        return False
    return True


async def send_view(message: types.Message, view: NavigatorView) -> None:
    await message.answer(
        view.text,
        reply_markup=view_keyboard(view),
        parse_mode="HTML",
    )


async def edit_view(callback: types.CallbackQuery, view: NavigatorView) -> None:
    if not isinstance(callback.message, types.Message):
        # исходное сообщение недоступно: отправляем новое
        await callback.bot.send_message(
            callback.from_user.id,
            view.text,
            reply_markup=view_keyboard(view),
            parse_mode="HTML",
        )
        return
    try:
        await callback.message.edit_text(
            view.text,
            reply_markup=view_keyboard(view),
            parse_mode="HTML",
        )
    except TelegramBadRequest as e:
        if "message is not modified" not in str(e):
            raise


# =========================
# Команды ролей: /dev, /qa, ...
# =========================
@router.message(Command(*ROLES))
async def cmd_role(message: types.Message, command: CommandObject, services: AppServices):
    if not is_admin(message.from_user, services):
        await message.answer(DENIED_TEXT)
        return

    view = await services.navigator.select_role(message.chat.id, command.command.lower())
    await send_view(message, view)


@router.message(Command("latest"))
async def cmd_latest(message: types.Message, services: AppServices):
    if not is_admin(message.from_user, services):
        await message.answer(DENIED_TEXT)
        return

    view = await services.navigator.select_role(message.chat.id, "all")
    await send_view(message, view)


# =========================
# Кнопки навигации
# =========================
@router.callback_query(F.data.startswith(TOKEN_PREFIX + ":"))
async def navigate(callback: types.CallbackQuery, services: AppServices):
    if not is_admin(callback.from_user, services):
        await callback.answer(DENIED_TEXT, show_alert=True)
        return

    try:
        action, role, offset = parse_token(callback.data)
    except ValueError:
        logger.warning("Неизвестная кнопка: %r", callback.data)
        await callback.answer("⚠️ Кнопка устарела, откройте /menu", show_alert=True)
        return

    await callback.answer()
    chat_id = callback.message.chat.id if callback.message else callback.from_user.id
    view = await services.navigator.handle(chat_id, action, role, offset)
    await edit_view(callback, view)
