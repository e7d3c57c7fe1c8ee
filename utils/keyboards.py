from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

from services.navigator import NavigatorView, menu_view


def view_keyboard(view: NavigatorView) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text=c.label, callback_data=c.token) for c in row]
        for row in view.controls
        if row
    ])


def get_roles_menu_kb() -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    for row in menu_view().controls:
        for control in row:
            builder.button(text=control.label, callback_data=control.token)
    builder.adjust(2)
    return builder.as_markup()
