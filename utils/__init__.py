from .keyboards import *
from .validation import *

__all__ = [
    # keyboards
    'view_keyboard', 'get_roles_menu_kb',

    # validation
    'TELEGRAM_HANDLE_RE', 'is_valid_telegram', 'clean_text', 'parse_int',
]
