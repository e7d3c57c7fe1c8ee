from aiogram import Dispatcher

from .start_handler import router as start_router
from .admin_applications_handler import router as admin_applications_router


def register_all_handlers(dp: Dispatcher):
    # -------------------- COMMANDS --------------------
    dp.include_router(start_router)

    # -------------------- ROLE COMMANDS + NAVIGATION --------------------
    dp.include_router(admin_applications_router)
