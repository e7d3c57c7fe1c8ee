import logging
from datetime import tzinfo
from typing import Optional, Union

from aiogram import Bot

from database.models import Application
from .formatting import format_notification

logger = logging.getLogger(__name__)


class ApplicationNotifier:
    """Одна попытка доставки в админский чат; ошибки только логируются."""

    def __init__(
        self,
        bot: Optional[Bot],
        chat_id: Optional[Union[int, str]],
        tz: Optional[tzinfo] = None,
    ) -> None:
        self.bot = bot
        self.chat_id = chat_id
        self.tz = tz
        self.sent = 0
        self.failed = 0

    @property
    def enabled(self) -> bool:
        return self.bot is not None and bool(self.chat_id)

    async def notify(self, application: Application) -> bool:
        if not self.enabled:
            logger.debug("Уведомления не настроены, заявка %s без уведомления", application.id)
            return False

        try:
            await self.bot.send_message(
                self.chat_id,
                format_notification(application, self.tz),
                parse_mode="HTML",
            )
        except Exception:
            self.failed += 1
            logger.exception("⚠️ Уведомление в Telegram не отправлено (заявка %s)", application.id)
            return False

        self.sent += 1
        logger.info("✅ Уведомление о заявке %s отправлено в Telegram", application.id)
        return True
