from datetime import datetime, timezone, tzinfo
from html import escape
from typing import Optional

from database.models import Application, ROLES

ROLE_LABELS = {
    "media": "🎥 Медиа Проекта",
    "dev": "💻 Разработчик",
    "support": "📞 Поддержка игроков",
    "qa": "🔎 Тестировщик",
    "builder": "🏗️ Билдер",
    "moderator": "🛡️ Модератор",
}

ALL_ROLES_LABEL = "📋 Все роли"

MENU_ROLES = ("all",) + ROLES


def role_label(role: Optional[str]) -> str:
    if not role or role == "all":
        return ALL_ROLES_LABEL
    return ROLE_LABELS.get(role, role)


def format_timestamp(value: datetime, tz: Optional[tzinfo] = None) -> str:
    """Формат как у toLocaleString('ru-RU'): 18.10.2026, 14:03:00"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(tz or timezone.utc).strftime("%d.%m.%Y, %H:%M:%S")


def _text(value: Optional[str], default: str = "Не указано") -> str:
    return escape(value) if value else default


def format_application(
    app: Application,
    offset: int,
    total: int,
    tz: Optional[tzinfo] = None,
) -> str:
    lines = [
        f"📋 <b>Заявка — {escape(role_label(app.role))}</b>",
        "────────────────",
        f"👤 <b>Никнейм:</b> {escape(app.nickname)}",
        f"🎂 <b>Возраст:</b> {app.age}",
        f"📍 <b>Часовой пояс:</b> {_text(app.timezone, 'Не указан')}",
        f"📱 <b>Telegram:</b> @{escape(app.telegram)}",
    ]
    if app.discord:
        lines.append(f"🎮 <b>Discord:</b> {escape(app.discord)}")
    lines += [
        f"💼 <b>Роль:</b> {escape(role_label(app.role))}",
        "",
        f"🧠 <b>Опыт:</b>\n{_text(app.experience)}",
        f"⛏ <b>Опыт в Minecraft:</b>\n{_text(app.minecraft_exp)}",
        f"🔥 <b>Мотивация:</b>\n{_text(app.motivation)}",
    ]
    if app.portfolio:
        lines.append(f"🔗 <b>Портфолио:</b> {escape(app.portfolio)}")
    lines += [
        f"⏰ <b>Готов уделять:</b> {_text(app.time_available)}",
        "────────────────",
        f"🕒 <b>Дата:</b> {format_timestamp(app.created_at, tz)}",
        f"🆔 ID: {app.id}",
    ]
    if total > 1:
        lines.append(f"📄 {offset + 1} из {total}")
    return "\n".join(lines)


def format_notification(app: Application, tz: Optional[tzinfo] = None) -> str:
    return (
        "🎉 <b>НОВАЯ ЗАЯВКА!</b>\n"
        "────────────────\n"
        f"👤 <b>Никнейм:</b> {escape(app.nickname)}\n"
        f"🎂 <b>Возраст:</b> {app.age}\n"
        f"💼 <b>Роль:</b> {escape(role_label(app.role))}\n"
        f"📱 <b>Telegram:</b> @{escape(app.telegram)}\n"
        f"📍 <b>Часовой пояс:</b> {_text(app.timezone, 'Не указан')}\n"
        f"🕒 <b>Время:</b> {format_timestamp(app.created_at, tz)}\n"
        "────────────────\n"
        f"🆔 ID: {app.id}"
    )


def format_empty(role: str) -> str:
    return f"📭 Нет заявок по роли «{escape(role_label(role))}»"


def format_stats(total: int, by_role: dict[str, int], now: datetime, tz: Optional[tzinfo] = None) -> str:
    lines = [
        "📊 <b>Статистика заявок</b>",
        "",
        f"✅ Всего заявок: <b>{total}</b>",
    ]
    for role, count in by_role.items():
        lines.append(f"• {escape(role_label(role))}: {count}")
    lines += ["", f"🕒 Актуально на: {format_timestamp(now, tz)}"]
    return "\n".join(lines)


MENU_TEXT = "🛠 <b>Заявки</b>\n\nВыберите роль для просмотра:"
ERROR_TEXT = "❌ Ошибка загрузки заявок. Попробуйте ещё раз."
DENIED_TEXT = "🚫 Доступ запрещён."
