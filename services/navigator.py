"""Постраничный просмотр заявок в боте.

Позиция администратора — курсор (role, offset) в CursorStore. Каждое
действие вычисляет новую позицию, рендерит её и, если хранилище ответило,
сохраняет курсор. Navigator не знает про aiogram: он возвращает
NavigatorView с текстом и кнопками, а utils/keyboards.py строит разметку.

Кнопки несут позицию, для которой они нарисованы (nav:<action>:<role>:<offset>),
поэтому нажатие работает и после перезапуска процесса.
"""
import logging
from dataclasses import dataclass, field
from datetime import tzinfo
from typing import Hashable, Optional

from core.errors import NotFoundRecord, StorageError
from .formatting import (
    ERROR_TEXT,
    MENU_ROLES,
    MENU_TEXT,
    format_application,
    format_empty,
    role_label,
)
from .query import QueryService

logger = logging.getLogger(__name__)

TOKEN_PREFIX = "nav"

ROLE = "role"
PREV = "prev"
NEXT = "next"
LATEST = "latest"
SHOW = "show"
MENU = "menu"

ACTIONS = (ROLE, PREV, NEXT, LATEST, SHOW, MENU)


@dataclass
class Cursor:
    role: str
    offset: int
    total: int = 0


class CursorStore:
    """Курсоры по chat id. Живут только в памяти процесса."""

    def __init__(self) -> None:
        self._cursors: dict[Hashable, Cursor] = {}

    def __len__(self) -> int:
        return len(self._cursors)

    def get(self, chat_id: Hashable) -> Optional[Cursor]:
        return self._cursors.get(chat_id)

    def set(self, chat_id: Hashable, cursor: Cursor) -> None:
        self._cursors[chat_id] = cursor

    def clear(self, chat_id: Hashable) -> None:
        self._cursors.pop(chat_id, None)


@dataclass(frozen=True)
class Control:
    kind: str
    label: str
    action: str
    role: Optional[str] = None
    offset: Optional[int] = None

    @property
    def token(self) -> str:
        return encode_token(self.action, self.role, self.offset)


@dataclass
class NavigatorView:
    kind: str
    text: str
    controls: list[list[Control]] = field(default_factory=list)
    role: Optional[str] = None
    offset: int = 0
    total: int = 0

    def find(self, kind: str) -> Optional[Control]:
        for row in self.controls:
            for control in row:
                if control.kind == kind:
                    return control
        return None

    def has(self, kind: str) -> bool:
        return self.find(kind) is not None


def encode_token(action: str, role: Optional[str] = None, offset: Optional[int] = None) -> str:
    parts = [TOKEN_PREFIX, action]
    if role is not None:
        parts.append(role)
        if offset is not None:
            parts.append(str(offset))
    return ":".join(parts)


def parse_token(data: str) -> tuple[str, Optional[str], Optional[int]]:
    parts = (data or "").split(":")
    if len(parts) < 2 or parts[0] != TOKEN_PREFIX or parts[1] not in ACTIONS:
        raise ValueError(f"unknown navigation token: {data!r}")
    action = parts[1]
    role = parts[2] if len(parts) > 2 and parts[2] else None
    offset = None
    if len(parts) > 3:
        offset = int(parts[3])
        if offset < 0:
            raise ValueError(f"negative offset in token: {data!r}")
    return action, role, offset


MENU_CONTROL = Control("menu", "📋 В меню", MENU)


def menu_view() -> NavigatorView:
    buttons = [Control("role", role_label(r), ROLE, r) for r in MENU_ROLES]
    rows = [buttons[i:i + 2] for i in range(0, len(buttons), 2)]
    return NavigatorView("menu", MENU_TEXT, rows)


class Navigator:
    def __init__(
        self,
        queries: QueryService,
        cursors: Optional[CursorStore] = None,
        tz: Optional[tzinfo] = None,
    ) -> None:
        self.queries = queries
        self.cursors = cursors if cursors is not None else CursorStore()
        self.tz = tz

    # --------------------
    # Переходы
    # --------------------
    def _position(self, chat_id: Hashable, role: Optional[str], offset: Optional[int]) -> tuple[str, int]:
        cursor = self.cursors.get(chat_id)
        if role is None:
            role = cursor.role if cursor else "all"
        if offset is None:
            offset = cursor.offset if cursor and cursor.role == role else 0
        return role, offset

    async def select_role(self, chat_id: Hashable, role: str) -> NavigatorView:
        return await self._go(chat_id, role, 0)

    async def prev(self, chat_id: Hashable, role: Optional[str] = None, offset: Optional[int] = None) -> NavigatorView:
        role, offset = self._position(chat_id, role, offset)
        return await self._go(chat_id, role, max(0, offset - 1))

    async def next(self, chat_id: Hashable, role: Optional[str] = None, offset: Optional[int] = None) -> NavigatorView:
        role, offset = self._position(chat_id, role, offset)
        return await self._go(chat_id, role, offset + 1)

    async def latest(self, chat_id: Hashable, role: Optional[str] = None) -> NavigatorView:
        role, _ = self._position(chat_id, role, 0)
        return await self._go(chat_id, role, 0)

    async def show(self, chat_id: Hashable, role: Optional[str] = None, offset: Optional[int] = None) -> NavigatorView:
        role, offset = self._position(chat_id, role, offset)
        return await self._go(chat_id, role, max(0, offset))

    def menu(self, chat_id: Hashable) -> NavigatorView:
        self.cursors.clear(chat_id)
        return menu_view()

    async def handle(
        self,
        chat_id: Hashable,
        action: str,
        role: Optional[str] = None,
        offset: Optional[int] = None,
    ) -> NavigatorView:
        if action == MENU:
            return self.menu(chat_id)
        if action == ROLE:
            return await self.select_role(chat_id, role or "all")
        if action == PREV:
            return await self.prev(chat_id, role, offset)
        if action == NEXT:
            return await self.next(chat_id, role, offset)
        if action == LATEST:
            return await self.latest(chat_id, role)
        if action == SHOW:
            return await self.show(chat_id, role, offset)
        raise ValueError(f"unknown navigation action: {action!r}")

    async def _go(self, chat_id: Hashable, role: str, offset: int) -> NavigatorView:
        view = await self.render(role, offset)
        # при ошибке курсор не трогаем: retry повторит ту же позицию
        if view.kind != "error":
            self.cursors.set(chat_id, Cursor(role, offset, view.total))
        return view

    # --------------------
    # Рендер
    # --------------------
    async def render(self, role: str, offset: int) -> NavigatorView:
        try:
            total = await self.queries.count(role)
            if offset >= total:
                return self._empty(role, offset, total)
            application = await self.queries.record_at(role, offset)
        except NotFoundRecord:
            # запись исчезла между count и выборкой
            return self._empty(role, offset, total)
        except StorageError:
            logger.warning("Не удалось загрузить заявки (role=%s, offset=%s)", role, offset, exc_info=True)
            return self._error(role, offset)

        controls = []
        if offset > 0:
            controls.append(Control("prev", "⬅️ Назад", PREV, role, offset))
        controls.append(Control("latest", "🔄 Последняя", LATEST, role, offset))
        if offset < total - 1:
            controls.append(Control("next", "➡️ Вперед", NEXT, role, offset))

        return NavigatorView(
            "record",
            format_application(application, offset, total, self.tz),
            [controls, [MENU_CONTROL]],
            role,
            offset,
            total,
        )

    def _empty(self, role: str, offset: int, total: int) -> NavigatorView:
        row = []
        if offset > 0:
            row.append(Control("back", "⬅️ Назад", PREV, role, offset))
        row.append(MENU_CONTROL)
        return NavigatorView("empty", format_empty(role), [row], role, offset, total)

    def _error(self, role: str, offset: int) -> NavigatorView:
        row = [
            Control("retry", "🔁 Повторить", SHOW, role, offset),
            MENU_CONTROL,
        ]
        return NavigatorView("error", ERROR_TEXT, [row], role, offset, 0)
