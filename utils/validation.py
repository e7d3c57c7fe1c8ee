import re
from typing import Any, Optional

TELEGRAM_HANDLE_RE = re.compile(r"^[A-Za-z0-9_]{5,32}$")


def is_valid_telegram(handle: str) -> bool:
    return bool(TELEGRAM_HANDLE_RE.match(handle))


def clean_text(value: Any, max_length: Optional[int] = None) -> Optional[str]:
    """Обрезает пробелы и длину; пустая строка считается отсутствующим значением."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    if max_length is not None:
        text = text[:max_length]
    return text


def parse_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str) and re.fullmatch(r"\s*[+-]?\d+\s*", value):
        return int(value)
    return None
