from dotenv import load_dotenv
import os

load_dotenv()


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"Ошибка в {name}: {e}. Ожидается целое число.")


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"Ошибка в {name}: {e}. Ожидается число.")


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


DATABASE_URL = os.getenv("DATABASE_URL", "").strip()
if not DATABASE_URL:
    raise ValueError(
        "DATABASE_URL обязателен в .env (например sqlite:///data/applications.db)"
    )

BOT_TOKEN = os.getenv("BOT_TOKEN") or os.getenv("TELEGRAM_BOT_TOKEN")

# Allow-list хранится строками: сравнение идёт по точному совпадению
ADMIN_IDS = frozenset(
    x.strip() for x in os.getenv("ADMIN_IDS", "").split(",") if x.strip()
)

ADMIN_CHAT_ID = (
    os.getenv("ADMIN_CHAT_ID") or os.getenv("TELEGRAM_ADMIN_CHAT_ID") or ""
).strip() or None

PORT = _get_int("PORT", 3000)
PUBLIC_URL = os.getenv("PUBLIC_URL") or f"http://localhost:{PORT}"

DB_POOL_SIZE = _get_int("DB_POOL_SIZE", 5)
DB_TIMEOUT = _get_float("DB_TIMEOUT", 5.0)

QUERY_CACHE_TTL = _get_float("QUERY_CACHE_TTL", 60.0)
SUBMIT_COOLDOWN = _get_float("SUBMIT_COOLDOWN", 300.0)

AGE_CHECK_ENABLED = _get_bool("AGE_CHECK_ENABLED", True)
AGE_MIN = _get_int("AGE_MIN", 14)
AGE_MAX = _get_int("AGE_MAX", 100)

DISPLAY_TIMEZONE = os.getenv("DISPLAY_TIMEZONE", "Europe/Moscow")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
