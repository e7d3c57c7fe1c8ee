from dataclasses import asdict, dataclass, fields
from datetime import datetime, timezone
from typing import Any, Optional

ROLES = ("media", "dev", "support", "qa", "builder", "moderator")

# Максимальная ширина колонок: длинные значения обрезаются, а не отклоняются
FIELD_LIMITS = {
    "nickname": 100,
    "timezone": 50,
    "telegram": 100,
    "discord": 100,
    "role": 50,
    "experience": 2000,
    "minecraft_exp": 2000,
    "motivation": 2000,
    "portfolio": 2000,
    "time_available": 100,
    "status": 20,
}

REQUIRED_FIELDS = ("nickname", "age", "telegram", "role")
OPTIONAL_FIELDS = (
    "timezone",
    "discord",
    "experience",
    "minecraft_exp",
    "motivation",
    "portfolio",
    "time_available",
)


def parse_timestamp(value: Any) -> datetime:
    """SQLite хранит created_at как текст в UTC."""
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass
class Application:
    id: int
    nickname: str
    age: int
    telegram: str
    role: str
    created_at: datetime
    timezone: Optional[str] = None
    discord: Optional[str] = None
    experience: Optional[str] = None
    minecraft_exp: Optional[str] = None
    motivation: Optional[str] = None
    portfolio: Optional[str] = None
    time_available: Optional[str] = None
    status: str = "new"

    @classmethod
    def from_row(cls, row) -> "Application":
        data = dict(row)
        names = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in names}
        values["created_at"] = parse_timestamp(values["created_at"])
        return cls(**values)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat()
        return data
