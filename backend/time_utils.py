import os
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo


def _timezone() -> ZoneInfo:
    name = os.environ.get("APP_TIMEZONE", "UTC")
    return ZoneInfo(name)


def now_tz() -> datetime:
    return datetime.now(_timezone())


def ensure_timezone(dt: datetime) -> datetime:
    """Treat naive datetimes (SQLite, client input without offset) as APP_TIMEZONE."""
    tz = _timezone()
    if dt.tzinfo is None:
        return dt.replace(tzinfo=tz)
    return dt.astimezone(tz)


def format_local(dt: Optional[datetime], fmt: str = "%Y-%m-%d %H:%M") -> str:
    if dt is None:
        return ""
    return ensure_timezone(dt).strftime(fmt)
