"""Time utilities (plan timezone, KST by default)."""

from datetime import date, datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

from app.config import settings


def utc_now() -> datetime:
    """Timezone-aware current UTC instant. Used as the default injected clock."""
    return datetime.now(timezone.utc)


def to_zone(dt: datetime, tz_name: str, naive_assumed_tz: tzinfo = timezone.utc) -> datetime:
    """Project an instant into the named timezone."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=naive_assumed_tz)
    return dt.astimezone(ZoneInfo(tz_name))


def today_in_timezone(now: datetime, tz_name: str) -> date:
    """
    Calendar date observed in ``tz_name`` at instant ``now``.

    Naive datetimes are interpreted as UTC.
    """
    return to_zone(now, tz_name).date()


def current_year_month(now: datetime, tz_name: str = settings.TIMEZONE) -> str:
    local = today_in_timezone(now, tz_name)
    return f"{local.year:04d}-{local.month:02d}"


def ensure_aware(dt: Optional[datetime]) -> Optional[datetime]:
    """SQLite drops tzinfo on read; stored values are UTC."""
    if dt is None or dt.tzinfo is not None:
        return dt
    return dt.replace(tzinfo=timezone.utc)
