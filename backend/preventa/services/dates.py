"""Day-boundary helpers.

Timestamps are stored as naive UTC; "today" is the calendar day in the
configured local timezone.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from preventa.config import get_settings


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def to_storage(dt: Optional[datetime]) -> Optional[datetime]:
    """Convert any datetime to the naive-UTC form the database stores."""
    if dt is None:
        return None
    return ensure_aware(dt).astimezone(timezone.utc).replace(tzinfo=None)


def local_date(dt: datetime, tz: Optional[ZoneInfo] = None) -> date:
    tz = tz or get_settings().tz
    return ensure_aware(dt).astimezone(tz).date()


def local_midnight(day: date, tz: ZoneInfo) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)


def local_day_bounds(now: datetime, tz: Optional[ZoneInfo] = None) -> tuple[datetime, datetime]:
    """Return (start, end) of the local day containing ``now`` in storage form."""
    tz = tz or get_settings().tz
    day = local_date(now, tz)
    start = local_midnight(day, tz)
    end = local_midnight(day + timedelta(days=1), tz)
    return to_storage(start), to_storage(end)
