"""Date helpers: UTC storage time and the local calendar day."""
from datetime import datetime, timezone
from typing import Tuple
from zoneinfo import ZoneInfo


def utcnow() -> datetime:
    """Naive UTC now, the form MongoDB hands datetimes back in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and return an aware datetime."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_storage(value: datetime) -> datetime:
    """Convert any datetime to naive UTC."""
    return as_utc(value).replace(tzinfo=None)


def local_day_bounds(now: datetime, tz: ZoneInfo) -> Tuple[datetime, datetime]:
    """
    Closed window [00:00:00.000, 23:59:59.999] of the local day containing `now`.

    Returned as naive UTC datetimes so they can go straight into a query.
    Millisecond resolution matches what BSON stores.
    """
    local_now = as_utc(now).astimezone(tz)
    start = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
    end = start.replace(hour=23, minute=59, second=59, microsecond=999000)
    return to_storage(start), to_storage(end)


def format_local(value: datetime, tz: ZoneInfo) -> str:
    """Render a stored datetime in the user's timezone, e.g. 05 Mar 2025, 09:15 PM."""
    return as_utc(value).astimezone(tz).strftime("%d %b %Y, %I:%M %p")
