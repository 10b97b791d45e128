"""Calendar window boundaries in the service's canonical time zone.

Day, week (ISO, Monday start) and month windows are truncated to calendar
boundaries rather than rolling, so leaderboards and daily caps reset at a
predictable instant for every user.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from pfg.config import get_settings


def canonical_zone() -> ZoneInfo:
    return ZoneInfo(get_settings().reward_timezone)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def local_day(now: datetime | None = None) -> date:
    """The calendar day `now` falls in, in the canonical zone."""
    if now is None:
        now = utc_now()
    return now.astimezone(canonical_zone()).date()


def _midnight(d: date) -> datetime:
    return datetime.combine(d, time.min, tzinfo=canonical_zone())


def day_start(now: datetime | None = None) -> datetime:
    """Midnight of the current day."""
    return _midnight(local_day(now))


def next_day_start(now: datetime | None = None) -> datetime:
    """When the current daily cap resets."""
    return _midnight(local_day(now) + timedelta(days=1))


def week_start(now: datetime | None = None) -> datetime:
    """Monday 00:00 of the current ISO week."""
    d = local_day(now)
    return _midnight(d - timedelta(days=d.weekday()))


def month_start(now: datetime | None = None) -> datetime:
    """00:00 on the first of the current month."""
    return _midnight(local_day(now).replace(day=1))
