"""Streak and quota engine.

Pure functions over (entry timestamps, timezone, now). Streaks are measured in
local calendar days of the user's timezone; the entry quota uses a rolling
24-hour window in absolute time.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Iterable, List, Optional, Set, Union

import pytz

from nourishnote.models.streak import DAILY_ENTRY_LIMIT, QUOTA_WINDOW_HOURS, StreakSnapshot

DEFAULT_TIMEZONE = "UTC"

TimezoneLike = Union[str, tzinfo]


def resolve_timezone(name: Optional[str]) -> tzinfo:
    """Return the tz for an IANA name, falling back to UTC when empty or unknown."""
    if not name:
        return pytz.utc
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        return pytz.utc


def _as_tz(tz: TimezoneLike) -> tzinfo:
    return pytz.timezone(tz) if isinstance(tz, str) else tz


def _as_aware(instant: datetime) -> datetime:
    return instant if instant.tzinfo else instant.replace(tzinfo=timezone.utc)


def local_date(instant: datetime, tz: TimezoneLike) -> date:
    return _as_aware(instant).astimezone(_as_tz(tz)).date()


def day_key(instant: datetime, tz: TimezoneLike) -> str:
    """Calendar date of ``instant`` in ``tz`` as YYYY-MM-DD."""
    return local_date(instant, tz).isoformat()


def _utc_midnight(key: str) -> datetime:
    return datetime.combine(date.fromisoformat(key), datetime.min.time(), tzinfo=timezone.utc)


def _day_gap(later: str, earlier: str) -> int:
    return round((_utc_midnight(later) - _utc_midnight(earlier)) / timedelta(days=1))


def current_streak(days: Set[str], today: date) -> int:
    cursor = today if today.isoformat() in days else today - timedelta(days=1)
    streak = 0
    while cursor.isoformat() in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def longest_streak(days: Set[str]) -> int:
    ordered = sorted(days, reverse=True)
    longest = 0
    run = 0
    for i, key in enumerate(ordered):
        if i == 0:
            run = 1
        elif _day_gap(ordered[i - 1], key) == 1:
            run += 1
        else:
            longest = max(longest, run)
            run = 1
    return max(longest, run)


def quota(timestamps: List[datetime], now: datetime) -> tuple[int, int]:
    """Return (entries_remaining, cooldown_hours) for the trailing 24h window."""
    window = timedelta(hours=QUOTA_WINDOW_HOURS)
    in_window = [ts for ts in timestamps if ts > now - window]
    remaining = max(0, DAILY_ENTRY_LIMIT - len(in_window))
    if remaining > 0:
        return remaining, 0
    oldest = min(in_window)
    hours_left = (window - (now - oldest)) / timedelta(hours=1)
    return remaining, max(0, math.ceil(hours_left))


def compute_snapshot(
    entry_timestamps: Iterable[datetime],
    tz: TimezoneLike,
    now: datetime,
) -> StreakSnapshot:
    """Compute streak and quota figures for one user.

    Naive datetimes are read as UTC. The timezone must already be valid; callers
    default missing preferences to UTC via ``resolve_timezone``.
    """
    zone = _as_tz(tz)
    now = _as_aware(now)
    timestamps = [_as_aware(ts) for ts in entry_timestamps]

    days = {day_key(ts, zone) for ts in timestamps}
    remaining, cooldown = quota(timestamps, now)

    return StreakSnapshot(
        total_entries=len(timestamps),
        current_streak=current_streak(days, local_date(now, zone)),
        longest_streak=longest_streak(days),
        entries_remaining=remaining,
        cooldown_hours=cooldown,
    )
