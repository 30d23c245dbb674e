"""Per-user timezone preference."""

from __future__ import annotations

from typing import List

import pytz
from sqlalchemy import select, update, insert

from nourishnote.core.clock import as_utc, utc_now
from nourishnote.core.database import get_db_session, profiles
from nourishnote.core.errors import ValidationError
from nourishnote.features.streaks.engine import DEFAULT_TIMEZONE
from nourishnote.models.profile import Profile


def get_profile(user_id: str) -> Profile:
    with get_db_session() as session:
        row = session.execute(select(profiles).where(profiles.c.user_id == user_id)).first()
    if row is None:
        return Profile(user_id=user_id, timezone=DEFAULT_TIMEZONE)
    return Profile(user_id=row.user_id, timezone=row.timezone, updated_at=as_utc(row.updated_at))


def get_timezone(user_id: str) -> str:
    return get_profile(user_id).timezone


def set_timezone(user_id: str, tz_name: str) -> Profile:
    """Upsert the user's timezone.

    Raises:
        ValidationError: unknown IANA zone name
    """
    name = (tz_name or "").strip()
    if name not in pytz.all_timezones_set:
        raise ValidationError(f"Unknown timezone: {tz_name!r}")

    now = utc_now()
    with get_db_session() as session:
        result = session.execute(
            update(profiles)
            .where(profiles.c.user_id == user_id)
            .values(timezone=name, updated_at=now)
        )
        if result.rowcount == 0:
            session.execute(insert(profiles).values(user_id=user_id, timezone=name, updated_at=now))
    return Profile(user_id=user_id, timezone=name, updated_at=now)


def list_timezones() -> List[str]:
    zones = [tz for tz in pytz.common_timezones if tz != DEFAULT_TIMEZONE]
    return [DEFAULT_TIMEZONE] + zones
