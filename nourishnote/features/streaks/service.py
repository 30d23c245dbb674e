from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from nourishnote.core.clock import as_utc
from nourishnote.features.entries import service as entry_service
from nourishnote.features.profiles import service as profile_service
from nourishnote.features.streaks.engine import DEFAULT_TIMEZONE, compute_snapshot, resolve_timezone
from nourishnote.models.streak import StreakSnapshot

logger = logging.getLogger("nourishnote")


def load_timestamps(user_id: str) -> List[datetime]:
    """Entry timestamps for a user; a failed fetch reads as no entries."""
    try:
        return entry_service.get_entry_timestamps(user_id)
    except Exception as e:
        logger.error(f"[streaks] failed to load entries for {user_id}: {e}")
        return []


def load_timezone(user_id: str) -> str:
    try:
        return profile_service.get_timezone(user_id)
    except Exception as e:
        logger.error(f"[streaks] failed to load timezone for {user_id}: {e}")
        return DEFAULT_TIMEZONE


def effective_timezone(user_id: str, override: Optional[str] = None) -> str:
    """Explicit override, else the stored preference, as a canonical zone name.

    Lookup is case-insensitive; unknown names become UTC.
    """
    name = override or load_timezone(user_id)
    return resolve_timezone(name).zone


def get_streak_snapshot(
    user_id: str,
    *,
    now: Optional[datetime] = None,
    timezone: Optional[str] = None,
) -> StreakSnapshot:
    tz_name = effective_timezone(user_id, timezone)
    return compute_snapshot(load_timestamps(user_id), tz_name, as_utc(now))
