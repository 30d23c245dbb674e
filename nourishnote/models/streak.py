from __future__ import annotations

from dataclasses import asdict, dataclass

DAILY_ENTRY_LIMIT = 2
QUOTA_WINDOW_HOURS = 24


@dataclass(frozen=True)
class StreakSnapshot:
    """
    Streak and quota view of a user's journal. Recomputed on every read, never stored.
    """

    total_entries: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    entries_remaining: int = DAILY_ENTRY_LIMIT
    cooldown_hours: int = 0

    def to_dict(self) -> dict:
        return asdict(self)
