from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Timezone-aware UTC now. The only place request handlers read the clock."""
    return datetime.now(timezone.utc)


def as_utc(moment: Optional[datetime]) -> datetime:
    """Normalize to aware UTC; naive values (SQLite round-trips, clients) are read as UTC."""
    if moment is None:
        return utc_now()
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)
