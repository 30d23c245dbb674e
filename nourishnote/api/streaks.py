from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from nourishnote.core.auth import get_current_user_id
from nourishnote.core.clock import as_utc
from nourishnote.features.streaks import service as streak_service

router = APIRouter()


@router.get("/v1/streaks/current")
def get_current_streak(
    user_id: str = Depends(get_current_user_id),
    now: Optional[datetime] = Query(None, description="Evaluation instant (defaults to server time)"),
    timezone: Optional[str] = Query(None, description="IANA zone overriding the saved preference"),
):
    """Return streak and quota figures for the caller."""
    moment = as_utc(now)
    tz_name = streak_service.effective_timezone(user_id, timezone)
    snapshot = streak_service.get_streak_snapshot(user_id, now=moment, timezone=tz_name)
    return {
        **snapshot.to_dict(),
        "timezone": tz_name,
        "computed_at": moment.isoformat(),
    }
