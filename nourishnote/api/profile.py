"""
Profile API

GET  /v1/profile/timezone   saved timezone (UTC when unset)
PUT  /v1/profile/timezone   set timezone, validated against the IANA database
GET  /v1/profile/timezones  selectable zone ids, UTC first
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from nourishnote.core.auth import get_current_user_id
from nourishnote.features.profiles import service as profile_service

router = APIRouter(prefix="/v1/profile", tags=["profile"])


class TimezoneUpdate(BaseModel):
    timezone: str = Field(..., min_length=1, max_length=64)


@router.get("/timezone")
def get_timezone(user_id: str = Depends(get_current_user_id)):
    return profile_service.get_profile(user_id).to_dict()


@router.put("/timezone")
def put_timezone(body: TimezoneUpdate, user_id: str = Depends(get_current_user_id)):
    return profile_service.set_timezone(user_id, body.timezone).to_dict()


@router.get("/timezones")
def list_timezones():
    return {"timezones": profile_service.list_timezones()}
