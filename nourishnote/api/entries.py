from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from nourishnote.core.auth import get_current_user_id
from nourishnote.features.ai.extraction import extract_attributes
from nourishnote.features.entries import service as entry_service

router = APIRouter(prefix="/v1/entries", tags=["entries"])


class CreateEntryRequest(BaseModel):
    raw_journal_text: str = Field(..., min_length=1)


def get_extractor():
    """Attribute extractor used on every write; overridden in tests."""
    return extract_attributes


@router.post("", status_code=201)
def create_entry(
    body: CreateEntryRequest,
    user_id: str = Depends(get_current_user_id),
    extractor=Depends(get_extractor),
):
    entry = entry_service.create_entry(user_id, body.raw_journal_text, extractor=extractor)
    return {"data": entry.to_dict()}


@router.get("")
def list_entries(user_id: str = Depends(get_current_user_id)):
    """Entries for the caller, newest first."""
    return {"data": [entry.to_dict() for entry in entry_service.list_entries(user_id)]}


@router.delete("/{entry_id}")
def delete_entry(entry_id: str, user_id: str = Depends(get_current_user_id)):
    entry_service.delete_entry(user_id, entry_id)
    return JSONResponse(status_code=200, content={"ok": True})
