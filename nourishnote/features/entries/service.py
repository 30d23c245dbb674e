"""Journal entry service: quota-checked writes, listing and chat context."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Callable, List, Optional
from uuid import uuid4

from nourishnote.core.clock import as_utc
from nourishnote.core.config import settings
from nourishnote.core.errors import NotFoundError, QuotaExceededError, ValidationError
from nourishnote.core.logging import log_event
from nourishnote.features.entries.persistence import EntryPersistence
from nourishnote.features.streaks.engine import quota
from nourishnote.models.entry import Entry, count_words
from nourishnote.models.streak import DAILY_ENTRY_LIMIT, QUOTA_WINDOW_HOURS

Extractor = Callable[[str], dict[str, Any]]


def create_entry(
    user_id: str,
    raw_text: str,
    *,
    extractor: Extractor,
    now: Optional[datetime] = None,
) -> Entry:
    """Persist a journal entry with extracted attributes.

    Raises:
        ValidationError: blank text, or text over the word or character limit
        QuotaExceededError: every slot in the trailing 24 hours is used
    """
    text = (raw_text or "").strip()
    if not text:
        raise ValidationError("raw_journal_text is required")
    words = count_words(text)
    if words > settings.MAX_ENTRY_WORDS:
        raise ValidationError(f"Entries are limited to {settings.MAX_ENTRY_WORDS} words (got {words})")
    if len(text) > settings.MAX_ENTRY_CHARS:
        raise ValidationError(
            f"raw_journal_text exceeds {settings.MAX_ENTRY_CHARS} character limit (got {len(text)})"
        )

    created_at = as_utc(now)
    remaining, cooldown_hours = quota(get_entry_timestamps(user_id), created_at)
    if remaining == 0:
        log_event("quota.rejected", level="warning", user_id=user_id, cooldown_hours=cooldown_hours)
        raise QuotaExceededError(
            f"You've reached your limit of {DAILY_ENTRY_LIMIT} entries per {QUOTA_WINDOW_HOURS} hours. "
            f"Next entry available in {cooldown_hours} hour(s).",
            cooldown_hours=cooldown_hours,
        )

    entry = Entry(
        id=str(uuid4()),
        user_id=user_id,
        raw_data=text,
        extracted_data=extractor(text),
        created_at=created_at,
    )
    EntryPersistence.insert_entry(entry)
    log_event(
        "entry.created",
        user_id=user_id,
        entry_id=entry.id,
        extraction_failed=bool((entry.extracted_data or {}).get("error")),
    )
    return entry


def list_entries(user_id: str) -> List[Entry]:
    return EntryPersistence.list_entries(user_id)


def get_entry_timestamps(user_id: str) -> List[datetime]:
    return EntryPersistence.list_timestamps(user_id)


def delete_entry(user_id: str, entry_id: str) -> None:
    if not EntryPersistence.delete_entry(user_id, entry_id):
        raise NotFoundError(f"Entry {entry_id} not found")
    log_event("entry.deleted", user_id=user_id, entry_id=entry_id)


def _format_entry(entry: Entry) -> str:
    extracted = json.dumps(entry.extracted_data or {}, indent=2)
    return (
        f"Entry Date: {entry.created_at.isoformat()}\n"
        f"Raw Journal Text:\n{entry.raw_data}\n\n"
        f"Extracted Attributes:\n{extracted}\n"
    )


def format_entries_for_context(user_id: str, limit: Optional[int] = None) -> Optional[str]:
    """Render a user's entries as one document for the coach; None when empty."""
    entries = EntryPersistence.list_entries(user_id, limit=limit)
    if not entries:
        return None
    return "\n---\n".join(_format_entry(entry) for entry in entries)
