"""Saved chat threads."""

from __future__ import annotations

from typing import Optional, Sequence
from uuid import uuid4

from sqlalchemy import select, insert, delete

from nourishnote.core.clock import as_utc, utc_now
from nourishnote.core.database import get_db_session, conversations
from nourishnote.core.errors import ValidationError
from nourishnote.models.conversation import ChatMessage, SavedConversation


def save_conversation(
    user_id: str,
    thread_id: str,
    messages: Sequence[ChatMessage],
    summary: Optional[dict] = None,
) -> SavedConversation:
    if not thread_id or not thread_id.strip():
        raise ValidationError("thread_id is required")

    saved = SavedConversation(
        id=str(uuid4()),
        user_id=user_id,
        thread_id=thread_id,
        messages=[m.model_dump() for m in messages],
        summary=summary,
        created_at=utc_now(),
    )
    with get_db_session() as session:
        session.execute(
            insert(conversations).values(
                id=saved.id,
                user_id=saved.user_id,
                thread_id=saved.thread_id,
                messages=saved.messages,
                summary=saved.summary,
                created_at=saved.created_at,
            )
        )
    return saved


def get_latest_conversation(user_id: str) -> Optional[SavedConversation]:
    with get_db_session() as session:
        row = session.execute(
            select(conversations)
            .where(conversations.c.user_id == user_id)
            .order_by(conversations.c.created_at.desc())
            .limit(1)
        ).first()
    if row is None:
        return None
    return SavedConversation(
        id=row.id,
        user_id=row.user_id,
        thread_id=row.thread_id,
        messages=list(row.messages or []),
        summary=row.summary,
        created_at=as_utc(row.created_at),
    )


def clear_conversations(user_id: str) -> int:
    with get_db_session() as session:
        result = session.execute(delete(conversations).where(conversations.c.user_id == user_id))
        return result.rowcount
