"""
SQL persistence for journal entries.

Thin SQLAlchemy Core layer; services own validation and quota rules.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, insert, delete, and_

from nourishnote.core.clock import as_utc
from nourishnote.core.database import get_db_session, entries
from nourishnote.models.entry import Entry


def _row_to_entry(row) -> Entry:
    return Entry(
        id=row.id,
        user_id=row.user_id,
        raw_data=row.raw_data,
        extracted_data=row.extracted_data,
        created_at=as_utc(row.created_at),
    )


class EntryPersistence:

    @staticmethod
    def insert_entry(entry: Entry) -> Entry:
        with get_db_session() as session:
            session.execute(
                insert(entries).values(
                    id=entry.id,
                    user_id=entry.user_id,
                    raw_data=entry.raw_data,
                    extracted_data=entry.extracted_data,
                    created_at=entry.created_at,
                )
            )
        return entry

    @staticmethod
    def list_entries(user_id: str, limit: Optional[int] = None) -> List[Entry]:
        """Entries for a user, newest first."""
        query = (
            select(entries)
            .where(entries.c.user_id == user_id)
            .order_by(entries.c.created_at.desc())
        )
        if limit:
            query = query.limit(limit)
        with get_db_session() as session:
            rows = session.execute(query).fetchall()
        return [_row_to_entry(row) for row in rows]

    @staticmethod
    def list_timestamps(user_id: str) -> List[datetime]:
        with get_db_session() as session:
            rows = session.execute(
                select(entries.c.created_at).where(entries.c.user_id == user_id)
            ).fetchall()
        return [as_utc(row.created_at) for row in rows]

    @staticmethod
    def delete_entry(user_id: str, entry_id: str) -> bool:
        """Delete an entry owned by ``user_id``. Returns False when nothing matched."""
        with get_db_session() as session:
            result = session.execute(
                delete(entries).where(and_(entries.c.id == entry_id, entries.c.user_id == user_id))
            )
            return result.rowcount > 0
