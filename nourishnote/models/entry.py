"""Journal entry domain models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

def count_words(text: str) -> int:
    """Whitespace-separated tokens, the unit of the entry length limit."""
    return len(text.split())


MOOD_KEYS = ("preceding_mood", "mood", "emotion", "feel", "sentiment", "top_emotion")


class AttributeRecord(BaseModel):
    """Emotional attributes extracted from one journal entry."""

    identified_trigger: str = Field(..., description="Event that immediately preceded the urge or behavior")
    preceding_mood: str = Field(..., description="Primary emotional state just before the behavior")
    severity_score_1_5: str = Field(..., pattern=r"^[1-5]$", description="'1' minor lapse to '5' severe episode")
    environment: str = Field(..., description="Physical location and surroundings")
    post_binge_feeling: str = Field(..., description="Dominant emotion right after the behavior")


@dataclass
class Entry:
    id: str
    user_id: str
    raw_data: str
    created_at: datetime
    extracted_data: Optional[dict[str, Any]] = None

    @property
    def word_count(self) -> int:
        return count_words(self.raw_data)

    @property
    def mood(self) -> Optional[str]:
        extracted = self.extracted_data or {}
        for key in MOOD_KEYS:
            value = extracted.get(key)
            if isinstance(value, str):
                return value
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "content": self.raw_data,
            "extracted_data": self.extracted_data,
            "word_count": self.word_count,
            "mood": self.mood,
            "created_at": self.created_at.isoformat(),
        }
