from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Profile:
    """Per-user preferences. Timezone drives streak day bucketing."""

    user_id: str
    timezone: str = "UTC"
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "timezone": self.timezone,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
