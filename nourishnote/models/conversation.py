"""Chat and summary models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

ChatRole = Literal["user", "assistant", "system"]


class ChatMessage(BaseModel):
    role: ChatRole
    content: str


class ConversationSummary(BaseModel):
    """Behavior-change brief distilled from a chat transcript."""

    goal: str
    current_state: str = ""
    triggers_contexts: list[str] = Field(default_factory=list)
    coping_attempts: list[str] = Field(default_factory=list)
    emotions: list[str] = Field(default_factory=list)
    patterns: list[str] = Field(default_factory=list)
    growth_edge: list[str] = Field(default_factory=list)
    next_steps: list[str] = Field(default_factory=list)
    metadata: list[str] = Field(default_factory=list)
    raw: Optional[str] = None  # model text that could not be parsed


@dataclass
class SavedConversation:
    id: str
    user_id: str
    thread_id: str
    created_at: datetime
    messages: list[dict] = field(default_factory=list)
    summary: Optional[dict] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "thread_id": self.thread_id,
            "messages": self.messages,
            "summary": self.summary,
            "created_at": self.created_at.isoformat(),
        }
