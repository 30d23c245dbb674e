"""Chat model factory and response helpers."""

import json
import logging
import re
from functools import lru_cache
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage
from langchain_groq import ChatGroq

from nourishnote.core.config import settings

logger = logging.getLogger("nourishnote")

_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL)


@lru_cache(maxsize=1)
def get_chat_model() -> BaseChatModel:
    """Groq-hosted chat model built from settings on first use."""
    logger.info(f"[llm] initializing {settings.LLM_MODEL}")
    return ChatGroq(
        model_name=settings.LLM_MODEL,
        temperature=settings.LLM_TEMPERATURE,
        api_key=settings.GROQ_API_KEY,
    )


def message_text(message: BaseMessage) -> str:
    """Flatten message content (plain string or content blocks) to text."""
    content = message.content
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


def parse_json_object(text: str) -> dict[str, Any]:
    """Parse a JSON object from model output, tolerating a fenced code block.

    Raises ValueError when the text holds no JSON object.
    """
    match = _FENCE_RE.match(text)
    candidate = match.group(1) if match else text.strip()
    parsed = json.loads(candidate)
    if not isinstance(parsed, dict):
        raise ValueError("Expected a JSON object")
    return parsed
