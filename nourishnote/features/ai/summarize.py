"""Structured conversation summaries."""

import logging
from typing import Optional, Sequence

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from nourishnote.core.errors import UpstreamError
from nourishnote.features.ai.llm import get_chat_model, message_text, parse_json_object
from nourishnote.features.ai.prompts import SUMMARIZE_PROMPT, SUMMARY_JSON_INSTRUCTION
from nourishnote.models.conversation import ChatMessage, ConversationSummary

logger = logging.getLogger("nourishnote")

MAX_TURNS = 24


def select_recent(messages: Sequence[ChatMessage], max_turns: int = MAX_TURNS) -> list[ChatMessage]:
    """Last ``max_turns`` non-system messages, to stay within token limits."""
    filtered = [m for m in messages if m.role != "system"]
    return filtered[-max_turns:]


def to_transcript(messages: Sequence[ChatMessage]) -> str:
    return "\n".join(f"{m.role.upper()}: {m.content.strip()}" for m in messages)


def summarize_conversation(
    messages: Sequence[ChatMessage],
    llm: Optional[BaseChatModel] = None,
) -> Optional[ConversationSummary]:
    """Distill a chat into a ConversationSummary.

    Returns None when there is nothing to summarize. Output that is not valid
    JSON is kept in ``raw`` on an otherwise empty summary.

    Raises:
        UpstreamError: the model call itself failed
    """
    recent = select_recent(messages)
    if not recent:
        return None

    transcript = to_transcript(recent)
    try:
        model = llm or get_chat_model()
        response = model.invoke(
            [
                SystemMessage(content=f"{SUMMARIZE_PROMPT}\n\n{SUMMARY_JSON_INSTRUCTION}"),
                HumanMessage(content=f"CONVERSATION:\n{transcript}\n\nProduce a JSON summary that captures conversation."),
            ]
        )
    except Exception as e:
        logger.error(f"[summarize] model call failed: {e}", exc_info=True)
        raise UpstreamError("Summary generation failed") from e

    text = message_text(response)
    if not text.strip():
        return None

    try:
        return ConversationSummary.model_validate(parse_json_object(text))
    except ValueError:
        # pydantic's ValidationError and json's JSONDecodeError are both ValueErrors
        logger.warning("[summarize] model returned non-JSON summary, keeping raw text")
        return ConversationSummary(goal="", raw=text)
