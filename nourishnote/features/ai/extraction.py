"""Attribute extraction for journal entries.

Never raises: a failed call yields an error record that is stored alongside
the entry so the journal write still succeeds.
"""

import logging
from typing import Any, Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from nourishnote.features.ai.llm import get_chat_model, message_text, parse_json_object
from nourishnote.features.ai.prompts import EXTRACTION_PROMPT
from nourishnote.models.entry import AttributeRecord

logger = logging.getLogger("nourishnote")


def extraction_error(error: Exception) -> dict[str, Any]:
    return {
        "error": True,
        "message": "Extraction failed due to an API or network error.",
        "original_error": str(error),
    }


def extract_attributes(text: str, llm: Optional[BaseChatModel] = None) -> dict[str, Any]:
    try:
        model = llm or get_chat_model()
        response = model.invoke(
            [
                SystemMessage(content=EXTRACTION_PROMPT),
                HumanMessage(content=f'Journal Entry to analyze: "{text}"'),
            ]
        )
        raw = message_text(response)
        if not raw.strip():
            raise ValueError("Model returned an empty response text.")
        record = AttributeRecord.model_validate(parse_json_object(raw))
        return record.model_dump()
    except Exception as e:
        logger.error(f"[extraction] attribute extraction failed: {e}")
        return extraction_error(e)
