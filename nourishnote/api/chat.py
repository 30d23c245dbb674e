"""Coach chat endpoints: turns, client-side ingest, summaries and saved threads."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from langchain_core.language_models import BaseChatModel
from pydantic import BaseModel, Field

from nourishnote.core.auth import get_current_user_id
from nourishnote.core.config import settings
from nourishnote.core.errors import UpstreamError
from nourishnote.features.ai.chat_graph import ChatGraph, get_chat_graph
from nourishnote.features.ai.summarize import summarize_conversation
from nourishnote.features.conversations import service as conversation_service
from nourishnote.features.entries import service as entry_service
from nourishnote.models.conversation import ChatMessage

logger = logging.getLogger("nourishnote")

router = APIRouter(prefix="/v1/chat", tags=["chat"])


class ChatRequest(BaseModel):
    thread_id: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    use_context: bool = False


class ThreadMessages(BaseModel):
    thread_id: str = Field(..., min_length=1)
    messages: List[ChatMessage]


class IngestRequest(ThreadMessages):
    messages: List[ChatMessage] = Field(..., min_length=1)


class SummarizeRequest(ThreadMessages):
    plain: bool = False


class EndRequest(ThreadMessages):
    summarize: bool = False


def get_summary_model() -> Optional[BaseChatModel]:
    """Override hook for tests; None means the configured model, built on first use."""
    return None


@router.post("")
def chat(
    body: ChatRequest,
    user_id: str = Depends(get_current_user_id),
    graph: ChatGraph = Depends(get_chat_graph),
):
    context = None
    if body.use_context:
        context = entry_service.format_entries_for_context(user_id, limit=settings.CONTEXT_ENTRY_LIMIT)
    reply = graph.invoke_chat(user_id, body.thread_id, body.message, context=context)
    return {"reply": reply}


@router.post("/ingest", status_code=202)
def ingest(
    body: IngestRequest,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    graph: ChatGraph = Depends(get_chat_graph),
):
    """Accept messages immediately; recording into the caller's thread runs after the response."""
    background_tasks.add_task(graph.ingest, user_id, body.thread_id, body.messages)
    return {"ok": True}


@router.post("/summarize")
def summarize(
    body: SummarizeRequest,
    user_id: str = Depends(get_current_user_id),
    llm=Depends(get_summary_model),
    graph: ChatGraph = Depends(get_chat_graph),
):
    """Structured summary by default; ``plain`` returns the coach's prose summary instead."""
    if body.plain:
        return {"ok": True, "summary": graph.summarize_thread(user_id, body.thread_id, body.messages)}
    summary = summarize_conversation(body.messages, llm=llm)
    return {"ok": True, "summary": summary.model_dump() if summary else None}


@router.post("/end")
def end(
    body: EndRequest,
    user_id: str = Depends(get_current_user_id),
    llm=Depends(get_summary_model),
):
    summary = None
    if body.summarize:
        try:
            summary = summarize_conversation(body.messages, llm=llm)
        except UpstreamError:
            logger.warning(f"[chat] saving thread {body.thread_id} without summary")
    summary_data = summary.model_dump() if summary else None
    saved = conversation_service.save_conversation(user_id, body.thread_id, body.messages, summary=summary_data)
    logger.info(f"[chat] saved thread {body.thread_id} for {user_id} ({len(body.messages)} messages)")
    return {"ok": True, "thread_id": saved.thread_id, "summary": summary_data}


@router.get("/conversations/latest")
def latest_conversation(user_id: str = Depends(get_current_user_id)):
    saved = conversation_service.get_latest_conversation(user_id)
    if saved is None:
        raise HTTPException(status_code=404, detail="No saved conversation")
    return {"data": saved.to_dict()}


@router.delete("/conversations")
def clear_conversations(user_id: str = Depends(get_current_user_id)):
    removed = conversation_service.clear_conversations(user_id)
    return {"ok": True, "removed": removed}
