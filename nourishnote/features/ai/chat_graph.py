"""
LangGraph chat graph for the Alia coach.

Single model node (START -> model -> END) compiled with a checkpointer, so each
thread_id carries its own message history between requests.
"""
import logging
from typing import Optional, Sequence
from uuid import uuid4

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from langgraph.checkpoint.memory import MemorySaver
from langgraph.graph import END, START, MessagesState, StateGraph

from nourishnote.core.config import settings
from nourishnote.core.errors import UpstreamError, ValidationError
from nourishnote.features.ai.llm import get_chat_model, message_text
from nourishnote.features.ai.prompts import CONTEXT_PREFIX, COACH_PROMPT, SUMMARIZE_PROMPT, SUMMARY_HEADER
from nourishnote.features.ai.summarize import to_transcript
from nourishnote.models.conversation import ChatMessage

logger = logging.getLogger("nourishnote")


class CoachState(MessagesState):
    """Thread messages plus per-turn journal context (not part of the history)."""
    context: Optional[str]


class ChatGraph:
    def __init__(self, llm: Optional[BaseChatModel] = None, checkpointer=None):
        self._llm = llm
        self.app = self._build(checkpointer or MemorySaver())

    @property
    def llm(self) -> BaseChatModel:
        if self._llm is None:
            self._llm = get_chat_model()
        return self._llm

    def _call_model(self, state: CoachState) -> dict:
        messages = list(state["messages"])
        context = state.get("context")
        if context:
            context_message = SystemMessage(content=f"{CONTEXT_PREFIX}{context}")
            split = 1 if messages and isinstance(messages[0], SystemMessage) else 0
            messages = messages[:split] + [context_message] + messages[split:]
        response = self.llm.invoke(messages)
        return {"messages": [response]}

    def _build(self, checkpointer):
        workflow = StateGraph(CoachState)
        workflow.add_node("model", self._call_model)
        workflow.add_edge(START, "model")
        workflow.add_edge("model", END)
        return workflow.compile(checkpointer=checkpointer)

    @staticmethod
    def _config(user_id: str, thread_id: str) -> dict:
        # Checkpoints are keyed per owner so equal client thread ids never collide
        return {"configurable": {"thread_id": f"{user_id}:{thread_id}"}}

    @staticmethod
    def _require(user_id: str, thread_id: str) -> None:
        if not user_id or not user_id.strip():
            raise ValidationError("user_id is required")
        if not thread_id or not thread_id.strip():
            raise ValidationError("thread_id is required")

    def thread_messages(self, user_id: str, thread_id: str) -> list:
        snapshot = self.app.get_state(self._config(user_id, thread_id))
        return list((snapshot.values or {}).get("messages", []))

    def invoke_chat(self, user_id: str, thread_id: str, text: str, context: Optional[str] = None) -> str:
        """Send one user turn and return the coach's reply.

        The coach prompt is only added on the first turn of a thread.
        """
        self._require(user_id, thread_id)
        if not text or not text.strip():
            raise ValidationError("message is required")

        new_messages = []
        if not self.thread_messages(user_id, thread_id):
            new_messages.append(SystemMessage(content=settings.SYSTEM_PROMPT or COACH_PROMPT))
        new_messages.append(HumanMessage(content=text))

        try:
            out = self.app.invoke(
                {"messages": new_messages, "context": context},
                self._config(user_id, thread_id),
            )
        except Exception as e:
            logger.error(f"[chat] model call failed for thread {thread_id}: {e}", exc_info=True)
            raise UpstreamError("Coach is unavailable right now") from e

        last = out["messages"][-1] if out.get("messages") else None
        return message_text(last) if last is not None else ""

    def ingest(self, user_id: str, thread_id: str, messages: Sequence[ChatMessage]) -> None:
        """Record client-held messages into a thread without calling the model.

        Best-effort: failures are logged, never raised.
        """
        try:
            self.app.update_state(
                self._config(user_id, thread_id),
                {"messages": [{"role": m.role, "content": m.content} for m in messages]},
                as_node="model",
            )
            logger.info(f"[chat] ingested {len(messages)} messages into thread {thread_id}")
        except Exception as e:
            logger.error(f"[chat] ingest failed for thread {thread_id}: {e}", exc_info=True)

    def summarize_thread(self, user_id: str, thread_id: str, messages: Sequence[ChatMessage]) -> Optional[str]:
        """Plain-text summary of ``messages`` on a throwaway thread.

        The source thread's history is never touched.
        """
        self._require(user_id, thread_id)
        if not messages:
            return None

        transcript = to_transcript(messages)
        summary_thread_id = f"{thread_id}-summary-{uuid4()}"
        try:
            out = self.app.invoke(
                {
                    "messages": [
                        SystemMessage(content=SUMMARIZE_PROMPT),
                        HumanMessage(
                            content=f"CONVERSATION:\n{transcript}\n\n"
                            "Please provide a structured summary following the format specified in the system instruction."
                        ),
                    ],
                    "context": None,
                },
                self._config(user_id, summary_thread_id),
            )
        except Exception as e:
            logger.error(f"[chat] summary call failed for thread {thread_id}: {e}", exc_info=True)
            raise UpstreamError("Summary generation failed") from e

        last = out["messages"][-1] if out.get("messages") else None
        text = message_text(last) if last is not None else ""
        if not text:
            return None
        return f"{SUMMARY_HEADER}\n\n{text}"


_chat_graph: Optional[ChatGraph] = None


def get_chat_graph() -> ChatGraph:
    """Process-wide graph; thread memory lives as long as the process."""
    global _chat_graph
    if _chat_graph is None:
        _chat_graph = ChatGraph()
    return _chat_graph
