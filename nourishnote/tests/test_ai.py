"""Chat graph, summarizer and attribute extraction against scripted models."""

import json

import pytest
from langchain_core.messages import HumanMessage, SystemMessage

from nourishnote.core.errors import UpstreamError, ValidationError
from nourishnote.features.ai.chat_graph import ChatGraph
from nourishnote.features.ai.extraction import extract_attributes
from nourishnote.features.ai.llm import parse_json_object
from nourishnote.features.ai.prompts import COACH_PROMPT, SUMMARY_HEADER
from nourishnote.features.ai.summarize import select_recent, summarize_conversation, to_transcript
from nourishnote.models.conversation import ChatMessage


def _msgs(*pairs):
    return [ChatMessage(role=role, content=content) for role, content in pairs]


def _unconfigured_model():
    raise RuntimeError("GROQ_API_KEY is not set")


class RecordingModel:
    """Wraps a chat model and records every message list it receives."""

    def __init__(self, inner):
        self.inner = inner
        self.calls = []

    def invoke(self, messages, *args, **kwargs):
        self.calls.append(list(messages))
        return self.inner.invoke(messages, *args, **kwargs)


class TestChatGraph:
    def test_reply_and_thread_memory(self, fake_llm):
        graph = ChatGraph(llm=fake_llm("Hi, what do you notice?", "That sounds hard."))

        assert graph.invoke_chat("u1", "t1", "hello") == "Hi, what do you notice?"
        assert graph.invoke_chat("u1", "t1", "I ate after work") == "That sounds hard."

        history = graph.thread_messages("u1", "t1")
        assert [m.type for m in history] == ["system", "human", "ai", "human", "ai"]

    def test_coach_prompt_only_on_first_turn(self, fake_llm):
        graph = ChatGraph(llm=fake_llm("one", "two"))
        graph.invoke_chat("u1", "t1", "first")
        graph.invoke_chat("u1", "t1", "second")

        system = [m for m in graph.thread_messages("u1", "t1") if isinstance(m, SystemMessage)]
        assert len(system) == 1
        assert system[0].content == COACH_PROMPT

    def test_system_prompt_override(self, fake_llm, monkeypatch):
        from nourishnote.core.config import settings

        monkeypatch.setattr(settings, "SYSTEM_PROMPT", "Be brief.")
        graph = ChatGraph(llm=fake_llm("ok"))
        graph.invoke_chat("u1", "t1", "hi")
        assert graph.thread_messages("u1", "t1")[0].content == "Be brief."

    def test_threads_are_isolated(self, fake_llm):
        graph = ChatGraph(llm=fake_llm("a", "b"))
        graph.invoke_chat("u1", "t1", "hello")
        graph.invoke_chat("u1", "t2", "hello")
        assert len(graph.thread_messages("u1", "t1")) == 3
        assert len(graph.thread_messages("u1", "t2")) == 3

    def test_same_thread_id_is_private_per_user(self, fake_llm):
        model = RecordingModel(fake_llm("r1", "r2"))
        graph = ChatGraph(llm=model)

        graph.ingest("alice", "t1", _msgs(("user", "alice secret binge"), ("assistant", "r0")))
        graph.invoke_chat("bob", "t1", "hello")

        assert [m.content for m in model.calls[0]] == [COACH_PROMPT, "hello"]
        assert [m.content for m in graph.thread_messages("alice", "t1")] == ["alice secret binge", "r0"]
        assert not any("alice" in str(m.content) for m in graph.thread_messages("bob", "t1"))

    def test_context_sent_to_model_but_not_stored(self, fake_llm):
        model = RecordingModel(fake_llm("noted", "again"))
        graph = ChatGraph(llm=model)

        graph.invoke_chat("u1", "t1", "what patterns do you see?", context="Entry Date: 2024-06-01")
        sent = model.calls[0]
        assert isinstance(sent[0], SystemMessage) and sent[0].content == COACH_PROMPT
        assert isinstance(sent[1], SystemMessage) and "Entry Date: 2024-06-01" in sent[1].content
        assert isinstance(sent[2], HumanMessage)

        graph.invoke_chat("u1", "t1", "thanks")
        assert not any("Entry Date" in str(m.content) for m in model.calls[1])
        assert not any("Entry Date" in str(m.content) for m in graph.thread_messages("u1", "t1"))

    def test_blank_input_rejected(self, fake_llm):
        graph = ChatGraph(llm=fake_llm("x"))
        with pytest.raises(ValidationError):
            graph.invoke_chat("u1", "", "hi")
        with pytest.raises(ValidationError):
            graph.invoke_chat("", "t1", "hi")
        with pytest.raises(ValidationError):
            graph.invoke_chat("u1", "t1", "   ")

    def test_model_failure_becomes_upstream_error(self):
        class Broken:
            def invoke(self, messages):
                raise RuntimeError("quota")

        graph = ChatGraph(llm=Broken())
        with pytest.raises(UpstreamError):
            graph.invoke_chat("u1", "t1", "hi")

    def test_ingest_records_without_model_call(self, fake_llm):
        model = RecordingModel(fake_llm("unused"))
        graph = ChatGraph(llm=model)

        graph.ingest("u1", "t1", _msgs(("user", "hey"), ("assistant", "hello there")))

        history = graph.thread_messages("u1", "t1")
        assert [m.content for m in history] == ["hey", "hello there"]
        assert model.calls == []

    def test_summarize_thread_leaves_source_thread_untouched(self, fake_llm):
        graph = ChatGraph(llm=fake_llm("hi", "Goal: eat mindfully"))
        graph.invoke_chat("u1", "t1", "hello")
        before = graph.thread_messages("u1", "t1")

        summary = graph.summarize_thread("u1", "t1", _msgs(("user", "hello"), ("assistant", "hi")))

        assert summary == f"{SUMMARY_HEADER}\n\nGoal: eat mindfully"
        assert graph.thread_messages("u1", "t1") == before

    def test_summarize_thread_empty(self, fake_llm):
        graph = ChatGraph(llm=fake_llm("x"))
        assert graph.summarize_thread("u1", "t1", []) is None
        with pytest.raises(ValidationError):
            graph.summarize_thread("u1", " ", _msgs(("user", "hi")))


class TestSummarize:
    def test_structured_summary(self, fake_llm):
        payload = {
            "goal": "Stop eating when stressed at night",
            "current_state": "Noticing triggers",
            "triggers_contexts": ["late work calls"],
            "emotions": ["stress"],
            "next_steps": ["try a short walk"],
        }
        summary = summarize_conversation(
            _msgs(("user", "I snack after calls"), ("assistant", "What do you notice?")),
            llm=fake_llm(json.dumps(payload)),
        )
        assert summary.goal == payload["goal"]
        assert summary.triggers_contexts == ["late work calls"]
        assert summary.patterns == []
        assert summary.raw is None

    def test_fenced_json_accepted(self, fake_llm):
        text = '```json\n{"goal": "rest more"}\n```'
        summary = summarize_conversation(_msgs(("user", "tired")), llm=fake_llm(text))
        assert summary.goal == "rest more"

    def test_non_json_output_kept_as_raw(self, fake_llm):
        summary = summarize_conversation(_msgs(("user", "hi")), llm=fake_llm("Here is a summary"))
        assert summary.goal == ""
        assert summary.next_steps == []
        assert summary.raw == "Here is a summary"

    def test_nothing_to_summarize(self, fake_llm):
        assert summarize_conversation([], llm=fake_llm("x")) is None
        assert summarize_conversation(_msgs(("system", "rules")), llm=fake_llm("x")) is None

    def test_model_failure_raises_upstream_error(self):
        class Broken:
            def invoke(self, messages):
                raise RuntimeError("timeout")

        with pytest.raises(UpstreamError):
            summarize_conversation(_msgs(("user", "hi")), llm=Broken())

    def test_model_factory_failure_raises_upstream_error(self, monkeypatch):
        from nourishnote.features.ai import summarize as summarize_module

        monkeypatch.setattr(summarize_module, "get_chat_model", _unconfigured_model)
        with pytest.raises(UpstreamError):
            summarize_conversation(_msgs(("user", "hi")))

    def test_recent_selection_and_transcript(self):
        messages = _msgs(("system", "rules"), *[("user", f"m{i} ") for i in range(30)])
        recent = select_recent(messages)
        assert len(recent) == 24
        assert recent[0].content == "m6 "
        assert to_transcript(recent[:2]) == "USER: m6\nUSER: m7"


class TestExtraction:
    def test_valid_attributes(self, fake_llm):
        payload = {
            "identified_trigger": "Skipped lunch",
            "preceding_mood": "Boredom",
            "severity_score_1_5": "2",
            "environment": "At work desk",
            "post_binge_feeling": "Numbness",
        }
        assert extract_attributes("entry", llm=fake_llm(json.dumps(payload))) == payload

    def test_missing_field_returns_error_record(self, fake_llm):
        result = extract_attributes("entry", llm=fake_llm('{"identified_trigger": "x"}'))
        assert result["error"] is True
        assert result["message"].startswith("Extraction failed")

    def test_severity_must_be_one_to_five(self, fake_llm):
        payload = {
            "identified_trigger": "a",
            "preceding_mood": "b",
            "severity_score_1_5": "9",
            "environment": "c",
            "post_binge_feeling": "d",
        }
        assert extract_attributes("entry", llm=fake_llm(json.dumps(payload)))["error"] is True

    def test_model_factory_failure_returns_error_record(self, monkeypatch):
        from nourishnote.features.ai import extraction as extraction_module

        monkeypatch.setattr(extraction_module, "get_chat_model", _unconfigured_model)
        result = extract_attributes("I ate cookies")
        assert result["error"] is True
        assert "GROQ_API_KEY" in result["original_error"]

    def test_empty_output_returns_error_record(self, fake_llm):
        assert extract_attributes("entry", llm=fake_llm(""))["error"] is True


def test_parse_json_object_rejects_arrays():
    with pytest.raises(ValueError):
        parse_json_object("[1, 2]")
