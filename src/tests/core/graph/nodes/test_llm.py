"""Tests for the LLM node actions.

The chat callables here are fakes; no provider is contacted.
"""

from typing import List

import pytest
from pydantic import ValidationError

from relaygraph.core.graph import END, START, StateGraph, keyword_dispatcher
from relaygraph.core.graph.nodes import LlmNode, QuestionClassifierNode, response_text
from relaygraph.core.graph.state import GraphState

from tests.core.graph.conftest import Recorder, replace_factory


class FakeChat:
    """Async chat callable returning canned answers and recording messages."""

    def __init__(self, answer="ok", error: Exception = None):
        self.answer = answer
        self.error = error
        self.calls: List[list] = []

    async def __call__(self, messages):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return self.answer


class FakeResponse:
    def __init__(self, content):
        self.content = content


def make_state(**data) -> GraphState:
    return GraphState.from_factory(None, data)


def test_response_text():
    """Test text extraction from strings and response objects."""
    assert response_text("  hi \n") == "hi"
    assert response_text(FakeResponse(" positive ")) == "positive"
    assert response_text(None) == ""


class TestLlmNode:
    """Test suite for LlmNode."""

    async def test_answer_written_to_output(self):
        """Test that the prompt is filled from state and the answer stored."""
        chat = FakeChat("HELLO")
        node = LlmNode(chat=chat, prompt_template="Shout: {input} ({tone})")

        updates = await node(make_state(input="hello", tone="loud"))

        assert updates == {"output": "HELLO"}
        message = chat.calls[0][-1]
        assert message.role == "user"
        assert message.content == "Shout: hello (loud)"

    async def test_system_prompt_first(self):
        """Test that the system prompt precedes the user message."""
        chat = FakeChat()
        node = LlmNode(chat=chat, system_prompt="Be brief.")
        await node(make_state(input="hi"))
        assert [m.role for m in chat.calls[0]] == ["system", "user"]

    async def test_custom_keys(self):
        """Test reading and writing custom state keys."""
        node = LlmNode(chat=FakeChat(FakeResponse("done")), input_key="question", output_key="answer")
        assert await node(make_state(question="why?")) == {"answer": "done"}

    async def test_empty_input_raises(self):
        """Test that an empty input is rejected."""
        with pytest.raises(ValueError):
            await LlmNode(chat=FakeChat())(make_state())

    async def test_failure_propagates_without_fallback(self):
        """Test that chat errors propagate when no fallback is set."""
        node = LlmNode(chat=FakeChat(error=ConnectionError("down")))
        with pytest.raises(ConnectionError):
            await node(make_state(input="hi"))

    async def test_fallback_on_failure(self):
        """Test that the fallback answer replaces a failed call."""
        node = LlmNode(chat=FakeChat(error=ConnectionError("down")), fallback="sorry")
        assert await node(make_state(input="hi")) == {"output": "sorry"}

    async def test_in_graph(self):
        """Test the node wired between START and END."""
        graph = StateGraph(state_factory=replace_factory("input", "output"))
        graph.add_node("llm", LlmNode(chat=FakeChat("HI")))
        graph.add_edge(START, "llm")
        graph.add_edge("llm", END)

        state = await graph.compile().invoke({"input": "hi"})
        assert state.data == {"input": "hi", "output": "HI"}


class TestQuestionClassifierNode:
    """Test suite for QuestionClassifierNode."""

    def test_requires_categories(self):
        """Test that at least one category is required."""
        with pytest.raises(ValidationError):
            QuestionClassifierNode(chat=FakeChat(), categories=[])

    def test_prompt(self):
        """Test the classification prompt layout."""
        node = QuestionClassifierNode(
            chat=FakeChat(),
            categories=["positive", "negative"],
            classification_instructions=["Praise is positive"],
        )
        prompt = node.build_prompt("great service")
        assert "positive, negative" in prompt
        assert "- Praise is positive" in prompt
        assert "Text to classify: great service" in prompt
        assert prompt.endswith("Please respond with only the category name.")

    async def test_classifies(self):
        """Test that the stripped label is stored."""
        chat = FakeChat(" positive\n")
        node = QuestionClassifierNode(chat=chat, categories=["positive", "negative"])
        assert await node(make_state(input="great")) == {"classifier_output": "positive"}
        assert len(chat.calls[0]) == 1

    async def test_empty_input_uses_fallback(self):
        """Test that empty input skips the model and stores the fallback."""
        chat = FakeChat()
        node = QuestionClassifierNode(chat=chat, categories=["a"], fallback="none")
        assert await node(make_state()) == {"classifier_output": "none"}
        assert chat.calls == []

    async def test_failure_uses_fallback(self):
        """Test that a failed call stores the fallback."""
        node = QuestionClassifierNode(chat=FakeChat(error=RuntimeError("x")), categories=["a"])
        assert await node(make_state(input="text")) == {"classifier_output": "unknown"}

    async def test_routes_customer_service_graph(self):
        """Test classifier driven routing in a full graph."""
        graph = StateGraph(
            name="customer service",
            state_factory=replace_factory("input", "classifier_output", "last"),
        )
        recorder = Recorder("recorder")
        specific_question = Recorder("specific_question")
        graph.add_node(
            "classifier",
            QuestionClassifierNode(chat=FakeChat("positive"), categories=["positive", "negative"]),
        )
        graph.add_node("recorder", recorder)
        graph.add_node("specific_question", specific_question)
        graph.add_edge(START, "classifier")
        graph.add_conditional_edges(
            "classifier",
            keyword_dispatcher("classifier_output", {"positive": "positive"}, default="negative"),
            {"positive": "recorder", "negative": "specific_question"},
        )

        state = await graph.compile().invoke({"input": "Thanks, all good"})
        assert state.value("classifier_output") == "positive"
        assert len(recorder.calls) == 1
        assert specific_question.calls == []
