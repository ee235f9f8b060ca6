"""Tests for action adapters and built-in actions."""

import threading

from relaygraph.core.graph.actions import (
    EdgeAction,
    NodeAction,
    UNKNOWN_NODE_ID,
    as_node_action,
    constant_edge,
    empty_action,
    from_simple,
    from_sync,
    keyword_dispatcher,
    maybe_await,
    output_only,
)
from relaygraph.core.graph.io import NodeInput, NodeOutput
from relaygraph.core.graph.state import GraphState


def make_state(**data) -> GraphState:
    return GraphState.from_factory(None, data)


class TestAdapters:
    """Test suite for sync/async and plain/enhanced adapters."""

    async def test_maybe_await(self):
        """Test awaiting awaitables and passing plain values through."""
        async def coro():
            return 1
        assert await maybe_await(coro()) == 1
        assert await maybe_await(2) == 2

    async def test_from_sync(self):
        """Test wrapping a synchronous node function."""
        def shout(state):
            return {"output": state.value("input").upper()}

        action = from_sync(shout)
        assert action.__name__ == "shout"
        assert await action(make_state(input="hi")) == {"output": "HI"}

    async def test_from_sync_offload_runs_in_thread(self):
        """Test that offloaded functions run off the event loop thread."""
        main_thread = threading.get_ident()

        def where(state):
            return {"thread": threading.get_ident()}

        result = await from_sync(where, offload=True)(make_state())
        assert result["thread"] != main_thread

    async def test_empty_action_and_constant_edge(self):
        """Test the trivial node and edge actions."""
        assert await empty_action()(make_state()) == {}
        assert await constant_edge("go")(make_state()) == "go"

    def test_protocols(self):
        """Test that built-in actions satisfy the action protocols."""
        assert isinstance(empty_action(), NodeAction)
        assert isinstance(constant_edge("x"), EdgeAction)

    async def test_from_simple(self):
        """Test lifting a plain action into an enhanced one."""
        async def plain(state):
            return {"output": "done"}

        enhanced = from_simple(plain)
        output = await enhanced(make_state(), NodeInput(current_node_id="node"))
        assert output.node_id == "node"
        assert output.state_updates == {"output": "done"}
        assert output.outputs == {}

    async def test_from_simple_accepts_none(self):
        """Test that a None result lifts to empty state updates."""
        enhanced = from_simple(lambda state: None)
        output = await enhanced(make_state(), NodeInput(current_node_id="node"))
        assert output.state_updates == {}

    async def test_output_only(self):
        """Test an enhanced action that only produces outputs."""
        def produce(state, node_input):
            return {"data": node_input.get_direct_input("input")}

        enhanced = output_only("node", produce)
        output = await enhanced(make_state(), NodeInput(current_node_id="node", direct_inputs={"input": "x"}))
        assert output.outputs == {"data": "x"}
        assert output.state_updates == {}

    async def test_as_node_action(self):
        """Test degrading an enhanced action into a plain one."""
        seen = {}

        async def enhanced(state, node_input):
            seen["node_id"] = node_input.current_node_id
            return NodeOutput(
                node_id="node",
                outputs={"dropped": True},
                state_updates={"result": "kept"},
            )

        plain = as_node_action(enhanced)
        assert await plain(make_state()) == {"result": "kept"}
        assert seen["node_id"] == UNKNOWN_NODE_ID


class TestKeywordDispatcher:
    """Test suite for keyword based routing."""

    async def test_first_matching_keyword(self):
        """Test that the first matching keyword picks the label."""
        decide = keyword_dispatcher(
            "classifier_output",
            {"positive": "positive", "negative": "negative"},
            default="unknown",
        )
        assert await decide(make_state(classifier_output="positive")) == "positive"
        assert await decide(make_state(classifier_output="very negative")) == "negative"

    async def test_default_label(self):
        """Test the default label for unmatched or unset values."""
        decide = keyword_dispatcher("classifier_output", {"positive": "yes"}, default="no")
        assert await decide(make_state(classifier_output="neutral")) == "no"
        assert await decide(make_state()) == "no"

    async def test_non_string_values(self):
        """Test matching against non-string state values."""
        decide = keyword_dispatcher("score", {"5": "five"}, default="other")
        assert await decide(make_state(score=5)) == "five"
