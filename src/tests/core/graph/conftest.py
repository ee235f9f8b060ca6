"""Shared fixtures for graph tests."""

from typing import Any, Dict, List

import pytest

from relaygraph.core.graph import (
    END,
    START,
    GraphState,
    NodeInput,
    NodeIOResolver,
    NodeOutput,
    ReplaceStrategy,
    StateGraph,
)


def replace_factory(*keys: str):
    """State factory registering ReplaceStrategy for every key."""
    def factory() -> Dict[str, Any]:
        return {key: ReplaceStrategy() for key in keys}
    return factory


class Recorder:
    """Plain node action that records each call and writes a marker."""

    def __init__(self, node_id: str, updates: Dict[str, Any] = None):
        self.node_id = node_id
        self.updates = updates if updates is not None else {"last": node_id}
        self.calls: List[Dict[str, Any]] = []

    async def __call__(self, state: GraphState) -> Dict[str, Any]:
        self.calls.append(dict(state.data))
        return dict(self.updates)


def suffix_node(node_id: str, source_id: str = None, suffix: str = None):
    """Enhanced node appending ``_<suffix>`` to its predecessor's ``data`` output.

    Without a source it starts from the direct input ``input``.
    """
    suffix = suffix or node_id

    async def action(state: GraphState, node_input: NodeInput) -> NodeOutput:
        io = NodeIOResolver.of(node_input)
        if source_id is None:
            base = io.get_input("input", str) or ""
        else:
            base = io.get_output(source_id, "data", str) or ""
        return NodeOutput(
            node_id=node_id,
            outputs={"data": f"{base}_{suffix}"},
            state_updates={"result": f"{base}_{suffix}"},
            metadata={"source": source_id},
        )
    return action


@pytest.fixture
def graph() -> StateGraph:
    """An empty graph whose state registers input/output/result."""
    return StateGraph(
        name="test graph",
        state_factory=replace_factory("input", "output", "result"),
    )


@pytest.fixture
def linear_enhanced_graph() -> StateGraph:
    """START -> node_a -> node_b -> node_c -> END, each building on the previous output."""
    graph = StateGraph(name="linear", state_factory=replace_factory("input", "result"))
    graph.add_enhanced_node("node_a", suffix_node("node_a", suffix="A"))
    graph.add_enhanced_node("node_b", suffix_node("node_b", "node_a", "B"))
    graph.add_enhanced_node("node_c", suffix_node("node_c", "node_b", "C"))
    graph.add_edge(START, "node_a")
    graph.add_edge("node_a", "node_b")
    graph.add_edge("node_b", "node_c")
    graph.add_edge("node_c", END)
    return graph
