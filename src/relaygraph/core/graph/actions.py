"""Action contracts for nodes and edges.

Three kinds of asynchronous callables plug into a graph:

1. NodeAction: ``async (state) -> Mapping | None``, a partial state update
2. EnhancedNodeAction: ``async (state, node_input) -> NodeOutput``
3. EdgeAction: ``async (state) -> str``, a routing label

Failures are raised from the coroutine and reach the caller of ``invoke``
unchanged. The helpers below adapt synchronous functions and convert between
the plain and enhanced node shapes.

Example:
    ```python
    async def uppercase(state):
        return {"output": state.value("input", "").upper()}

    graph.add_node("llm", uppercase)
    graph.add_conditional_edges(
        "classifier",
        keyword_dispatcher("classifier_output", {"positive": "positive"}, default="negative"),
        {"positive": "recorder", "negative": "specific_question"},
    )
    ```
"""

import asyncio
import inspect
from functools import wraps
from typing import (
    Any,
    Awaitable,
    Callable,
    Mapping,
    Optional,
    Protocol,
    Union,
    runtime_checkable,
)

from relaygraph.core.logging import get_logger, LogComponent
from relaygraph.core.graph.io import NodeInput, NodeOutput
from relaygraph.core.graph.state import GraphState

logger = get_logger(LogComponent.NODES)

NodeUpdates = Optional[Mapping[str, Any]]

# Node id given to the NodeInput of an enhanced action run outside a graph
UNKNOWN_NODE_ID = "unknown"


@runtime_checkable
class NodeAction(Protocol):
    """Plain node: reads the state, returns the keys to merge."""

    def __call__(self, state: GraphState) -> Awaitable[NodeUpdates]: ...


@runtime_checkable
class EnhancedNodeAction(Protocol):
    """History-aware node: reads state and NodeInput, returns a NodeOutput."""

    def __call__(self, state: GraphState, node_input: NodeInput) -> Awaitable[NodeOutput]: ...


@runtime_checkable
class EdgeAction(Protocol):
    """Decision function of a conditional edge: returns a routing label."""

    def __call__(self, state: GraphState) -> Awaitable[str]: ...


async def maybe_await(result: Union[Any, Awaitable[Any]]) -> Any:
    """Await ``result`` when it is awaitable, otherwise return it as is."""
    if inspect.isawaitable(result):
        return await result
    return result


def from_sync(func: Callable[..., Any], offload: bool = False) -> Callable[..., Awaitable[Any]]:
    """Wrap a synchronous node or edge function as a coroutine function.

    Args:
        func: The synchronous callable
        offload: Run it in a worker thread so blocking calls (network, disk)
            do not stall the event loop

    Returns:
        An async callable with the same arguments
    """
    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        if offload:
            return await asyncio.to_thread(func, *args, **kwargs)
        return func(*args, **kwargs)
    return wrapper


def empty_action() -> NodeAction:
    """A node that changes nothing."""
    async def action(state: GraphState) -> NodeUpdates:
        return {}
    return action


def constant_edge(label: str) -> EdgeAction:
    """An edge action that always answers ``label``."""
    async def decide(state: GraphState) -> str:
        return label
    return decide


def keyword_dispatcher(
    state_key: str,
    keywords: Mapping[str, str],
    default: str
) -> EdgeAction:
    """Route on keywords found in a state value.

    Args:
        state_key: Key whose value (converted to str) is searched
        keywords: Keyword to label, tried in insertion order
        default: Label used when no keyword matches or the key is unset

    Returns:
        An edge action answering the label of the first matching keyword
    """
    async def decide(state: GraphState) -> str:
        text = state.value(state_key)
        text = "" if text is None else str(text)
        for keyword, label in keywords.items():
            if keyword in text:
                logger.info(f"Dispatcher on '{state_key}' matched '{keyword}' -> {label}")
                return label
        logger.info(f"Dispatcher on '{state_key}' found no keyword, using '{default}'")
        return default
    return decide


def from_simple(action: Callable[[GraphState], Any]) -> EnhancedNodeAction:
    """Lift a plain node action into an enhanced one whose updates become ``state_updates``."""
    async def enhanced(state: GraphState, node_input: NodeInput) -> NodeOutput:
        updates = await maybe_await(action(state))
        return NodeOutput(
            node_id=node_input.current_node_id,
            state_updates=dict(updates or {}),
        )
    return enhanced


def output_only(
    node_id: str,
    producer: Callable[[GraphState, NodeInput], Any]
) -> EnhancedNodeAction:
    """Enhanced action whose producer returns only named outputs, no state updates."""
    async def enhanced(state: GraphState, node_input: NodeInput) -> NodeOutput:
        outputs = await maybe_await(producer(state, node_input))
        return NodeOutput(node_id=node_id, outputs=dict(outputs or {}))
    return enhanced


def as_node_action(action: Callable[[GraphState, NodeInput], Any]) -> NodeAction:
    """Degrade an enhanced action into a plain one for callers unaware of history.

    The action runs with an empty NodeInput and only its ``state_updates`` are
    returned; outputs and metadata are dropped.
    """
    async def plain(state: GraphState) -> NodeUpdates:
        node_output = await maybe_await(action(state, NodeInput(current_node_id=UNKNOWN_NODE_ID)))
        return dict(node_output.state_updates)
    return plain
