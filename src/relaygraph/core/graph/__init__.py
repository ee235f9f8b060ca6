"""Graph package initialization.

Exposes core graph components and helpers for building workflows.
"""

from relaygraph.core.graph.base import StateGraph, START, END
from relaygraph.core.graph.compiled import CompiledGraph, TraversalStep
from relaygraph.core.graph.config import GraphConfig, DEFAULT_MAX_ITERATIONS
from relaygraph.core.graph.context import ExecutionContext
from relaygraph.core.graph.io import NodeInput, NodeOutput, NodeParameterResult
from relaygraph.core.graph.resolver import NodeIOResolver
from relaygraph.core.graph.state import (
    GraphState,
    KeyStrategy,
    ReplaceStrategy,
    AppendStrategy,
    MergeStrategy,
    StateFactory,
)
from relaygraph.core.graph.actions import (
    NodeAction,
    EnhancedNodeAction,
    EdgeAction,
    from_sync,
    empty_action,
    constant_edge,
    keyword_dispatcher,
    from_simple,
    output_only,
    as_node_action,
)
from relaygraph.core.graph.viz import render_mermaid

__all__ = [
    # Core classes
    "StateGraph",
    "CompiledGraph",
    "TraversalStep",
    "GraphConfig",
    "GraphState",
    "ExecutionContext",
    "NodeInput",
    "NodeOutput",
    "NodeParameterResult",
    "NodeIOResolver",

    # Sentinels and defaults
    "START",
    "END",
    "DEFAULT_MAX_ITERATIONS",

    # State strategies
    "KeyStrategy",
    "ReplaceStrategy",
    "AppendStrategy",
    "MergeStrategy",
    "StateFactory",

    # Action contracts and adapters
    "NodeAction",
    "EnhancedNodeAction",
    "EdgeAction",
    "from_sync",
    "empty_action",
    "constant_edge",
    "keyword_dispatcher",
    "from_simple",
    "output_only",
    "as_node_action",

    "render_mermaid",
]
