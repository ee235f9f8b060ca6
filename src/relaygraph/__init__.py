"""Relaygraph - async state-graph execution for LLM workflows."""

from relaygraph.core import (
    GraphError,
    ConfigurationError,
    RunawayExecutionError,
    configure_logging,
    LogLevel,
    LogComponent,
)
from relaygraph.core.graph import (
    StateGraph,
    CompiledGraph,
    GraphConfig,
    GraphState,
    ExecutionContext,
    NodeInput,
    NodeOutput,
    NodeIOResolver,
    START,
    END,
)

__all__ = [
    'StateGraph',
    'CompiledGraph',
    'GraphConfig',
    'GraphState',
    'ExecutionContext',
    'NodeInput',
    'NodeOutput',
    'NodeIOResolver',
    'START',
    'END',
    'GraphError',
    'ConfigurationError',
    'RunawayExecutionError',
    'configure_logging',
    'LogLevel',
    'LogComponent'
]
