"""Errors raised by the graph engine.

Three kinds of failure end an invocation:

1. ConfigurationError: traversal reached a node id with no registered action
   (a dangling edge or a typo in a mapping).
2. RunawayExecutionError: the iteration cap was reached before END.
3. Action failures: whatever a node or edge action raises is propagated
   unchanged, so callers can catch their own exception types.

None of them is retried and no partial state is returned.
"""

from typing import Optional


class GraphError(Exception):
    """Base class for errors raised by the engine itself."""


class ConfigurationError(GraphError, LookupError):
    """A referenced node id has no registered action."""

    def __init__(self, node_id: str, message: Optional[str] = None):
        self.node_id = node_id
        super().__init__(message or f"Node not found: {node_id}")


class RunawayExecutionError(GraphError, RuntimeError):
    """The traversal hit ``max_iterations`` without reaching END."""

    def __init__(self, max_iterations: int, last_node: Optional[str] = None):
        self.max_iterations = max_iterations
        self.last_node = last_node
        message = f"Maximum iterations exceeded: {max_iterations}"
        if last_node is not None:
            message += f" (last node: {last_node})"
        super().__init__(message)
