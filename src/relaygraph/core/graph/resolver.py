"""Read-only helper for looking things up from inside an enhanced node."""

from typing import Dict, Any, List, Optional, Type, TypeVar

from relaygraph.core.graph.context import ExecutionContext
from relaygraph.core.graph.io import NodeInput, NodeParameterResult

T = TypeVar("T")

_MISSING = object()


def _typed(value: Any, expected_type: Optional[Type[T]]) -> Any:
    if value is _MISSING:
        return None
    if expected_type is not None and not isinstance(value, expected_type):
        return None
    return value


class NodeIOResolver:
    """Facade over a NodeInput and, optionally, the ExecutionContext of the run.

    Every accessor accepts an ``expected_type``; when given, the value is
    returned only if it is an instance of that type, otherwise ``None``.
    Queries that need the full run history use the context when one is
    attached and fall back to the history carried by the NodeInput.

    Example:
        ```python
        async def transform(state, node_input):
            io = NodeIOResolver.of(node_input)
            processed = io.get_output("node1", "processed", str) or ""
            return NodeOutput(node_id="node2", outputs={"transformed": processed + "!"})
        ```
    """

    def __init__(self, node_input: NodeInput, execution_context: Optional[ExecutionContext] = None):
        self.node_input = node_input
        self.execution_context = execution_context

    @classmethod
    def of(
        cls,
        node_input: NodeInput,
        execution_context: Optional[ExecutionContext] = None
    ) -> "NodeIOResolver":
        return cls(node_input, execution_context)

    @property
    def current_node_id(self) -> str:
        return self.node_input.current_node_id

    @property
    def direct_inputs(self) -> Dict[str, Any]:
        return dict(self.node_input.direct_inputs)

    def get_input(self, parameter_name: str, expected_type: Optional[Type[T]] = None) -> Optional[T]:
        """This node's own direct input ``parameter_name``."""
        value = self.node_input.get_direct_input(parameter_name, _MISSING)
        return _typed(value, expected_type)

    def get_node_input(
        self,
        node_id: str,
        parameter_name: str,
        expected_type: Optional[Type[T]] = None
    ) -> Optional[T]:
        """Input ``parameter_name`` recorded for an earlier node."""
        value = self.node_input.get_node_input(node_id, parameter_name, _MISSING)
        return _typed(value, expected_type)

    def get_output(
        self,
        node_id: str,
        parameter_name: str,
        expected_type: Optional[Type[T]] = None
    ) -> Optional[T]:
        """Output ``parameter_name`` recorded for an earlier node."""
        value = self.node_input.get_node_output(node_id, parameter_name, _MISSING)
        return _typed(value, expected_type)

    def get_latest_output(self, parameter_name: str, expected_type: Optional[Type[T]] = None) -> Optional[T]:
        """Most recent output named ``parameter_name`` from any earlier node."""
        value = self.node_input.get_latest_output(parameter_name, _MISSING)
        return _typed(value, expected_type)

    def get_latest_output_with_node(self, parameter_name: str) -> Optional[NodeParameterResult]:
        if self.execution_context is not None:
            return self.execution_context.get_latest_output(parameter_name)
        results = self.get_all_outputs(parameter_name)
        return results[-1] if results else None

    def get_all_outputs(self, parameter_name: str) -> List[NodeParameterResult]:
        """Every output named ``parameter_name``, in execution order."""
        if self.execution_context is not None:
            return self.execution_context.get_all_outputs(parameter_name)
        history = self.node_input.node_output_history
        return [
            NodeParameterResult(
                node_id=node_id,
                parameter_name=parameter_name,
                value=history[node_id][parameter_name],
            )
            for node_id in self.node_input.ordered_node_ids()
            if parameter_name in history.get(node_id, {})
        ]

    def get_all_inputs_of(self, node_id: str) -> Dict[str, Any]:
        return self.node_input.get_all_node_inputs(node_id)

    def get_all_outputs_of(self, node_id: str) -> Dict[str, Any]:
        return self.node_input.get_all_node_outputs(node_id)

    def get_execution_order(self) -> List[str]:
        if self.execution_context is not None:
            return self.execution_context.get_execution_order()
        return self.node_input.ordered_node_ids()

    def has_node_been_executed(self, node_id: str) -> bool:
        return node_id in self.get_execution_order()

    def find_nodes_with_output(self, parameter_name: str) -> List[str]:
        """Ids of the nodes that produced an output named ``parameter_name``."""
        return [result.node_id for result in self.get_all_outputs(parameter_name)]

    def find_nodes_with_input(self, parameter_name: str) -> List[str]:
        """Ids of the nodes that consumed an input named ``parameter_name``."""
        return [
            node_id
            for node_id, inputs in self.node_input.node_input_history.items()
            if parameter_name in inputs
        ]
