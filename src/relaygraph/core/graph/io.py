"""Structured input and output for enhanced nodes.

An enhanced node receives a ``NodeInput`` holding its direct inputs (a copy of
the current state) together with what every earlier node of the run consumed
and produced, and answers with a ``NodeOutput`` that keeps three things apart:

- outputs: node-local values other nodes can address as ``(node_id, name)``
- state_updates: merged into the shared GraphState
- metadata: diagnostics only, never merged anywhere

Example:
    ```python
    async def summarize(state, node_input):
        text = node_input.get_node_output("fetch", "text", "")
        return NodeOutput(
            node_id="summarize",
            outputs={"summary": text[:100]},
            state_updates={"summary": text[:100]},
            metadata={"chars": len(text)},
        )
    ```
"""

import copy
from typing import Dict, Any, List, Mapping
from pydantic import BaseModel, Field

from relaygraph.core.logging import get_logger, LogComponent

logger = get_logger(LogComponent.CONTEXT)

History = Dict[str, Dict[str, Any]]


class NodeParameterResult(BaseModel):
    """A named value together with the node that produced it."""
    node_id: str
    parameter_name: str
    value: Any = None

    class Config:
        arbitrary_types_allowed = True


class NodeInput(BaseModel):
    """
    Everything an enhanced node can read when it runs.

    Attributes:
        current_node_id: Id of the node being executed
        direct_inputs: This node's own inputs, derived from the current state
        node_input_history: Recorded direct inputs of earlier nodes, by node id
        node_output_history: Recorded outputs of earlier nodes, by node id
        execution_order: Order in which the earlier nodes first ran
    """
    current_node_id: str
    direct_inputs: Dict[str, Any] = Field(default_factory=dict)
    node_input_history: History = Field(default_factory=dict)
    node_output_history: History = Field(default_factory=dict)
    execution_order: List[str] = Field(default_factory=list)

    class Config:
        arbitrary_types_allowed = True

    def get_direct_input(self, parameter_name: str, default: Any = None) -> Any:
        return self.direct_inputs.get(parameter_name, default)

    def get_node_input(self, node_id: str, parameter_name: str, default: Any = None) -> Any:
        """Input ``parameter_name`` that ``node_id`` received, or ``default``."""
        return self.node_input_history.get(node_id, {}).get(parameter_name, default)

    def get_node_output(self, node_id: str, parameter_name: str, default: Any = None) -> Any:
        """Output ``parameter_name`` that ``node_id`` produced, or ``default``."""
        return self.node_output_history.get(node_id, {}).get(parameter_name, default)

    def get_all_node_inputs(self, node_id: str) -> Dict[str, Any]:
        return dict(self.node_input_history.get(node_id, {}))

    def get_all_node_outputs(self, node_id: str) -> Dict[str, Any]:
        return dict(self.node_output_history.get(node_id, {}))

    def get_latest_output(self, parameter_name: str, default: Any = None) -> Any:
        """Value of ``parameter_name`` from the most recently executed node that produced it."""
        for node_id in self.ordered_node_ids(reverse=True):
            outputs = self.node_output_history.get(node_id, {})
            if parameter_name in outputs:
                return outputs[parameter_name]
        return default

    def add_direct_input(self, parameter_name: str, value: Any) -> None:
        self.direct_inputs[parameter_name] = value

    def add_node_input_history(self, node_id: str, inputs: Mapping[str, Any]) -> None:
        self.node_input_history[node_id] = dict(inputs)
        self._remember(node_id)

    def add_node_output_history(self, node_id: str, outputs: Mapping[str, Any]) -> None:
        self.node_output_history[node_id] = dict(outputs)
        self._remember(node_id)

    def _remember(self, node_id: str) -> None:
        if node_id not in self.execution_order:
            self.execution_order.append(node_id)

    def ordered_node_ids(self, reverse: bool = False) -> List[str]:
        # History maps may hold ids that were added by hand without an order entry
        ordered = list(self.execution_order)
        for node_id in list(self.node_output_history) + list(self.node_input_history):
            if node_id not in ordered:
                ordered.append(node_id)
        return list(reversed(ordered)) if reverse else ordered


class NodeOutput(BaseModel):
    """
    Result of an enhanced node.

    The ``add_*`` mutators return the instance so small outputs can be built
    inline, but passing the maps to the constructor is the usual style.

    Attributes:
        node_id: Id of the node that produced this output
        outputs: Named node-local outputs
        state_updates: Partial update merged into the GraphState
        metadata: Diagnostics recorded in the execution context
    """
    node_id: str
    outputs: Dict[str, Any] = Field(default_factory=dict)
    state_updates: Dict[str, Any] = Field(default_factory=dict)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        arbitrary_types_allowed = True

    def get_output(self, parameter_name: str, default: Any = None) -> Any:
        return self.outputs.get(parameter_name, default)

    def get_state_update(self, key: str, default: Any = None) -> Any:
        return self.state_updates.get(key, default)

    def get_metadata(self, key: str, default: Any = None) -> Any:
        return self.metadata.get(key, default)

    def add_output(self, parameter_name: str, value: Any) -> "NodeOutput":
        self.outputs[parameter_name] = value
        return self

    def add_outputs(self, outputs: Mapping[str, Any]) -> "NodeOutput":
        self.outputs.update(outputs)
        return self

    def add_state_update(self, key: str, value: Any) -> "NodeOutput":
        self.state_updates[key] = value
        return self

    def add_state_updates(self, state_updates: Mapping[str, Any]) -> "NodeOutput":
        self.state_updates.update(state_updates)
        return self

    def add_metadata(self, key: str, value: Any) -> "NodeOutput":
        self.metadata[key] = value
        return self


def copy_value(value: Any) -> Any:
    """Deep copy of ``value``, or ``value`` itself when it cannot be copied.

    Outputs are opaque, so generators, locks or client-bearing responses are
    shared by reference rather than failing the run.
    """
    try:
        return copy.deepcopy(value)
    except (TypeError, copy.Error) as e:
        logger.debug(f"Sharing uncopyable {type(value).__name__} by reference: {e}")
        return value


def deep_copy_history(history: Mapping[str, Mapping[str, Any]]) -> History:
    """Independent copy of a node id -> values map, value by value."""
    return {
        node_id: {name: copy_value(value) for name, value in values.items()}
        for node_id, values in history.items()
    }
