"""Execution history of one graph run.

The ExecutionContext records, for every enhanced node that completed, the
direct inputs it was given, the outputs it produced and its metadata, plus the
order in which nodes first ran. The compiled graph creates one per invocation
and passes it explicitly through the traversal; nodes only ever see deep
copies of it through their NodeInput.

Re-executing a node (in a loop) overwrites its stored snapshots but keeps its
original position in the execution order.
"""

from typing import Dict, Any, List, Optional
from pydantic import BaseModel, Field

from relaygraph.core.logging import get_logger, LogComponent
from relaygraph.core.graph.io import (
    History,
    NodeInput,
    NodeOutput,
    NodeParameterResult,
    deep_copy_history,
)

logger = get_logger(LogComponent.CONTEXT)


class ExecutionContext(BaseModel):
    """
    Ordered log of per-node inputs, outputs and metadata for a run.

    Attributes:
        execution_order: Node ids in order of first execution
        node_input_history: Direct inputs recorded per node id
        node_output_history: Outputs recorded per node id
        node_metadata: Metadata recorded per node id
        current_step: Number of recorded executions, re-executions included
    """
    execution_order: List[str] = Field(default_factory=list)
    node_input_history: History = Field(default_factory=dict)
    node_output_history: History = Field(default_factory=dict)
    node_metadata: History = Field(default_factory=dict)
    current_step: int = Field(default=0)

    class Config:
        arbitrary_types_allowed = True

    def create_node_input(self, node_id: str, direct_inputs: Dict[str, Any]) -> NodeInput:
        """Build the NodeInput for ``node_id``.

        The history maps are deep-copied, so later recordings never change an
        input that was already handed to a node.
        """
        return NodeInput(
            current_node_id=node_id,
            direct_inputs=dict(direct_inputs),
            node_input_history=deep_copy_history(self.node_input_history),
            node_output_history=deep_copy_history(self.node_output_history),
            execution_order=list(self.execution_order),
        )

    def record_node_execution(
        self,
        node_id: str,
        node_input: NodeInput,
        node_output: NodeOutput
    ) -> None:
        """Store what ``node_id`` consumed and produced and advance the step counter."""
        if node_id not in self.execution_order:
            self.execution_order.append(node_id)

        self.node_input_history[node_id] = dict(node_input.direct_inputs)
        self.node_output_history[node_id] = dict(node_output.outputs)
        self.node_metadata[node_id] = dict(node_output.metadata)
        self.current_step += 1

        logger.debug(
            f"Recorded step {self.current_step} for node '{node_id}': "
            f"outputs={list(node_output.outputs)}"
        )

    def get_node_input_history(self, node_id: str) -> Optional[Dict[str, Any]]:
        inputs = self.node_input_history.get(node_id)
        return dict(inputs) if inputs is not None else None

    def get_node_output_history(self, node_id: str) -> Optional[Dict[str, Any]]:
        outputs = self.node_output_history.get(node_id)
        return dict(outputs) if outputs is not None else None

    def get_node_metadata(self, node_id: str) -> Optional[Dict[str, Any]]:
        metadata = self.node_metadata.get(node_id)
        return dict(metadata) if metadata is not None else None

    def get_execution_order(self) -> List[str]:
        return list(self.execution_order)

    def get_all_node_input_history(self) -> History:
        return deep_copy_history(self.node_input_history)

    def get_all_node_output_history(self) -> History:
        return deep_copy_history(self.node_output_history)

    def get_all_node_metadata(self) -> History:
        return deep_copy_history(self.node_metadata)

    def has_node_been_executed(self, node_id: str) -> bool:
        return node_id in self.execution_order

    def get_latest_output(self, parameter_name: str) -> Optional[NodeParameterResult]:
        """Most recent output named ``parameter_name``, scanning the execution order backward."""
        for node_id in reversed(self.execution_order):
            outputs = self.node_output_history.get(node_id)
            if outputs is not None and parameter_name in outputs:
                return NodeParameterResult(
                    node_id=node_id,
                    parameter_name=parameter_name,
                    value=outputs[parameter_name],
                )
        return None

    def get_all_outputs(self, parameter_name: str) -> List[NodeParameterResult]:
        """Every output named ``parameter_name`` in execution order."""
        return [
            NodeParameterResult(
                node_id=node_id,
                parameter_name=parameter_name,
                value=self.node_output_history[node_id][parameter_name],
            )
            for node_id in self.execution_order
            if parameter_name in self.node_output_history.get(node_id, {})
        ]

    def clear(self) -> None:
        """Forget all recorded history."""
        self.execution_order.clear()
        self.node_input_history.clear()
        self.node_output_history.clear()
        self.node_metadata.clear()
        self.current_step = 0

    def snapshot(self) -> "ExecutionContext":
        """Deep copy of this context, independent of later recordings."""
        return ExecutionContext(
            execution_order=list(self.execution_order),
            node_input_history=deep_copy_history(self.node_input_history),
            node_output_history=deep_copy_history(self.node_output_history),
            node_metadata=deep_copy_history(self.node_metadata),
            current_step=self.current_step,
        )
