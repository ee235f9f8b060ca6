"""Compiled graph execution.

A CompiledGraph runs a frozen StateGraph topology. Each run:
1. Creates a fresh GraphState from the state factory and applies the inputs
2. Creates (or adopts) an ExecutionContext owned by that run
3. Walks from START to END in a loop, one node at a time, awaiting each
   action and merging its updates before routing to the next node

Runs never share state or history, so one compiled graph can serve
concurrent invocations. The only cycle guard is ``max_iterations``.

Example:
    ```python
    compiled = graph.compile(GraphConfig(max_iterations=20))

    final = await compiled.invoke({"input": "hi"})

    async for state in compiled.stream({"input": "hi"}):
        print(state.data)
    ```
"""

import logging
from typing import Any, AsyncIterator, List, Mapping, Optional
from pydantic import BaseModel

from relaygraph.core.errors import ConfigurationError, RunawayExecutionError
from relaygraph.core.logging import LogComponent, get_logger, log_state
from relaygraph.core.graph.actions import maybe_await
from relaygraph.core.graph.base import END, START, StateGraph
from relaygraph.core.graph.config import GraphConfig
from relaygraph.core.graph.context import ExecutionContext
from relaygraph.core.graph.io import NodeOutput
from relaygraph.core.graph.state import GraphState


class TraversalStep(BaseModel):
    """Where a run currently stands.

    Attributes:
        current_node: Id of the node being visited
        state: The run's GraphState
        step_count: Visits made so far, START included
        context: The run's execution history
    """
    current_node: str
    state: GraphState
    step_count: int = 0
    context: ExecutionContext

    class Config:
        arbitrary_types_allowed = True


class CompiledGraph:
    """Executable form of a StateGraph.

    Attributes:
        graph: Frozen copy of the builder's topology
        config: Execution settings
        run_history: Snapshots of finished runs' contexts when
            ``config.collect_history`` is set, oldest first
    """

    def __init__(self, graph: StateGraph, config: Optional[GraphConfig] = None):
        self.graph = graph
        self.config = config or GraphConfig()
        self.run_history: List[ExecutionContext] = []
        self._logger = get_logger(LogComponent.EXECUTOR)

    @property
    def name(self) -> str:
        return self.graph.name

    @property
    def max_iterations(self) -> int:
        return self.config.max_iterations

    @max_iterations.setter
    def max_iterations(self, value: int) -> None:
        """Change the cap. Not meant to be changed while runs are in flight."""
        if value < 1:
            raise ValueError("max_iterations must be at least 1")
        self.config.max_iterations = value

    @property
    def last_context(self) -> Optional[ExecutionContext]:
        """Context snapshot of the most recent finished run, if history is collected."""
        return self.run_history[-1] if self.run_history else None

    def clear_history(self) -> None:
        self.run_history.clear()

    async def invoke(
        self,
        inputs: Optional[Mapping[str, Any]] = None,
        context: Optional[ExecutionContext] = None
    ) -> GraphState:
        """Run the graph to END and return the final state.

        Args:
            inputs: First update applied to the fresh state
            context: Optional context to record into; a new one is used otherwise

        Returns:
            The run's GraphState once END is reached

        Raises:
            ConfigurationError: If a routed-to node id has no action
            RunawayExecutionError: If max_iterations is reached before END
            Exception: Whatever a node or edge action raised
        """
        step = self._start(inputs, context)
        async for _ in self._traverse(step):
            pass
        return step.state

    async def stream(
        self,
        inputs: Optional[Mapping[str, Any]] = None,
        context: Optional[ExecutionContext] = None
    ) -> AsyncIterator[GraphState]:
        """Run the graph, yielding a state snapshot after START and after every node.

        The generator stops when END is reached. On failure it raises at the
        point of fault; snapshots already yielded stay valid.
        """
        step = self._start(inputs, context)
        traversal = self._traverse(step)
        try:
            async for visited in traversal:
                yield visited.state.snapshot()
        finally:
            await traversal.aclose()

    def _start(
        self,
        inputs: Optional[Mapping[str, Any]],
        context: Optional[ExecutionContext]
    ) -> TraversalStep:
        state = GraphState.from_factory(self.graph.state_factory, inputs)
        return TraversalStep(
            current_node=START,
            state=state,
            context=context if context is not None else ExecutionContext(),
        )

    async def _traverse(self, step: TraversalStep) -> AsyncIterator[TraversalStep]:
        """Visit nodes until END, yielding the step after each visit."""
        self._logger.info(f"Starting graph execution: {self.name}")
        try:
            while True:
                if step.step_count >= self.max_iterations:
                    raise RunawayExecutionError(self.max_iterations, step.current_node)
                if step.current_node == END:
                    break

                if step.current_node != START:
                    await self._execute_node(step)
                yield step

                next_node = await self._next_node(step.current_node, step.state)
                self._log_transition(step.current_node, next_node)
                step.current_node = next_node
                step.step_count += 1

            self._logger.info(
                f"Graph execution completed successfully: {self.name} "
                f"({step.step_count} visits)"
            )
        except Exception as e:
            self._logger.error(
                f"Graph execution failed at node {step.current_node}: {e}"
            )
            raise
        finally:
            self._collect(step.context)

    async def _execute_node(self, step: TraversalStep) -> None:
        node_id = step.current_node
        state = step.state
        self._logger.log(self.config.logging.level, f"Executing node: {node_id}")

        enhanced = self.graph.enhanced_nodes.get(node_id)
        if enhanced is not None:
            node_input = step.context.create_node_input(node_id, dict(state.data))
            node_output = await maybe_await(enhanced(state, node_input))
            if not isinstance(node_output, NodeOutput):
                raise TypeError(
                    f"Enhanced node {node_id} returned {type(node_output).__name__}, "
                    "expected NodeOutput"
                )
            step.context.record_node_execution(node_id, node_input, node_output)
            updates = node_output.state_updates
        else:
            action = self.graph.nodes.get(node_id)
            if action is None:
                raise ConfigurationError(node_id)
            updates = await maybe_await(action(state))
            if updates is not None and not isinstance(updates, Mapping):
                raise TypeError(
                    f"Node {node_id} returned {type(updates).__name__}, expected a mapping"
                )

        state.update_state(updates)
        if self.config.logging.show_state_updates and updates:
            self._logger.debug(f"Node {node_id} updates:")
            log_state(self._logger, dict(updates), prefix="  ")

    async def _next_node(self, node_id: str, state: GraphState) -> str:
        """Resolve where to go after ``node_id``; anything unresolved goes to END."""
        if node_id in self.graph.conditional_edges:
            edge_action = self.graph.edge_actions[node_id]
            label = await maybe_await(edge_action(state))
            return self.graph.conditional_edges[node_id].get(label, END)
        return self.graph.edges.get(node_id, END)

    def _log_transition(self, from_node: str, to_node: str) -> None:
        level = logging.INFO if self.config.logging.show_node_transitions else logging.DEBUG
        self._logger.log(level, f"Transitioning {from_node} --> {to_node}")

    def _collect(self, context: ExecutionContext) -> None:
        if not self.config.collect_history:
            return
        try:
            snapshot = context.snapshot()
        except Exception as e:
            # Diagnostics never change the outcome of a run
            self._logger.warning(f"Could not collect run history for {self.name}: {e}")
            return
        self.run_history.append(snapshot)
        overflow = len(self.run_history) - self.config.history_limit
        if overflow > 0:
            del self.run_history[:overflow]
