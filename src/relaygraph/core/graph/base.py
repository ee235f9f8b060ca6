"""Graph Base Classes

This module defines the builder side of the graph system. A StateGraph:
1. Registers named nodes (plain or enhanced async actions)
2. Connects them with unconditional or conditional edges
3. Compiles into a CompiledGraph that executes runs from START to END

Example:
    ```python
    async def llm(state):
        return {"output": state.value("input").upper()}

    graph = StateGraph(
        name="qa",
        state_factory=lambda: {"input": ReplaceStrategy(), "output": ReplaceStrategy()},
    )
    graph.add_node("llm", llm)
    graph.add_edge(START, "llm")
    graph.add_edge("llm", END)

    state = await graph.compile().invoke({"input": "hi"})
    ```
"""

from typing import Dict, Any, Callable, List, Mapping, Optional, TYPE_CHECKING
import logging
from pydantic import BaseModel, Field, PrivateAttr

from relaygraph.core.logging import LogComponent, get_logger
from relaygraph.core.graph.config import GraphConfig
from relaygraph.core.graph.state import StateFactory

if TYPE_CHECKING:
    from relaygraph.core.graph.compiled import CompiledGraph

START = "__START__"
END = "__END__"


class StateGraph(BaseModel):
    """A directed graph of async actions over a shared GraphState.

    Registering a node id that already exists replaces the earlier action,
    whether it was plain or enhanced: the last registration wins. Edges are
    not checked against registered nodes; a dangling edge only fails when a
    run reaches it.

    Attributes:
        name: Human-readable graph name used in logs
        state_factory: Returns the key -> KeyStrategy map for each fresh state
        nodes: Plain node actions by id
        enhanced_nodes: Enhanced node actions by id
        edges: Unconditional destination by source id
        conditional_edges: Label -> destination map by source id
        edge_actions: Decision function by source id
    """
    name: str = Field(default="graph")
    state_factory: Optional[Callable[[], Dict[str, Any]]] = Field(default=None)
    nodes: Dict[str, Callable[..., Any]] = Field(default_factory=dict)
    enhanced_nodes: Dict[str, Callable[..., Any]] = Field(default_factory=dict)
    edges: Dict[str, str] = Field(default_factory=dict)
    conditional_edges: Dict[str, Dict[str, str]] = Field(default_factory=dict)
    edge_actions: Dict[str, Callable[..., Any]] = Field(default_factory=dict)
    _logger: logging.Logger = PrivateAttr()

    class Config:
        arbitrary_types_allowed = True

    def __init__(
        self,
        name: str = "graph",
        state_factory: Optional[StateFactory] = None,
        **data
    ):
        super().__init__(name=name, state_factory=state_factory, **data)
        self._logger = get_logger(LogComponent.GRAPH)

    def add_node(self, node_id: str, action: Callable[..., Any]) -> "StateGraph":
        """Register a plain node action.

        Args:
            node_id: Unique node id
            action: ``async (state) -> Mapping`` returning the keys to merge

        Raises:
            ValueError: If node_id is empty
            TypeError: If action is not callable
        """
        self._check_node(node_id, action)
        self.enhanced_nodes.pop(node_id, None)
        self.nodes[node_id] = action
        self._logger.info(f"Added node: {node_id}")
        return self

    def add_enhanced_node(self, node_id: str, action: Callable[..., Any]) -> "StateGraph":
        """Register an enhanced node action.

        Args:
            node_id: Unique node id
            action: ``async (state, node_input) -> NodeOutput``

        Raises:
            ValueError: If node_id is empty
            TypeError: If action is not callable
        """
        self._check_node(node_id, action)
        self.nodes.pop(node_id, None)
        self.enhanced_nodes[node_id] = action
        self._logger.info(f"Added enhanced node: {node_id}")
        return self

    def add_edge(self, from_node_id: str, to_node_id: str) -> "StateGraph":
        """Add an unconditional edge, replacing any earlier edge from the same source."""
        if not from_node_id or not to_node_id:
            raise ValueError("Edges need both a source and a target id")
        self.edges[from_node_id] = to_node_id
        self._logger.info(f"Added edge: {from_node_id} --> {to_node_id}")
        return self

    def add_conditional_edges(
        self,
        from_node_id: str,
        edge_action: Callable[..., Any],
        mapping: Mapping[str, str]
    ) -> "StateGraph":
        """Route from a node by the label its decision function returns.

        Args:
            from_node_id: Source node id
            edge_action: ``async (state) -> str`` producing a label
            mapping: Label -> destination node id; unmatched labels go to END

        Raises:
            TypeError: If edge_action is not callable or mapping is not a mapping
        """
        if not callable(edge_action):
            raise TypeError(f"Edge action for {from_node_id} must be callable")
        if not isinstance(mapping, Mapping):
            raise TypeError(f"Conditional mapping for {from_node_id} must be a mapping")
        self.conditional_edges[from_node_id] = dict(mapping)
        self.edge_actions[from_node_id] = edge_action
        self._logger.info(
            f"Added conditional edges: {from_node_id} --[{', '.join(mapping)}]--> "
            f"{sorted(set(mapping.values()))}"
        )
        return self

    def has_node(self, node_id: str) -> bool:
        return node_id in self.nodes or node_id in self.enhanced_nodes

    def validate(self) -> List[str]:
        """Check the topology without running it.

        ``compile`` never calls this; it is an opt-in lint for callers.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors: List[str] = []

        if START not in self.edges and START not in self.conditional_edges:
            errors.append(f"Graph has no edge from {START}")

        for source, target in self.edges.items():
            if source != START and not self.has_node(source):
                errors.append(f"Edge source is not a node: {source}")
            if target != END and not self.has_node(target):
                errors.append(f"Edge {source} references unknown node: {target}")

        for source, mapping in self.conditional_edges.items():
            if source != START and not self.has_node(source):
                errors.append(f"Conditional edge source is not a node: {source}")
            for label, target in mapping.items():
                if target != END and not self.has_node(target):
                    errors.append(
                        f"Conditional edge {source} [{label}] references unknown node: {target}"
                    )

        return errors

    def compile(
        self,
        config: Optional[GraphConfig] = None,
        max_iterations: Optional[int] = None
    ) -> "CompiledGraph":
        """Freeze the current topology into an executable graph.

        Args:
            config: Execution settings, defaults to GraphConfig()
            max_iterations: Shortcut overriding ``config.max_iterations``

        Returns:
            A CompiledGraph unaffected by later changes to this builder

        Raises:
            ValueError: If max_iterations is below 1
        """
        from relaygraph.core.graph.compiled import CompiledGraph

        config = config.model_copy(deep=True) if config else GraphConfig()
        if max_iterations is not None:
            if max_iterations < 1:
                raise ValueError("max_iterations must be at least 1")
            config.max_iterations = max_iterations

        frozen = StateGraph(
            name=self.name,
            state_factory=self.state_factory,
            nodes=dict(self.nodes),
            enhanced_nodes=dict(self.enhanced_nodes),
            edges=dict(self.edges),
            conditional_edges={k: dict(v) for k, v in self.conditional_edges.items()},
            edge_actions=dict(self.edge_actions),
        )
        self._logger.info(
            f"Compiled graph '{self.name}' with "
            f"{len(self.nodes) + len(self.enhanced_nodes)} nodes"
        )
        return CompiledGraph(frozen, config)

    def _check_node(self, node_id: str, action: Callable[..., Any]) -> None:
        if not node_id:
            raise ValueError("Node must have an id set")
        if not callable(action):
            raise TypeError(f"Action for node {node_id} must be callable")
