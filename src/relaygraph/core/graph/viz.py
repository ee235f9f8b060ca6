"""Graph visualization tools."""

import re
from typing import List, Union

from relaygraph.core.graph.base import END, START, StateGraph
from relaygraph.core.graph.compiled import CompiledGraph


def _mermaid_id(node_id: str) -> str:
    return re.sub(r"[^0-9A-Za-z_]", "_", node_id)


def render_mermaid(graph: Union[StateGraph, CompiledGraph]) -> str:
    """Render a graph's topology as a Mermaid flowchart.

    Plain nodes are drawn as boxes, enhanced nodes as rounded boxes, START and
    END as circles. Conditional edges are dotted and labelled.
    """
    if isinstance(graph, CompiledGraph):
        graph = graph.graph

    lines: List[str] = ["flowchart TD"]
    lines.append(f"    {_mermaid_id(START)}((START))")
    lines.append(f"    {_mermaid_id(END)}((END))")
    for node_id in graph.nodes:
        lines.append(f"    {_mermaid_id(node_id)}[\"{node_id}\"]")
    for node_id in graph.enhanced_nodes:
        lines.append(f"    {_mermaid_id(node_id)}(\"{node_id}\")")

    for source, target in graph.edges.items():
        if source in graph.conditional_edges:
            # Conditional routing takes precedence at run time
            continue
        lines.append(f"    {_mermaid_id(source)} --> {_mermaid_id(target)}")

    for source, mapping in graph.conditional_edges.items():
        for label, target in mapping.items():
            lines.append(f"    {_mermaid_id(source)} -.->|{label}| {_mermaid_id(target)}")

    return "\n".join(lines)
