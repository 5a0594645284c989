"""
Graphviz DOT diagram generator for program graphs.

Converts a ProgramGraph into Graphviz DOT text. Turning it into an image
is left to Graphviz itself (`dot -Tsvg graph.dot -o graph.svg`).

Supports two modes:
    - SIMPLE: producer -> consumer edges labelled with the parameters
    - DETAILED: every edge goes through a rectangle node listing the
      parameters, and program nodes show their outputs
"""

from enum import Enum
from typing import List, Optional, Set

from progchain.model import Program, ProgramGraph


_DOT_KEYWORDS = {"node", "edge", "graph", "digraph", "subgraph", "strict"}


class DotMode(Enum):
    """Visualization modes for DOT output."""
    SIMPLE = "simple"
    DETAILED = "detailed"


def _escape_dot_string(s: str) -> str:
    """Escape special characters for DOT labels."""
    if not s:
        return '""'
    s = s.replace('\\', '\\\\')
    s = s.replace('"', '\\"')
    s = s.replace('\n', '\\n')
    return f'"{s}"'


def _escape_dot_id(identifier: str) -> str:
    """Escape/quote an identifier for DOT."""
    if (not identifier or identifier[0].isdigit() or not identifier.replace('_', '').isalnum()
            or identifier.lower() in _DOT_KEYWORDS):
        return _escape_dot_string(identifier)
    return identifier


def _params_label(params) -> str:
    return ", ".join(sorted(params))


def _node_label(program: Program, mode: DotMode) -> str:
    if mode == DotMode.DETAILED and program.outputs:
        return f"{program.id}\n[{_params_label(program.outputs)}]"
    return program.id


def _edge_node_id(producer: str, consumer: str, used_ids: Set[str]) -> str:
    """Id of the rectangle standing for one edge; never reuses a node id."""
    candidate = f"{producer}->{consumer}"
    suffix = 1
    while candidate in used_ids:
        candidate = f"{producer}->{consumer}#{suffix}"
        suffix += 1
    used_ids.add(candidate)
    return candidate


def generate_dot(graph: ProgramGraph, mode: DotMode = DotMode.SIMPLE, root_id: Optional[str] = None) -> str:
    """
    Generate Graphviz DOT for a program graph.

    Args:
        graph: Graph to visualize
        mode: Visualization mode (SIMPLE, DETAILED)
        root_id: Id of the projection root, drawn as an ellipse labelled
            with the seed parameters

    Returns:
        String containing DOT graph definition
    """
    lines: List[str] = []

    lines.append("digraph programs {")
    lines.append("  rankdir=LR;")
    lines.append("  node [shape=box, style=filled, fillcolor=lightblue];")

    # =========================================================================
    # NODES
    # =========================================================================

    for pid in graph.sorted_ids():
        program = graph.programs[pid]
        node_id = _escape_dot_id(pid)
        if pid == root_id:
            label = _params_label(program.outputs) or pid
            lines.append(f"  {node_id} [shape=ellipse, fillcolor=lightgreen, label={_escape_dot_string(label)}];")
        else:
            lines.append(f"  {node_id} [label={_escape_dot_string(_node_label(program, mode))}];")

    # =========================================================================
    # EDGES
    # =========================================================================

    used_ids = set(graph.programs)
    for edge in graph.sorted_edges():
        from_id = _escape_dot_id(edge.producer)
        to_id = _escape_dot_id(edge.consumer)
        label = _escape_dot_string(_params_label(edge.label))

        if mode == DotMode.DETAILED:
            edge_node = _escape_dot_string(_edge_node_id(edge.producer, edge.consumer, used_ids))
            lines.append(f"  {edge_node} [shape=rectangle, fillcolor=white, label={label}];")
            lines.append(f"  {from_id} -> {edge_node};")
            lines.append(f"  {edge_node} -> {to_id};")
        else:
            lines.append(f"  {from_id} -> {to_id} [label={label}];")

    lines.append("}")

    return "\n".join(lines)


def save_dot_file(graph: ProgramGraph, filename: str, mode: DotMode = DotMode.SIMPLE,
                  root_id: Optional[str] = None) -> None:
    """
    Generate DOT and save to file.

    Args:
        graph: Graph to visualize
        filename: Output file path (.dot extension recommended)
        mode: Visualization mode
        root_id: Projection root id, if any
    """
    dot = generate_dot(graph, mode=mode, root_id=root_id)
    with open(filename, 'w', encoding='utf-8') as f:
        f.write(dot)


__all__ = ["DotMode", "generate_dot", "save_dot_file"]
