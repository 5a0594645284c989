"""
Graph Analyzer — diagnostics and inventory of a resolved ProgramGraph.

This module provides lightweight analysis of a converged graph:
    - Root producers, sinks and isolated programs
    - Parameters nobody produces / outputs nobody consumes
    - Cycles
    - Degree metrics

IMPORTANT: This is read-only. It does NOT modify the graph.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from progchain.model import ProgramGraph


def _find_cycle_dfs(graph: Dict[str, List[str]], start: str, visited: Set[str],
                    rec_stack: Set[str], path: List[str]) -> Optional[List[str]]:
    """DFS to find a cycle starting from a node."""
    visited.add(start)
    rec_stack.add(start)
    path.append(start)

    for neighbor in graph.get(start, []):
        if neighbor not in visited:
            cycle = _find_cycle_dfs(graph, neighbor, visited, rec_stack, path[:])
            if cycle:
                return cycle
        elif neighbor in rec_stack:
            cycle_start_idx = path.index(neighbor)
            return path[cycle_start_idx:] + [neighbor]

    rec_stack.remove(start)
    return None


@dataclass
class GraphReport:
    """Analysis report for a resolved program graph."""

    total_programs: int = 0
    total_edges: int = 0
    total_parameters: int = 0

    # Program roles
    root_producers: List[str] = field(default_factory=list)   # No requirements
    sinks: List[str] = field(default_factory=list)            # No outgoing edges
    orphans: List[str] = field(default_factory=list)          # No incoming edges
    isolated: List[str] = field(default_factory=list)         # No edges at all

    # Parameters
    unsatisfiable_parameters: Set[str] = field(default_factory=set)  # Required, never produced
    unconsumed_outputs: Set[str] = field(default_factory=set)        # Produced, never required

    # Graph properties
    has_cycles: bool = False
    cycle_example: Optional[List[str]] = None
    max_out_degree: int = 0
    avg_out_degree: float = 0.0

    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)


def analyze_graph(graph: ProgramGraph) -> GraphReport:
    """
    Perform analysis of a resolved ProgramGraph.

    Returns a GraphReport with metrics and warnings.
    """
    report = GraphReport()
    report.total_programs = len(graph.programs)
    report.total_edges = len(graph.edges)
    report.total_parameters = len(graph.parameter_universe())

    outgoing: Dict[str, List[str]] = {pid: graph.children(pid) for pid in graph.sorted_ids()}
    has_incoming = {consumer for (_, consumer) in graph.edges}

    # Program roles
    for pid in graph.sorted_ids():
        program = graph.programs[pid]
        if not program.requirement_sets:
            report.root_producers.append(pid)
        if not outgoing[pid]:
            report.sinks.append(pid)
        if pid not in has_incoming:
            report.orphans.append(pid)
        if not outgoing[pid] and pid not in has_incoming:
            report.isolated.append(pid)

    # Parameters, measured against declared outputs so inheritance does not hide gaps
    required: Set[str] = set()
    declared: Set[str] = set()
    for program in graph.programs.values():
        required.update(program.required_parameters())
        declared.update(program.initial_outputs)
    report.unsatisfiable_parameters = required - declared
    report.unconsumed_outputs = declared - required

    # Cycle detection
    visited: Set[str] = set()
    for pid in graph.sorted_ids():
        if pid not in visited:
            cycle = _find_cycle_dfs(outgoing, pid, visited, set(), [])
            if cycle:
                report.has_cycles = True
                report.cycle_example = cycle
                break

    degrees = [len(children) for children in outgoing.values()]
    if degrees:
        report.max_out_degree = max(degrees)
        report.avg_out_degree = sum(degrees) / len(degrees)

    # Warnings
    if report.unsatisfiable_parameters:
        report.add_warning(
            f"Parameters required but never produced: {', '.join(sorted(report.unsatisfiable_parameters))}"
        )
    if report.isolated:
        report.add_warning(f"Isolated programs: {', '.join(report.isolated)}")
    if report.has_cycles:
        report.add_warning(f"Cycle detected: {' -> '.join(report.cycle_example)}")

    return report
