"""
Root Projection — what can run starting from a given parameter set?

Given a seed parameter set, a virtual producer named ROOT_ID with
outputs = seed and no requirements is added to the programs, propagation
starts from the virtual root alone, and only the part reachable from it is
kept. Programs the seed never reaches pass no outputs on.

The virtual root is source-only: it feeds programs but never inherits
anything back, so its label stays the seed.

An empty seed means "no filter": the full converged graph is returned.
Finding nothing reachable is a normal outcome (ProjectionResult.is_empty),
not an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import AbstractSet, FrozenSet, Iterable, List, Optional

from progchain.model import Program, ProgramGraph
from progchain.resolver import build_graph

logger = logging.getLogger(__name__)

ROOT_ID = "input"


class ProgramNotFoundError(KeyError):
    """Raised when a requested program id is not in the graph."""

    def __init__(self, program_id: str):
        self.program_id = program_id
        super().__init__(program_id)

    def __str__(self) -> str:
        return f"Program {self.program_id!r} does not exist"


@dataclass
class ProjectionResult:
    """
    Outcome of a root projection.

    Properties:
        graph: Reachable subgraph (including the virtual root when seeded)
        seed: The seed the projection was computed for
        root_id: Id of the virtual root, or None for an unfiltered graph
    """

    graph: ProgramGraph
    seed: FrozenSet[str]
    root_id: Optional[str] = None

    @property
    def program_ids(self) -> List[str]:
        """Reachable real program ids, sorted (virtual root excluded)."""
        return [pid for pid in self.graph.sorted_ids() if pid != self.root_id]

    @property
    def is_empty(self) -> bool:
        """True when no program is applicable for the seed."""
        return not self.program_ids


def reachable(graph: ProgramGraph, start_id: str) -> List[str]:
    """
    Depth-first reachability from one program, cycle-safe.

    Every child is visited, children in sorted id order.

    Returns:
        Reachable ids in discovery order, starting with start_id

    Raises:
        ProgramNotFoundError: If start_id is not in the graph
    """
    if start_id not in graph.programs:
        raise ProgramNotFoundError(start_id)

    visited: List[str] = []
    seen = set()
    stack = [start_id]
    while stack:
        node = stack.pop()
        if node in seen:
            continue
        seen.add(node)
        visited.append(node)
        for child in reversed(graph.children(node)):
            if child not in seen:
                stack.append(child)
    return visited


def focus(graph: ProgramGraph, program_id: str) -> ProgramGraph:
    """Subgraph of everything reachable from one named program."""
    return graph.subgraph(reachable(graph, program_id))


def make_root(seed: AbstractSet[str]) -> Program:
    """The virtual producer standing for the user-supplied parameters."""
    return Program(id=ROOT_ID, requirement_sets=[], outputs=set(seed), source_only=True)


def project(programs: Iterable[Program], seed: Optional[AbstractSet[str]] = None) -> ProjectionResult:
    """
    Resolve `programs` and restrict the result to what `seed` can reach.

    Args:
        programs: Program descriptors (left unmodified)
        seed: Initial parameter names; None or empty for the full graph

    Returns:
        ProjectionResult

    Raises:
        ValueError: If a real program is already named ROOT_ID
    """
    seed = frozenset(seed or ())
    programs = list(programs)

    if not seed:
        return ProjectionResult(graph=build_graph(programs), seed=seed)

    if any(program.id == ROOT_ID for program in programs):
        raise ValueError(f"Program id {ROOT_ID!r} is reserved for the projection root")

    graph = build_graph([make_root(seed)] + programs, seeds=[ROOT_ID])
    sub = focus(graph, ROOT_ID)
    result = ProjectionResult(graph=sub, seed=seed, root_id=ROOT_ID)

    if result.is_empty:
        logger.info("No applicable programs for seed %s", sorted(seed))
    else:
        logger.info("Seed %s reaches %d program(s)", sorted(seed), len(result.program_ids))
    return result


__all__ = [
    "ROOT_ID",
    "ProgramNotFoundError",
    "ProjectionResult",
    "reachable",
    "focus",
    "make_root",
    "project",
]
