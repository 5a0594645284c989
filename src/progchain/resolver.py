"""
Resolver — Edge Builder and Output Propagator.

Turns a collection of Programs into a converged ProgramGraph:

    1. Edge Builder: for every ordered pair (mother, child) of distinct
       programs, add mother -> child when mother's outputs satisfy one of
       child's requirement bundles.
    2. Output Propagator: a consumer inherits its producers' outputs.
       Whenever a consumer's outputs grow, only the edges leaving that
       consumer are re-evaluated and the consumer is queued for the next
       round. Rounds repeat until no program is dirty.

Mutually satisfying pairs keep BOTH directions. The edge relation is then
monotone in the outputs, so the fixed point is unique and does not depend
on load order or on iteration order.

Termination bound:
    Outputs only grow and every parameter comes from a finite universe, so
    the number of growth events is at most n * |universe|. Going past that
    raises PropagationBoundExceeded: it means the monotone update is broken,
    never that the input was merely large.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Callable, FrozenSet, Iterable, Optional

from progchain.matcher import edge_label, satisfies
from progchain.model import Edge, Program, ProgramGraph

logger = logging.getLogger(__name__)

StepCallback = Callable[[str, FrozenSet[str]], None]


class PropagationBoundExceeded(RuntimeError):
    """Raised when output propagation grows more often than the universe allows."""

    def __init__(self, growth_events: int, bound: int, program_id: str):
        self.growth_events = growth_events
        self.bound = bound
        self.program_id = program_id
        super().__init__(
            f"Output propagation exceeded its bound ({growth_events} > {bound} growth events, "
            f"last at {program_id!r}); the monotone update invariant is broken"
        )


@dataclass
class PropagationStats:
    """Summary of one propagation run."""
    rounds: int = 0
    growth_events: int = 0
    bound: int = 0
    edges: int = 0


def edges_from(graph: ProgramGraph, producer_id: str) -> int:
    """
    Re-evaluate every edge leaving one producer.

    Adds edges the producer now satisfies, refreshes their labels and drops
    edges it no longer satisfies. Source-only programs are never consumers.

    Returns:
        Number of edges that did not exist before the call
    """
    producer = graph.programs[producer_id]
    added = 0
    for child_id in graph.sorted_ids():
        if child_id == producer_id:
            continue
        child = graph.programs[child_id]
        key = (producer_id, child_id)
        if not child.source_only and satisfies(producer.outputs, child.requirement_sets):
            if key not in graph.edges:
                added += 1
            graph.edges[key] = Edge(
                producer=producer_id,
                consumer=child_id,
                label=edge_label(producer.outputs, child.requirement_sets),
            )
        else:
            graph.edges.pop(key, None)
    return added


def build_edges(graph: ProgramGraph) -> ProgramGraph:
    """Rebuild the full edge set from the current outputs (O(n^2 * m))."""
    graph.edges.clear()
    for producer_id in graph.sorted_ids():
        edges_from(graph, producer_id)
    logger.debug("Built %d edge(s) over %d program(s)", len(graph.edges), len(graph.programs))
    return graph


def propagate(graph: ProgramGraph, on_step: Optional[StepCallback] = None,
              seeds: Optional[Iterable[str]] = None) -> PropagationStats:
    """
    Run output propagation on `graph` until no program changes.

    The edge set must already be built (see build_edges). Without seeds the
    first round visits every program. With seeds only the seed programs
    start active; a program becomes active the first time an active
    producer feeds it, so programs the seeds never reach pass nothing on.
    Later rounds visit only programs that grew or were just activated.

    Args:
        graph: Graph to update in place
        on_step: Called as on_step(program_id, outputs) after every growth
        seeds: Ids of the programs propagation starts from; None for all

    Returns:
        PropagationStats for the run

    Raises:
        ValueError: If a seed id is not in the graph
        PropagationBoundExceeded: If growth events exceed n * |universe|
    """
    stats = PropagationStats(bound=len(graph.programs) * len(graph.parameter_universe()))
    if seeds is None:
        dirty = set(graph.programs)
    else:
        dirty = set(seeds)
        unknown = dirty - set(graph.programs)
        if unknown:
            raise ValueError(f"Unknown seed programs: {sorted(unknown)}")
    active = set(dirty)

    while dirty:
        stats.rounds += 1
        current = sorted(dirty)
        dirty = set()
        logger.debug("Propagation round %d: %d dirty program(s)", stats.rounds, len(current))

        for producer_id in current:
            producer = graph.programs[producer_id]
            for child_id in graph.children(producer_id):
                if child_id not in active:
                    active.add(child_id)
                    dirty.add(child_id)

                child = graph.programs[child_id]
                missing = producer.outputs - child.outputs
                if not missing:
                    continue

                child.outputs |= missing
                stats.growth_events += 1
                if stats.growth_events > stats.bound:
                    raise PropagationBoundExceeded(stats.growth_events, stats.bound, child_id)

                logger.debug("%s inherits %s from %s", child_id, sorted(missing), producer_id)
                if on_step is not None:
                    on_step(child_id, frozenset(child.outputs))

                edges_from(graph, child_id)
                dirty.add(child_id)

    stats.edges = len(graph.edges)
    logger.info(
        "Propagation converged after %d round(s): %d growth event(s), %d edge(s)",
        stats.rounds, stats.growth_events, stats.edges,
    )
    return stats


def build_graph(programs: Iterable[Program], on_step: Optional[StepCallback] = None,
                seeds: Optional[Iterable[str]] = None) -> ProgramGraph:
    """
    Build the converged capability graph for a collection of programs.

    The given Program objects are copied into a fresh arena and are left
    untouched. `seeds` restricts propagation to what the seed programs
    reach (see propagate).

    Raises:
        ValueError: On duplicate program ids or unknown seeds
        PropagationBoundExceeded: If propagation fails to converge
    """
    graph = ProgramGraph()
    for program in programs:
        graph.add_program(copy.deepcopy(program))

    build_edges(graph)
    propagate(graph, on_step=on_step, seeds=seeds)
    return graph


__all__ = [
    "PropagationBoundExceeded",
    "PropagationStats",
    "edges_from",
    "build_edges",
    "propagate",
    "build_graph",
]
