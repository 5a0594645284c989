"""
Core Program Graph Objects

Defines the data structures the resolution engine works on:
    - ProgramMetadata (opaque pass-through descriptor fields)
    - Program (a tool: requirement bundles in, output parameters out)
    - Edge (producer -> consumer relation)
    - ProgramGraph (arena of programs plus the current edge set)

ARCHITECTURAL RULE:
    Edges reference programs by id only.
    A program that is the child of several producers exists exactly once
    in the arena, so output growth is visible to every parent.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple


@dataclass
class ProgramMetadata:
    """
    Descriptor fields carried through unchanged.

    The resolution engine never reads these. They exist so that loaders
    and presentation layers can round-trip a descriptor without loss.

    Properties:
        commands: Command lines used to run the tool
        comments: Human-readable notes
        filter: Filter expression applied to the tool's output
        regex: Named regular expressions extracting parameters from output
    """

    commands: List[str] = field(default_factory=list)
    comments: List[str] = field(default_factory=list)
    filter: str = ""
    regex: Dict[str, str] = field(default_factory=dict)


@dataclass
class Program:
    """
    A tool descriptor in the capability graph.

    Properties:
        id:
            Unique program name (e.g. "nmap", "subfinder")

        requirement_sets:
            Alternative input bundles. Each bundle must be present in full;
            any one bundle is enough (disjunction of conjunctions).
            An empty list means the program needs nothing.

        outputs:
            Parameters the program can produce. Grows during propagation,
            never shrinks.

        metadata:
            Opaque descriptor fields (see ProgramMetadata)

        source_only:
            Never treated as a consumer. Used for the virtual root inserted
            by root projection.

    Example:
        Program(
            id="subfinder",
            requirement_sets=[frozenset({"domain"})],
            outputs={"subdomain"},
        )
    """

    id: str
    requirement_sets: List[FrozenSet[str]] = field(default_factory=list)
    outputs: Set[str] = field(default_factory=set)
    metadata: ProgramMetadata = field(default_factory=ProgramMetadata)
    source_only: bool = False
    initial_outputs: FrozenSet[str] = field(default=frozenset(), init=False)

    def __post_init__(self) -> None:
        self.requirement_sets = [frozenset(bundle) for bundle in self.requirement_sets]
        self.outputs = set(self.outputs)
        self.initial_outputs = frozenset(self.outputs)

    @property
    def inherited_outputs(self) -> FrozenSet[str]:
        """Outputs gained through propagation rather than declared."""
        return frozenset(self.outputs - self.initial_outputs)

    def required_parameters(self) -> Set[str]:
        """Every parameter named in any requirement bundle."""
        params: Set[str] = set()
        for bundle in self.requirement_sets:
            params.update(bundle)
        return params


@dataclass(frozen=True)
class Edge:
    """
    Directed producer -> consumer relation.

    The label is the set of producer outputs that satisfied the consumer's
    requirements. It is for presentation only.
    """

    producer: str
    consumer: str
    label: FrozenSet[str] = frozenset()


@dataclass
class ProgramGraph:
    """
    Arena of programs keyed by id, plus the edge set keyed by id pair.

    INVARIANTS:
        - Program ids are unique
        - No edge has producer == consumer
        - Every edge endpoint exists in programs
    """

    programs: Dict[str, Program] = field(default_factory=dict)
    edges: Dict[Tuple[str, str], Edge] = field(default_factory=dict)

    def add_program(self, program: Program) -> None:
        if program.id in self.programs:
            raise ValueError(f"Duplicate program id: {program.id!r}")
        self.programs[program.id] = program

    def get_program(self, program_id: str) -> Optional[Program]:
        """
        Retrieve a program by id.

        Returns:
            Program object or None if not found
        """
        return self.programs.get(program_id)

    def has_edge(self, producer: str, consumer: str) -> bool:
        return (producer, consumer) in self.edges

    def children(self, program_id: str) -> List[str]:
        """Consumer ids fed by the given producer, sorted."""
        return [c for c in self.sorted_ids() if (program_id, c) in self.edges]

    def parents(self, program_id: str) -> List[str]:
        """Producer ids feeding the given consumer, sorted."""
        return [p for p in self.sorted_ids() if (p, program_id) in self.edges]

    def sorted_ids(self) -> List[str]:
        return sorted(self.programs)

    def sorted_edges(self) -> List[Edge]:
        return [self.edges[key] for key in sorted(self.edges)]

    def parameter_universe(self) -> Set[str]:
        """Union of every parameter any program requires or produces."""
        universe: Set[str] = set()
        for program in self.programs.values():
            universe.update(program.outputs)
            universe.update(program.required_parameters())
        return universe

    def subgraph(self, program_ids: Iterable[str]) -> ProgramGraph:
        """
        Restrict the graph to the given ids.

        Programs are shared with this graph, not copied. Only edges whose
        both endpoints are kept survive.
        """
        keep = set(program_ids)
        sub = ProgramGraph()
        for program_id in sorted(keep):
            sub.programs[program_id] = self.programs[program_id]
        for key, edge in self.edges.items():
            if key[0] in keep and key[1] in keep:
                sub.edges[key] = edge
        return sub

    def copy(self) -> ProgramGraph:
        """Deep copy: programs and edges are independent of this graph."""
        return copy.deepcopy(self)
