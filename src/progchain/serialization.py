"""
Serialization helpers for progchain objects (Program, Edge, ProgramGraph).

Provides lossless JSON/YAML round-trip via intermediate dict representation.
Sets are written as sorted lists so output is stable across runs.
"""
from __future__ import annotations

import json
from typing import Any, Dict

import yaml

from progchain.model import Edge, Program, ProgramGraph, ProgramMetadata


def metadata_to_dict(m: ProgramMetadata) -> Dict[str, Any]:
    return {
        "commands": list(m.commands),
        "comments": list(m.comments),
        "filter": m.filter,
        "regex": dict(m.regex),
    }


def metadata_from_dict(d: Dict[str, Any] | None) -> ProgramMetadata:
    if d is None:
        return ProgramMetadata()
    return ProgramMetadata(
        commands=list(d.get("commands", [])),
        comments=list(d.get("comments", [])),
        filter=d.get("filter", ""),
        regex=dict(d.get("regex", {})),
    )


def node_to_dict(p: Program) -> Dict[str, Any]:
    return {
        "id": p.id,
        "requirement_sets": [sorted(bundle) for bundle in p.requirement_sets],
        "outputs": sorted(p.outputs),
        "initial_outputs": sorted(p.initial_outputs),
        "source_only": p.source_only,
        "metadata": metadata_to_dict(p.metadata),
    }


def node_from_dict(d: Dict[str, Any]) -> Program:
    p = Program(
        id=d["id"],
        requirement_sets=[frozenset(bundle) for bundle in d.get("requirement_sets", [])],
        outputs=set(d.get("outputs", [])),
        metadata=metadata_from_dict(d.get("metadata")),
        source_only=d.get("source_only", False),
    )
    if "initial_outputs" in d:
        p.initial_outputs = frozenset(d["initial_outputs"])
    return p


def edge_to_dict(e: Edge) -> Dict[str, Any]:
    return {"producer": e.producer, "consumer": e.consumer, "label": sorted(e.label)}


def edge_from_dict(d: Dict[str, Any]) -> Edge:
    return Edge(producer=d["producer"], consumer=d["consumer"], label=frozenset(d.get("label", [])))


def graph_to_dict(g: ProgramGraph) -> Dict[str, Any]:
    return {
        "programs": [node_to_dict(g.programs[pid]) for pid in g.sorted_ids()],
        "edges": [edge_to_dict(e) for e in g.sorted_edges()],
    }


def graph_from_dict(d: Dict[str, Any]) -> ProgramGraph:
    g = ProgramGraph()
    for pd in d.get("programs", []):
        g.add_program(node_from_dict(pd))
    for ed in d.get("edges", []):
        edge = edge_from_dict(ed)
        if edge.producer not in g.programs or edge.consumer not in g.programs:
            raise ValueError(f"Edge {edge.producer!r} -> {edge.consumer!r} references an unknown program")
        g.edges[(edge.producer, edge.consumer)] = edge
    return g


def graph_to_json(g: ProgramGraph) -> str:
    return json.dumps(graph_to_dict(g), sort_keys=True)


def graph_from_json(s: str) -> ProgramGraph:
    d = json.loads(s)
    return graph_from_dict(d)


def graph_to_yaml(g: ProgramGraph) -> str:
    return yaml.safe_dump(graph_to_dict(g))


def graph_from_yaml(s: str) -> ProgramGraph:
    d = yaml.safe_load(s)
    return graph_from_dict(d)
