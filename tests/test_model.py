"""
Tests for the core model objects (Program, Edge, ProgramGraph).
"""

import pytest

from progchain.model import Edge, Program, ProgramGraph, ProgramMetadata


def _graph(*programs):
    g = ProgramGraph()
    for p in programs:
        g.add_program(p)
    return g


class TestProgram:
    def test_requirement_sets_become_frozensets(self):
        p = Program(id="nmap", requirement_sets=[{"ip"}, ["subdomain"]], outputs=["port"])
        assert p.requirement_sets == [frozenset({"ip"}), frozenset({"subdomain"})]
        assert p.outputs == {"port"}

    def test_initial_outputs_frozen_at_creation(self):
        p = Program(id="dnsx", outputs={"ip"})
        p.outputs.add("domain")
        assert p.initial_outputs == frozenset({"ip"})
        assert p.inherited_outputs == frozenset({"domain"})

    def test_required_parameters(self):
        p = Program(id="httpx", requirement_sets=[{"ip", "port"}, {"subdomain"}])
        assert p.required_parameters() == {"ip", "port", "subdomain"}

    def test_defaults(self):
        p = Program(id="x")
        assert p.requirement_sets == []
        assert p.outputs == set()
        assert p.metadata == ProgramMetadata()
        assert not p.source_only


class TestProgramGraph:
    def test_duplicate_id_rejected(self):
        g = _graph(Program(id="a"))
        with pytest.raises(ValueError, match="Duplicate"):
            g.add_program(Program(id="a"))

    def test_get_program(self):
        a = Program(id="a")
        g = _graph(a)
        assert g.get_program("a") is a
        assert g.get_program("missing") is None

    def test_children_and_parents_sorted(self):
        g = _graph(Program(id="a"), Program(id="b"), Program(id="c"))
        g.edges[("a", "c")] = Edge("a", "c")
        g.edges[("a", "b")] = Edge("a", "b")
        g.edges[("c", "b")] = Edge("c", "b")
        assert g.children("a") == ["b", "c"]
        assert g.parents("b") == ["a", "c"]
        assert g.children("b") == []
        assert g.has_edge("a", "b")
        assert not g.has_edge("b", "a")

    def test_parameter_universe(self):
        g = _graph(
            Program(id="a", requirement_sets=[{"domain"}], outputs={"ip"}),
            Program(id="b", requirement_sets=[{"ip", "port"}], outputs={"url"}),
        )
        assert g.parameter_universe() == {"domain", "ip", "port", "url"}

    def test_subgraph_keeps_internal_edges_only(self):
        g = _graph(Program(id="a"), Program(id="b"), Program(id="c"))
        g.edges[("a", "b")] = Edge("a", "b")
        g.edges[("b", "c")] = Edge("b", "c")
        sub = g.subgraph(["a", "b"])
        assert sub.sorted_ids() == ["a", "b"]
        assert list(sub.edges) == [("a", "b")]
        # Programs are shared, not copied
        assert sub.programs["a"] is g.programs["a"]

    def test_copy_is_independent(self):
        g = _graph(Program(id="a", outputs={"ip"}))
        clone = g.copy()
        clone.programs["a"].outputs.add("domain")
        assert g.programs["a"].outputs == {"ip"}
        assert clone.programs["a"].initial_outputs == frozenset({"ip"})

    def test_sorted_edges(self):
        g = _graph(Program(id="a"), Program(id="b"))
        g.edges[("b", "a")] = Edge("b", "a")
        g.edges[("a", "b")] = Edge("a", "b")
        assert [(e.producer, e.consumer) for e in g.sorted_edges()] == [("a", "b"), ("b", "a")]
