"""
Tests for the Requirement Matcher.

A program is invokable when any one of its requirement bundles is fully
covered by the available outputs.
"""

from progchain.matcher import edge_label, satisfied_bundles, satisfies


def test_single_bundle_subset():
    assert satisfies({"ip", "port"}, [frozenset({"ip"})])


def test_single_bundle_not_covered():
    assert not satisfies({"ip"}, [frozenset({"ip", "port"})])


def test_any_bundle_is_enough():
    reqs = [frozenset({"domain"}), frozenset({"ip"})]
    assert satisfies({"ip"}, reqs)
    assert satisfies({"domain"}, reqs)
    assert not satisfies({"url"}, reqs)


def test_no_requirements_always_invokable():
    assert satisfies(set(), [])
    assert satisfies({"anything"}, [])


def test_empty_bundle_is_always_covered():
    assert satisfies(set(), [frozenset()])


def test_empty_outputs_against_requirements():
    assert not satisfies(set(), [frozenset({"ip"})])


def test_inputs_not_mutated():
    outputs = {"ip"}
    reqs = [frozenset({"ip"})]
    satisfies(outputs, reqs)
    edge_label(outputs, reqs)
    assert outputs == {"ip"}
    assert reqs == [frozenset({"ip"})]


def test_satisfied_bundles_keep_declaration_order():
    reqs = [frozenset({"ip", "port"}), frozenset({"url"}), frozenset({"ip"})]
    assert satisfied_bundles({"ip", "port"}, reqs) == [frozenset({"ip", "port"}), frozenset({"ip"})]


class TestEdgeLabel:
    """Labels shown on producer -> consumer edges."""

    def test_label_is_union_of_satisfied_bundles(self):
        reqs = [frozenset({"ip"}), frozenset({"domain"}), frozenset({"url"})]
        assert edge_label({"ip", "domain", "port"}, reqs) == frozenset({"ip", "domain"})

    def test_label_excludes_unrelated_outputs(self):
        assert edge_label({"ip", "service"}, [frozenset({"ip"})]) == frozenset({"ip"})

    def test_requirement_free_consumer_gets_full_outputs(self):
        assert edge_label({"ip", "port"}, []) == frozenset({"ip", "port"})

    def test_empty_bundle_gets_full_outputs(self):
        assert edge_label({"ip"}, [frozenset()]) == frozenset({"ip"})
