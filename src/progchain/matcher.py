"""
Requirement Matcher — does a set of outputs unlock a program?

A program's requirements are a list of alternative bundles. Every
parameter of a bundle must be present together; any one bundle suffices.

These are pure functions. They never fail and never mutate their inputs.
"""

from __future__ import annotations

from typing import AbstractSet, FrozenSet, List, Sequence


def satisfies(outputs: AbstractSet[str], requirement_sets: Sequence[AbstractSet[str]]) -> bool:
    """
    Check whether `outputs` covers at least one requirement bundle.

    An empty `requirement_sets` means the program requires nothing and is
    always invokable.

    Examples:
        satisfies({"ip"}, [{"ip"}])                  -> True
        satisfies({"ip"}, [{"ip", "port"}])          -> False
        satisfies({"ip"}, [{"domain"}, {"ip"}])      -> True
        satisfies(set(), [])                         -> True
    """
    if not requirement_sets:
        return True
    return any(bundle <= outputs for bundle in requirement_sets)


def satisfied_bundles(
    outputs: AbstractSet[str], requirement_sets: Sequence[AbstractSet[str]]
) -> List[FrozenSet[str]]:
    """Every bundle covered by `outputs`, in declaration order."""
    return [frozenset(bundle) for bundle in requirement_sets if bundle <= outputs]


def edge_label(outputs: AbstractSet[str], requirement_sets: Sequence[AbstractSet[str]]) -> FrozenSet[str]:
    """
    Parameters shown on a producer -> consumer edge.

    The union of the satisfied bundles. When nothing specific was needed
    (no requirements, or only an empty bundle) the whole producer output
    set is used instead.
    """
    label: FrozenSet[str] = frozenset().union(*satisfied_bundles(outputs, requirement_sets))
    if not label:
        return frozenset(outputs)
    return label


__all__ = ["satisfies", "satisfied_bundles", "edge_label"]
