#!/usr/bin/env python3
"""
Demo: Resolve the example recon catalog, project it from a seed and
write DOT diagrams in both modes.
"""

from progchain.analyzer import analyze_graph
from progchain.backends import DotMode, save_dot_file
from progchain.examples import build_example_programs
from progchain.projection import project


def print_report(report):
    """Pretty-print a GraphReport."""
    print(f"  Programs:       {report.total_programs}")
    print(f"  Edges:          {report.total_edges}")
    print(f"  Parameters:     {report.total_parameters}")
    print(f"  Orphans:        {report.orphans}")
    print(f"  Has Cycles:     {'YES' if report.has_cycles else 'NO'}")
    for i, warning in enumerate(report.warnings, 1):
        print(f"  {i}. {warning}")


def main():
    programs = build_example_programs()

    print("=" * 80)
    print("RESOLVER DEMO")
    print("=" * 80)

    for seed in (set(), {"ip"}, {"url"}, {"password"}):
        result = project(programs, seed=seed)
        name = "_".join(sorted(seed)) or "full"

        print(f"\nSEED: {sorted(seed) or '(none)'}")
        print("-" * 80)
        if result.is_empty:
            print("  No applicable programs")
            continue

        print(f"  Reachable: {', '.join(result.program_ids)}")
        print_report(analyze_graph(result.graph))

        for mode in (DotMode.SIMPLE, DotMode.DETAILED):
            filename = f"graph_{name}_{mode.value}.dot"
            save_dot_file(result.graph, filename, mode=mode, root_id=result.root_id)
            print(f"  Saved to: {filename}")

    print("\n" + "=" * 80)
    print("To visualize the diagrams:")
    print("  dot -Tsvg graph_full_simple.dot -o graph.svg")
    print("=" * 80)


if __name__ == "__main__":
    main()
