"""Command-line entry point: load templates, resolve the graph, write it out."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from progchain import __version__
from progchain.analyzer import GraphReport, analyze_graph
from progchain.backends.dot_generator import DotMode, generate_dot
from progchain.config import OUTPUT_FORMATS, load_settings
from progchain.loader import LoaderError, load_programs
from progchain.projection import ProgramNotFoundError, focus, project
from progchain.resolver import PropagationBoundExceeded
from progchain.serialization import graph_to_json, graph_to_yaml

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_NO_MATCH = 2
EXIT_INTERNAL = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="progchain",
        description="Chain tool descriptors into a capability graph.",
    )
    parser.add_argument("templates_dir", nargs="?", default=None,
                        help="Directory of program templates (default: ./templates/)")
    parser.add_argument("-p", "--program", default=None,
                        help="Only show this program and what it can feed")
    parser.add_argument("-s", "--seed", nargs="+", default=None, metavar="PARAM",
                        help="Starting parameters; keep only programs reachable from them")
    parser.add_argument("-m", "--mode", choices=[m.value for m in DotMode], default=None,
                        help="DOT layout")
    parser.add_argument("-f", "--format", dest="output_format", choices=OUTPUT_FORMATS, default=None,
                        help="Output format")
    parser.add_argument("-o", "--output", default=None,
                        help="Output file, '-' for stdout (default: ./graph.dot)")
    parser.add_argument("-c", "--config", default=None, help="YAML settings file")
    parser.add_argument("--report", action="store_true", help="Print an analysis report")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def format_report(report: GraphReport) -> str:
    lines = [
        f"Programs:   {report.total_programs}",
        f"Edges:      {report.total_edges}",
        f"Parameters: {report.total_parameters}",
        f"Roots:      {', '.join(report.root_producers) or '-'}",
        f"Sinks:      {', '.join(report.sinks) or '-'}",
        f"Cycles:     {'YES' if report.has_cycles else 'NO'}",
    ]
    for warning in report.warnings:
        lines.append(f"WARNING: {warning}")
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings(args.config).merged(
            templates_dir=args.templates_dir,
            output=args.output,
            mode=args.mode,
            output_format=args.output_format,
            seed=args.seed,
        )
        programs = load_programs(settings.templates_dir)
    except (LoaderError, FileNotFoundError, ValueError) as e:
        logger.error("%s", e)
        return EXIT_INVALID

    try:
        result = project(programs, seed=set(settings.seed))
    except PropagationBoundExceeded as e:
        logger.critical("Internal error: %s", e)
        return EXIT_INTERNAL
    except ValueError as e:
        logger.error("%s", e)
        return EXIT_INVALID

    if result.is_empty:
        print(f"No applicable programs for parameters: {', '.join(sorted(result.seed))}")
        return EXIT_NO_MATCH

    graph = result.graph
    root_id = result.root_id
    if args.program:
        if args.program not in graph.programs and any(p.id == args.program for p in programs):
            print(f"Program {args.program!r} is not reachable from seed: {', '.join(sorted(result.seed))}")
            return EXIT_NO_MATCH
        try:
            graph = focus(graph, args.program)
        except ProgramNotFoundError as e:
            logger.error("%s", e)
            return EXIT_INVALID
        if root_id not in graph.programs:
            root_id = None

    if settings.output_format == "json":
        text = graph_to_json(graph)
    elif settings.output_format == "yaml":
        text = graph_to_yaml(graph)
    else:
        text = generate_dot(graph, mode=settings.dot_mode, root_id=root_id)

    if settings.output == "-":
        print(text)
    else:
        try:
            with open(settings.output, "w", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            logger.error("Cannot write %s: %s", settings.output, e)
            return EXIT_INVALID
        print(f"Graph written to: {settings.output}")

    if args.report:
        print(format_report(analyze_graph(graph)))

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
