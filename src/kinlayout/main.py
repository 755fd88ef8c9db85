"""
1) Read people and relationships from a JSON or GEDCOM file.
2) Build the relationship graph.
3) Apply the collapse keys and run the chosen layout strategy.
4) Write the positions as JSON.
5) Optionally render a preview (PNG via matplotlib, DOT via pydot).
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from kinlayout.graph import build_relationship_graph
from kinlayout.layout import STRATEGIES
from kinlayout.parsing import load_records, parse_gedcom
from kinlayout.plotting import plot_layout, to_dot
from kinlayout.trace import logging_trace
from kinlayout.visibility import all_collapse_keys

logger = logging.getLogger("kinlayout")


def read_input(path: Path):
    suffix = path.suffix.lower()
    if suffix == ".json":
        return load_records(path)
    if suffix in (".ged", ".gedcom"):
        return parse_gedcom(path)
    raise ValueError(f"Unsupported input file type: {path.suffix or path.name}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Compute family chart positions.")
    parser.add_argument("input", type=Path, help="People and relationships (.json or .ged).")
    parser.add_argument(
        "--layout",
        choices=sorted(STRATEGIES),
        default="generational",
        help="Layout strategy (default: generational).",
    )
    parser.add_argument(
        "--collapse",
        nargs="*",
        default=[],
        metavar="KEY",
        help='Collapse keys: "<idA>_<idB>" or "<id>_solo".',
    )
    parser.add_argument("--collapse-all", action="store_true", help="Collapse every branch.")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("positions.json"),
        help="Path to output JSON file (default: positions.json).",
    )
    parser.add_argument("--plot", type=Path, help="Also save a PNG preview.")
    parser.add_argument("--dot", type=Path, help="Also save a DOT file with pinned positions.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Trace layout steps.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    print(f"Reading: {args.input}")
    try:
        people, relationships = read_input(args.input)
    except (OSError, ValueError, KeyError) as e:
        print(f"Error: could not read {args.input}: {e}", file=sys.stderr)
        return 1
    print(f"  Found {len(people)} people and {len(relationships)} relationships")

    graph = build_relationship_graph(people, relationships)
    collapsed = set(args.collapse)
    if args.collapse_all:
        collapsed |= all_collapse_keys(graph)
    if collapsed:
        print(f"  Collapsing {len(collapsed)} branches")

    print(f"Running {args.layout} layout...")
    trace = logging_trace(logger) if args.verbose else None
    positions = STRATEGIES[args.layout](people, graph, collapsed, trace=trace)
    print(f"  Positioned {len(positions)} people")

    args.output.write_text(
        json.dumps([p.as_dict() for p in positions], indent=2), encoding="utf-8"
    )
    print(f"Positions saved to {args.output}")

    if args.plot:
        plot_layout(positions, graph, args.plot)
    if args.dot:
        to_dot(positions, graph).write(str(args.dot), format="raw")
        print(f"DOT saved to {args.dot}")

    print("Done!")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
