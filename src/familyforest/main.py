"""
1) Load people and relations from a JSON export or a SQLite snapshot.
2) Index them with networkx, dropping broken or duplicate relations.
3) Validate the data for cycles, impossible ages and date ordering.
4) Build the forest of person/couple nodes and position it.
5) Write the layout as JSON, and optionally as DOT or a plotted image.
"""

import argparse
import json
import logging
from pathlib import Path
import sqlite3
import sys

from familyforest.config import LayoutSettings
from familyforest.database import load_snapshot
from familyforest.graph import GraphIndex
from familyforest.hierarchy import build_forest
from familyforest.layout import assign_layout
from familyforest.parsing import load_json
from familyforest.plotting import layout_to_dot, plot_layout
from familyforest.validation import validate_index

logger = logging.getLogger("familyforest")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="familyforest",
        description="Lay out a family tree from people, parent-child and spouse records.",
    )
    parser.add_argument("input", type=Path, help="JSON export (.json) or SQLite snapshot (.db)")
    parser.add_argument("-o", "--output", type=Path, help="Write the positioned forest as JSON")
    parser.add_argument("--plot", type=Path, help="Render the layout to an image (png, svg, pdf)")
    parser.add_argument("--dot", type=Path, help="Write the layout as a Graphviz DOT file")
    parser.add_argument("--list-orphans", action="store_true", help="List people with no relations")
    parser.add_argument("--order-by-birth", action="store_true", help="Order roots and siblings oldest first")

    defaults = LayoutSettings()
    parser.add_argument("--node-width", type=float, default=defaults.node_width)
    parser.add_argument("--sibling-gap", type=float, default=defaults.sibling_gap)
    parser.add_argument("--marriage-gap", type=float, default=defaults.marriage_gap)
    parser.add_argument("--generation-spacing", type=float, default=defaults.generation_spacing)
    parser.add_argument("--sibling-jitter", type=float, default=defaults.sibling_jitter)
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def load_input(path: Path):
    if path.suffix.lower() in (".db", ".sqlite", ".sqlite3"):
        if not path.exists():
            raise FileNotFoundError(path)
        conn = sqlite3.connect(path)
        try:
            return load_snapshot(conn)
        finally:
            conn.close()
    return load_json(path)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        settings = LayoutSettings(
            node_width=args.node_width,
            sibling_gap=args.sibling_gap,
            marriage_gap=args.marriage_gap,
            generation_spacing=args.generation_spacing,
            sibling_jitter=args.sibling_jitter,
            order_by_birth=args.order_by_birth,
        )
    except ValueError as e:
        logger.error("Invalid layout settings: %s", e)
        return 2

    logger.info("Loading %s", args.input)
    try:
        people, parent_child, spousal = load_input(args.input)
    except (ValueError, OSError, sqlite3.Error) as e:
        logger.error("Cannot read %s: %s", args.input, e)
        return 2
    logger.info(
        "  Found %d people, %d parent-child and %d spousal relations",
        len(people),
        len(parent_child),
        len(spousal),
    )

    index = GraphIndex.build(people, parent_child, spousal)
    stats = index.stats()
    logger.info(
        "  Indexed %d people: %d couples, %d parent-child relations, %d root people",
        stats["people"],
        stats["couples"],
        stats["parent_child"],
        stats["roots"],
    )

    warnings = validate_index(index)
    if warnings:
        logger.warning("Found %d validation warnings:", len(warnings))
        for w in warnings[:10]:
            logger.warning("    - %s", w)
        if len(warnings) > 10:
            logger.warning("    ... and %d more", len(warnings) - 10)
    else:
        logger.info("No validation issues found")

    if args.list_orphans:
        for person in index.orphans():
            print(f"{person.id}\t{person.full_name}")

    roots = build_forest(index, settings)
    layout = assign_layout(roots, index, settings)
    logger.info("Built %d root(s) and %d edges", len(layout.roots), len(layout.edges))

    if args.output:
        args.output.write_text(json.dumps(layout.to_dict(), indent=2), encoding="utf-8")
        logger.info("Layout saved to %s", args.output)
    if args.dot:
        layout_to_dot(layout, node_width=settings.node_width).write(str(args.dot), format="raw")
        logger.info("DOT saved to %s", args.dot)
    if args.plot:
        plot_layout(layout, args.plot, node_width=settings.node_width)
    if not (args.output or args.dot or args.plot or args.list_orphans):
        print(json.dumps(layout.to_dict(), indent=2))

    return 0


if __name__ == "__main__":
    sys.exit(main())
