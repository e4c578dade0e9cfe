"""
1) Read a JSON export of a family's member records.
2) Normalize them into people and relationship edges, and pick the root.
3) Validate the family graph for cycles, generation and age problems.
4) Lay out the tree, including members not connected to the root.
5) Optionally write the layout as an image and the graph as JSON.
"""

import argparse
import json
import logging
from pathlib import Path
import sys

from famtree.config import settings
from famtree.graph import assemble_graph
from famtree.layout import build_layout
from famtree.models import FamilyGraph
from famtree.plotting import write_layout
from famtree.validation import validate_graph

logger = logging.getLogger(__name__)


def _read_json(path: Path):
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def _records_from(payload, path: Path) -> list[dict]:
    if isinstance(payload, dict):
        payload = payload.get("data", [])
    if not isinstance(payload, list):
        raise ValueError(f"Expected a list of member records in {path}")
    return payload


def load_records(path: Path) -> list[dict]:
    """Load member records from a JSON array, or an object with a "data" array."""
    return _records_from(_read_json(path), path)


def load_graph(path: Path) -> FamilyGraph:
    """Load a family graph from member records, or from a graph written by --export."""
    payload = _read_json(path)
    if isinstance(payload, dict) and "people" in payload:
        graph = FamilyGraph.from_dict(payload)
        logger.info("Imported family graph with %d people from %s", len(graph.people), path)
        return graph
    return assemble_graph(_records_from(payload, path))


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="famtree", description="Lay out a family tree from member records.")
    parser.add_argument("records", type=Path, help="JSON file of member records, or a graph written by --export")
    parser.add_argument("-o", "--output", type=Path, help="write the layout (.png, .svg, .pdf or .dot)")
    parser.add_argument("--export", type=Path, help="write the family graph as JSON")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=settings.LOG_LEVEL, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    print(f"Reading member records: {args.records}")
    print("Building family graph...")
    try:
        graph = load_graph(args.records)
    except (OSError, ValueError) as e:
        print(f"Could not read member records: {e}", file=sys.stderr)
        return 1
    print(f"  Found {len(graph.people)} people and {len(graph.relationships)} relationships")
    stats = graph.stats()
    print(f"  {stats['generations']} generations, {stats['couples']} couples")
    if graph.root_person_id:
        print(f"  Root: {graph.people[graph.root_person_id].full_name}")

    print("Validating graph...")
    warnings = validate_graph(graph)
    if warnings:
        print(f"  Found {len(warnings)} validation warnings:")
        for w in warnings[:10]:  # Show first 10 warnings
            print(f"    - {w}")
        if len(warnings) > 10:
            print(f"    ... and {len(warnings) - 10} more")
    else:
        print("  No validation issues found")

    print("Laying out tree...")
    layout = build_layout(graph)
    if layout.is_empty:
        print("  No people in this family yet")
    else:
        placed = len(layout.root.person_ids()) if layout.root else 0
        print(f"  {placed} people in the main tree, {len(layout.disconnected)} disconnected")

    if args.output:
        write_layout(layout, args.output)

    if args.export:
        args.export.write_text(
            json.dumps({**graph.to_dict(), "layout": layout.to_dict()}, indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        print(f"Graph exported to {args.export}")

    print("Done!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
