"""Graphviz export of a family tree layout."""

import itertools
from pathlib import Path

import pydot

from famtree.layout import FamilyLayout, LayoutNode
from famtree.models import Gender, Person

FILL_COLORS = {
    Gender.MALE: "lightblue",
    Gender.FEMALE: "lightpink",
    Gender.OTHER: "lightgray",
}


def _person_node(person: Person) -> pydot.Node:
    birth_year = person.date_of_birth[:4] if person.date_of_birth else ""
    label = f"{person.first_name}\n{person.last_name}\n{birth_year}"
    return pydot.Node(
        str(person.id),
        label=label,
        shape="box",
        style="rounded,filled",
        fillcolor=FILL_COLORS[person.gender],
        fontsize="10",
    )


def _add_unit(P: pydot.Graph, node: LayoutNode, couples: itertools.count):
    """Add a unit and, recursively, its children's units."""
    P.add_node(_person_node(node.person))
    anchor = str(node.person.id)

    if node.spouse is not None:
        P.add_node(_person_node(node.spouse))
        # Family node is a small connector point between the spouses
        fam_id = f"FAM_{node.person.id}_{node.spouse.id}"
        P.add_node(pydot.Node(fam_id, shape="point", width="0.1", height="0.1", label=""))
        P.add_edge(pydot.Edge(anchor, fam_id, dir="none", color="darkgray"))
        P.add_edge(pydot.Edge(str(node.spouse.id), fam_id, dir="none", color="darkgray"))

        # Keep the couple and their family point on one rank
        sg = pydot.Subgraph(f"couple_{next(couples)}", rank="same")
        sg.add_node(pydot.Node(anchor))
        sg.add_node(pydot.Node(str(node.spouse.id)))
        P.add_subgraph(sg)
        anchor = fam_id

    for child in node.children:
        _add_unit(P, child, couples)
        P.add_edge(pydot.Edge(anchor, str(child.person.id), color="darkgray"))


def layout_to_dot(layout: FamilyLayout) -> pydot.Dot:
    """
    Build a hierarchical Graphviz graph from a layout.

    - Parents appear above children (ancestors at top)
    - Spouses share a rank and hang their children from a family point
    - Disconnected people are grouped in their own cluster
    """
    P = pydot.Dot(graph_type="digraph")
    P.set("rankdir", "TB")  # Top-to-bottom (ancestors at top)
    P.set("splines", "ortho")  # Orthogonal edges for cleaner tree look
    P.set("nodesep", "0.4")  # Horizontal spacing between nodes
    P.set("ranksep", "0.6")  # Vertical spacing between ranks

    if layout.is_empty:
        P.add_node(pydot.Node("empty", label="Start Building Your Family Tree", shape="plaintext"))
        return P

    couples = itertools.count()
    if layout.root is not None:
        _add_unit(P, layout.root, couples)

    if layout.disconnected:
        cluster = pydot.Cluster(
            "disconnected", label="Additional Family Members", style="dashed", color="slateblue"
        )
        for component in layout.disconnected:
            _add_unit(cluster, component.node, couples)
        P.add_subgraph(cluster)

    return P


def write_layout(layout: FamilyLayout, output_path: Path):
    """Render a layout to a file; the format follows the extension."""
    P = layout_to_dot(layout)

    ext = output_path.suffix.lower().lstrip(".")
    if ext == "dot":
        output_path.write_text(P.to_string(), encoding="utf-8")
    else:
        if ext not in ("png", "svg", "pdf"):
            ext = "png"
        P.write(str(output_path), format=ext)
    print(f"Graph saved to {output_path}")
