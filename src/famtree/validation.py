"""Graph validation for family tree data."""

import networkx as nx

from famtree.graph import to_networkx
from famtree.models import FamilyGraph


def _label(G: nx.MultiDiGraph, person_id: str) -> str:
    return G.nodes[person_id].get("person_name") or person_id


def validate_graph(graph: FamilyGraph) -> list[str]:
    """
    Validate the family graph for:
    - Cycles in parent-child relationships
    - People recorded as both spouse and ancestor of each other
    - People with more than one spouse (only the first is laid out)
    - Generation numbers that do not increase from parent to child
    - Impossible ages (child born before parent, very young parents)

    The layout tolerates all of these; this only reports them.
    Edges whose endpoints are not in the graph are ignored.
    Returns a list of warning messages.
    """
    warnings: list[str] = []
    G = to_networkx(graph)

    # Create a subgraph with only PARENT_OF edges for cycle detection
    parent_edges = [
        (u, v) for u, v, d in G.edges(data=True) if d.get("relationship_type") == "PARENT_OF"
    ]
    parent_graph = nx.DiGraph(parent_edges)

    for component in nx.strongly_connected_components(parent_graph):
        if len(component) > 1:
            names = sorted(_label(G, pid) for pid in component)
            warnings.append(f"Cycle detected in parent-child relationships: {names}")
    for pid, _ in nx.selfloop_edges(parent_graph):
        warnings.append(f"Impossible: {_label(G, pid)} is recorded as their own parent")

    spouse_count: dict[str, int] = {}
    for a, b, data in G.edges(data=True):
        if data.get("relationship_type") != "SPOUSE_OF":
            continue
        for pid in {a, b}:
            spouse_count[pid] = spouse_count.get(pid, 0) + 1
        if a in parent_graph and b in parent_graph:
            if nx.has_path(parent_graph, a, b) or nx.has_path(parent_graph, b, a):
                warnings.append(
                    f"Ambiguous: {_label(G, a)} and {_label(G, b)} are spouses "
                    f"and also ancestor and descendant"
                )

    for pid, count in spouse_count.items():
        if count > 1:
            warnings.append(
                f"Multiple spouses: {_label(G, pid)} has {count}, only the first is shown"
            )

    for parent, child in parent_edges:
        if parent == child:
            continue

        parent_data = G.nodes[parent]
        child_data = G.nodes[child]

        if child_data["generation"] <= parent_data["generation"]:
            warnings.append(
                f"Inconsistent generation: {_label(G, child)} (gen {child_data['generation']}) "
                f"is not below parent {_label(G, parent)} (gen {parent_data['generation']})"
            )

        # ISO dates can be string-compared
        parent_birth = parent_data.get("birth_date")
        child_birth = child_data.get("birth_date")
        if parent_birth and child_birth:
            if child_birth < parent_birth:
                warnings.append(
                    f"Impossible: {_label(G, child)} born before parent {_label(G, parent)}"
                )
            elif int(child_birth[:4]) - int(parent_birth[:4]) < 12:
                warnings.append(
                    f"Suspicious: {_label(G, parent)} was less than 12 years "
                    f"old when {_label(G, child)} was born"
                )

    return warnings
