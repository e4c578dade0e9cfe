"""
Hierarchical family tree layout.

The layout is a tree of units. A unit is a single person or a couple, and its
children are the units of that person's (or couple's) children. Spouses share
one unit, so a couple's children hang from the couple rather than from each
parent separately.

Traversal state is two sets of person ids threaded through the recursion:

- `visited` guards against cycles. Each child's descent receives its own copy,
  so siblings do not see one another's descendants as ancestors.
- `rendered` is shared across the whole traversal and records everyone placed
  so far. It keeps a person from being placed twice and is what the
  disconnected-component pass uses to find who is still missing.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
import logging

from famtree.graph import GraphIndex
from famtree.models import FamilyGraph, Person

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutNode:
    person: Person
    spouse: Person | None = None
    children: tuple["LayoutNode", ...] = ()

    @property
    def is_couple(self) -> bool:
        return self.spouse is not None

    def members(self) -> tuple[Person, ...]:
        return (self.person, self.spouse) if self.spouse else (self.person,)

    def iter_nodes(self) -> Iterator["LayoutNode"]:
        """Depth-first, in display order."""
        yield self
        for child in self.children:
            yield from child.iter_nodes()

    def person_ids(self) -> list[str]:
        return [m.id for node in self.iter_nodes() for m in node.members()]

    def to_dict(self) -> dict:
        return {
            "person": self.person.to_dict(),
            "spouse": self.spouse.to_dict() if self.spouse else None,
            "children": [child.to_dict() for child in self.children],
        }


class ComponentKind(str, Enum):
    TREE = "tree"
    STANDALONE = "standalone"


@dataclass(frozen=True)
class DisconnectedComponent:
    kind: ComponentKind
    node: LayoutNode

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "node": self.node.to_dict()}


@dataclass(frozen=True)
class FamilyLayout:
    root: LayoutNode | None = None
    disconnected: tuple[DisconnectedComponent, ...] = ()

    @property
    def is_empty(self) -> bool:
        return self.root is None and not self.disconnected

    def person_ids(self) -> list[str]:
        ids = self.root.person_ids() if self.root else []
        for component in self.disconnected:
            ids.extend(component.node.person_ids())
        return ids

    def to_dict(self) -> dict:
        return {
            "empty": self.is_empty,
            "root": self.root.to_dict() if self.root else None,
            "disconnected": [c.to_dict() for c in self.disconnected],
        }


# Returned for a family with no people, so callers can show an onboarding state
EMPTY_LAYOUT = FamilyLayout()


def _claim(person_id: str, visited: set[str], rendered: set[str]):
    visited.add(person_id)
    rendered.add(person_id)


def _is_free(person_id: str | None, visited: set[str], rendered: set[str]) -> bool:
    return person_id is not None and person_id not in visited and person_id not in rendered


def _expand_unit(
    index: GraphIndex,
    person_id: str,
    spouse_id: str | None,
    visited: set[str],
    rendered: set[str],
) -> LayoutNode:
    """Build the node for an already-claimed person (and spouse) and recurse."""
    children = index.children_of(person_id)
    if spouse_id is not None:
        for child_id in index.children_of(spouse_id):
            if child_id not in children:
                children.append(child_id)

    paired: list[tuple[str, str | None]] = []
    solo: list[tuple[str, str | None]] = []
    for child_id in children:
        # Already claimed: an ancestor (cyclic data) or placed elsewhere
        if not _is_free(child_id, visited, rendered):
            continue
        _claim(child_id, visited, rendered)
        child_spouse = index.spouse_of(child_id)
        if _is_free(child_spouse, visited, rendered):
            _claim(child_spouse, visited, rendered)
            paired.append((child_id, child_spouse))
        else:
            solo.append((child_id, None))

    child_nodes = tuple(
        _expand_unit(index, child_id, child_spouse, set(visited), rendered)
        for child_id, child_spouse in paired + solo
    )

    return LayoutNode(
        person=index.graph.people[person_id],
        spouse=index.graph.people[spouse_id] if spouse_id is not None else None,
        children=child_nodes,
    )


def layout_subtree(
    graph: FamilyGraph,
    person_id: str,
    visited: set[str],
    rendered: set[str],
    index: GraphIndex | None = None,
) -> LayoutNode | None:
    """
    Lay out `person_id` and everything reachable below them.

    Both sets are updated in place. Returns None when the person is unknown
    or already visited.
    """
    if person_id in visited or person_id not in graph.people:
        return None
    index = index or GraphIndex(graph)

    _claim(person_id, visited, rendered)
    spouse_id = index.spouse_of(person_id)
    if _is_free(spouse_id, visited, rendered):
        _claim(spouse_id, visited, rendered)
    else:
        spouse_id = None

    return _expand_unit(index, person_id, spouse_id, visited, rendered)


def collect_disconnected(
    graph: FamilyGraph,
    visited: set[str],
    rendered: set[str],
    index: GraphIndex | None = None,
) -> list[DisconnectedComponent]:
    """
    Lay out everyone the primary traversal did not reach.

    People with at least one relationship become the root of a secondary
    tree; everyone else is a standalone node. `rendered` is extended with
    every person placed here, so each person is emitted once.
    """
    index = index or GraphIndex(graph)
    components: list[DisconnectedComponent] = []

    for person_id, person in graph.people.items():
        if person_id in rendered:
            continue
        if index.has_relationships(person_id):
            node = layout_subtree(graph, person_id, set(visited) | rendered, rendered, index)
            if node is not None:
                components.append(DisconnectedComponent(ComponentKind.TREE, node))
                continue
        rendered.add(person_id)
        components.append(DisconnectedComponent(ComponentKind.STANDALONE, LayoutNode(person)))

    if components:
        logger.info("Found %d disconnected components", len(components))
    return components


def fallback_root(graph: FamilyGraph) -> str | None:
    """Lowest generation first; ties keep map order."""
    if graph.is_empty:
        return None
    return min(graph.people.values(), key=lambda p: p.generation).id


def build_layout(graph: FamilyGraph) -> FamilyLayout:
    """Lay out the whole family: the root's tree plus every disconnected component."""
    if graph.is_empty:
        return EMPTY_LAYOUT

    root_id = graph.root_person_id
    if root_id not in graph.people:
        root_id = fallback_root(graph)
        logger.debug("No root person set, using %s", root_id)

    index = GraphIndex(graph)
    visited: set[str] = set()
    rendered: set[str] = set()
    root = layout_subtree(graph, root_id, visited, rendered, index)
    disconnected = collect_disconnected(graph, visited, rendered, index)

    return FamilyLayout(root=root, disconnected=tuple(disconnected))
