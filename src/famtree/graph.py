"""Relationship graph building, root selection and NetworkX export."""

from collections.abc import Iterable, Mapping
import logging

import networkx as nx

from famtree.models import (
    FamilyGraph,
    Person,
    Relationship,
    RelationshipType,
    parent_edge,
    spouse_edge,
)
from famtree.parsing import (
    RecordError,
    dedupe_records,
    extract_ref_id,
    extract_record_id,
    normalize_records,
)
from famtree.photos import PhotoResolver

logger = logging.getLogger(__name__)


def has_spouse_edge(relationships: Iterable[Relationship], a: str, b: str) -> bool:
    """True if a spouse edge already joins a and b, in either order."""
    return any(
        r.type is RelationshipType.SPOUSE
        and ((r.person1_id == a and r.person2_id == b) or (r.person1_id == b and r.person2_id == a))
        for r in relationships
    )


def edges_for_record(
    person_id: str,
    record: Mapping,
    people: Mapping[str, Person],
    existing: list[Relationship],
) -> list[Relationship]:
    """
    Edges contributed by one member record's father/mother/spouse fields.

    References to people outside `people` are skipped. A spouse edge is only
    produced when `existing` has no spouse edge for the same pair.
    """
    edges: list[Relationship] = []

    for role in ("father", "mother"):
        parent_id = extract_ref_id(record.get(role))
        if parent_id is None:
            continue
        if parent_id not in people:
            logger.debug("Skipping %s edge %s -> %s: unknown parent", role, parent_id, person_id)
            continue
        edges.append(parent_edge(parent_id, person_id, role))

    spouse_id = extract_ref_id(record.get("spouse"))
    if spouse_id is not None:
        if spouse_id not in people:
            logger.debug("Skipping spouse edge %s <-> %s: unknown spouse", person_id, spouse_id)
        elif not has_spouse_edge(existing, person_id, spouse_id):
            edges.append(spouse_edge(person_id, spouse_id))

    return edges


def build_relationships(
    people: Mapping[str, Person], records: Iterable[Mapping]
) -> list[Relationship]:
    """Derive parent-child and spouse edges from the deduplicated records."""
    relationships: list[Relationship] = []
    for record in records:
        try:
            person_id = extract_record_id(record)
        except RecordError:
            continue
        if person_id not in people:
            continue
        relationships.extend(edges_for_record(person_id, record, people, relationships))
    return relationships


def prefers_as_root(candidate: Person, current: Person | None) -> bool:
    """
    Whether `candidate` should replace `current` as the traversal root.

    Generation 0 is a hard preference: once the root is generation 0 it is
    never displaced, not even by another generation-0 person.
    """
    if current is None:
        return True
    if candidate.generation == 0 and current.generation != 0:
        return True
    return candidate.generation < current.generation and current.generation != 0


def select_root(people: Mapping[str, Person]) -> str | None:
    root: Person | None = None
    for person in people.values():
        if prefers_as_root(person, root):
            root = person
    return root.id if root else None


def assemble_graph(
    records: Iterable[Mapping], photo_resolver: PhotoResolver | None = None
) -> FamilyGraph:
    """Full rebuild: normalize records, derive edges and pick the root."""
    unique = dedupe_records(records)
    people = normalize_records(unique, photo_resolver)
    relationships = build_relationships(people, unique)
    root_person_id = select_root(people)
    logger.info(
        "Built family graph: %d people, %d relationships, root %s",
        len(people),
        len(relationships),
        root_person_id,
    )
    return FamilyGraph(people=people, relationships=relationships, root_person_id=root_person_id)


class GraphIndex:
    """Read-only lookup tables over a FamilyGraph, built once per traversal."""

    def __init__(self, graph: FamilyGraph):
        self.graph = graph
        self._spouse: dict[str, str] = {}
        self._children: dict[str, list[str]] = {}
        self._linked: set[str] = set()

        people = graph.people
        for rel in graph.relationships:
            a, b = rel.person1_id, rel.person2_id
            if a not in people or b not in people:
                continue
            self._linked.update((a, b))
            if rel.type is RelationshipType.SPOUSE:
                # First spouse edge touching a person wins
                self._spouse.setdefault(a, b)
                self._spouse.setdefault(b, a)
            else:
                children = self._children.setdefault(a, [])
                if b not in children:
                    children.append(b)

    def spouse_of(self, person_id: str) -> str | None:
        return self._spouse.get(person_id)

    def children_of(self, person_id: str) -> list[str]:
        return list(self._children.get(person_id, ()))

    def has_relationships(self, person_id: str) -> bool:
        """True if any edge with two known endpoints touches the person."""
        return person_id in self._linked


def to_networkx(graph: FamilyGraph) -> nx.MultiDiGraph:
    """
    Build a NetworkX graph from a FamilyGraph.

    Edges are keyed by relationship_type, so a pair recorded as both parent
    and spouse keeps both edges.
    """
    G = nx.MultiDiGraph()

    # Note: use 'person_name' instead of 'name' to avoid conflict with pydot
    for person in graph.people.values():
        G.add_node(
            person.id,
            person_name=person.full_name,
            given_name=person.first_name,
            surname=person.last_name,
            sex=person.gender.value,
            birth_date=person.date_of_birth or None,
            generation=person.generation,
        )

    for rel in graph.relationships:
        if rel.person1_id not in G or rel.person2_id not in G:
            continue
        relationship_type = "SPOUSE_OF" if rel.type is RelationshipType.SPOUSE else "PARENT_OF"
        G.add_edge(
            rel.person1_id, rel.person2_id, key=relationship_type, relationship_type=relationship_type
        )

    return G
