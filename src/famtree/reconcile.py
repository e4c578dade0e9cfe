"""Planning and optimistic insertion of new members, and the tree state container."""

from collections.abc import Callable, Iterable, Mapping
from enum import Enum
import logging

from famtree.graph import GraphIndex, assemble_graph, edges_for_record, prefers_as_root
from famtree.layout import FamilyLayout, build_layout
from famtree.models import EMPTY_GRAPH, FamilyGraph, Gender
from famtree.parsing import RecordError, normalize_gender, normalize_record
from famtree.photos import PhotoResolver

logger = logging.getLogger(__name__)

GraphListener = Callable[[FamilyGraph, int], None]


def reconcile_created_member(
    graph: FamilyGraph, record: Mapping, photo_resolver: PhotoResolver | None = None
) -> FamilyGraph:
    """
    Return a new graph with a just-created member inserted.

    `record` is the creation response from the backend. Its father, mother
    and spouse references only become edges when that person is already in
    `graph`. The result is provisional: the next full rebuild replaces it.
    """
    try:
        person = normalize_record(record, photo_resolver)
    except RecordError as e:
        logger.warning("Ignoring creation response: %s", e)
        return graph

    people = dict(graph.people)
    people[person.id] = person

    relationships = list(graph.relationships)
    for edge in edges_for_record(person.id, record, people, relationships):
        if any(edge.same_edge(existing) for existing in relationships):
            continue
        relationships.append(edge)

    root_person_id = graph.root_person_id
    current_root = people.get(root_person_id) if root_person_id else None
    if root_person_id != person.id and prefers_as_root(person, current_root):
        root_person_id = person.id

    logger.debug("Optimistically added %s (%s)", person.full_name, person.id)
    return FamilyGraph(people=people, relationships=relationships, root_person_id=root_person_id)


class MemberPlanError(ValueError):
    """A new member cannot be placed relative to the given person."""


class NewMemberRelation(str, Enum):
    ROOT = "root"
    PARENT = "parent"
    SPOUSE = "spouse"
    CHILD = "child"


# Relationship label sent with the creation request, by (relation, is_male)
RELATION_LABELS = {
    (NewMemberRelation.ROOT, True): "Father",
    (NewMemberRelation.ROOT, False): "Mother",
    (NewMemberRelation.PARENT, True): "Grandfather",
    (NewMemberRelation.PARENT, False): "Grandmother",
    (NewMemberRelation.SPOUSE, True): "Spouse",
    (NewMemberRelation.SPOUSE, False): "Spouse",
    (NewMemberRelation.CHILD, True): "Son",
    (NewMemberRelation.CHILD, False): "Daughter",
}


def plan_new_member(
    graph: FamilyGraph,
    relationship_type: str,
    relative_id: str | None = None,
    gender="male",
) -> dict:
    """
    Generation and father/mother/spouse references for a member about to be created.

    A parent sits one generation above `relative_id`, a spouse on the same
    generation and a child one below. A child's other parent is the
    relative's spouse, if any; the relative is the father when male and the
    mother otherwise. A root is generation 0 and is refused when the graph
    already has one.

    The returned dict uses the member record field names, so the backend's
    creation response can go straight to `reconcile_created_member`.
    """
    try:
        relation = NewMemberRelation(relationship_type)
    except ValueError:
        raise MemberPlanError(f"Unknown relationship type {relationship_type!r}") from None
    gender = normalize_gender(gender)

    father_id = mother_id = spouse_id = None
    if relation is NewMemberRelation.ROOT:
        if graph.root_person_id is not None:
            raise MemberPlanError(f"Family already has a root person ({graph.root_person_id})")
        generation = 0
    else:
        if not relative_id:
            raise MemberPlanError(f"A {relation.value} needs a relative")
        relative = graph.people.get(relative_id)
        if relative is None:
            raise MemberPlanError(f"Relative {relative_id} not found")

        if relation is NewMemberRelation.PARENT:
            generation = relative.generation - 1
        elif relation is NewMemberRelation.SPOUSE:
            generation = relative.generation
            spouse_id = relative.id
        else:
            generation = relative.generation + 1
            partner_id = GraphIndex(graph).spouse_of(relative.id)
            if relative.gender is Gender.MALE:
                father_id, mother_id = relative.id, partner_id
            else:
                father_id, mother_id = partner_id, relative.id

    plan = {
        "gender": gender.value,
        "generation": generation,
        "relationship": RELATION_LABELS[relation, gender is Gender.MALE],
        "father": father_id,
        "mother": mother_id,
        "spouse": spouse_id,
    }
    logger.debug("Planned new %s of %s: %s", relation.value, relative_id, plan)
    return plan



class FamilyTreeStore:
    """
    Holds the current FamilyGraph for one family and applies changes one at a time.

    Every change replaces the graph with a new value and bumps `version`.
    Creation responses are applied in the order the creations were started
    (see `begin_creation`), and an authoritative `refresh` supersedes all
    optimistic states applied before it.
    """

    def __init__(self, photo_resolver: PhotoResolver | None = None):
        self.photo_resolver = photo_resolver
        self._graph: FamilyGraph = EMPTY_GRAPH
        self._version = 0
        self._listeners: list[GraphListener] = []
        self._next_ticket = 0
        # ticket -> creation response (None until it arrives)
        self._pending: dict[int, Mapping | None] = {}
        # tickets discarded by a family switch; their late responses are ignored
        self._retired: set[int] = set()
        self._layout: tuple[int, FamilyLayout] | None = None

    @property
    def graph(self) -> FamilyGraph:
        return self._graph

    @property
    def version(self) -> int:
        return self._version

    @property
    def pending_creations(self) -> list[int]:
        return sorted(self._pending)

    def subscribe(self, listener: GraphListener):
        self._listeners.append(listener)

    def unsubscribe(self, listener: GraphListener):
        self._listeners.remove(listener)

    def layout(self) -> FamilyLayout:
        """Layout of the current graph, computed once per version."""
        if self._layout is None or self._layout[0] != self._version:
            self._layout = (self._version, build_layout(self._graph))
        return self._layout[1]

    def _replace(self, graph: FamilyGraph):
        self._graph = graph
        self._version += 1
        for listener in list(self._listeners):
            listener(graph, self._version)

    def _retire_pending(self):
        if self._pending:
            logger.info("Discarding %d pending creation(s)", len(self._pending))
        self._retired.update(self._pending)
        self._pending.clear()

    def load(self, records: Iterable[Mapping]) -> FamilyGraph:
        """
        Initial load or family switch: rebuild from the fetched records.

        Creations still pending belong to the previous family. Their tickets
        are retired and any response that arrives later is ignored.
        """
        self._retire_pending()
        self._replace(assemble_graph(records, self.photo_resolver))
        return self._graph

    def clear(self):
        self._retire_pending()
        self._replace(EMPTY_GRAPH)

    def begin_creation(self) -> int:
        """Reserve the ordering slot for a creation call about to be sent."""
        ticket = self._next_ticket
        self._next_ticket += 1
        self._pending[ticket] = None
        return ticket

    def member_created(self, ticket: int, record: Mapping):
        """
        Apply a creation response.

        A response that arrives before those of earlier creations is held
        until they resolve. A response for a ticket retired by `load` or
        `clear` is logged and dropped.
        """
        if not self._is_open(ticket, "response"):
            return
        if self._pending[ticket] is not None:
            raise ValueError(f"Creation ticket {ticket} already answered")
        self._pending[ticket] = record
        self._flush()

    def creation_failed(self, ticket: int):
        if not self._is_open(ticket, "failure"):
            return
        del self._pending[ticket]
        self._flush()

    def _is_open(self, ticket: int, what: str) -> bool:
        """
        True if `ticket` is still pending.

        Raises KeyError for a ticket this store never issued and ValueError
        for one that was already resolved.
        """
        if ticket in self._pending:
            return True
        if ticket in self._retired:
            logger.warning("Ignoring late creation %s for retired ticket %d", what, ticket)
            return False
        if not 0 <= ticket < self._next_ticket:
            raise KeyError(f"Unknown creation ticket {ticket}")
        raise ValueError(f"Creation ticket {ticket} already resolved")

    def _flush(self):
        for ticket in sorted(self._pending):
            record = self._pending[ticket]
            if record is None:
                break
            del self._pending[ticket]
            self._replace(reconcile_created_member(self._graph, record, self.photo_resolver))

    def refresh(self, records: Iterable[Mapping]) -> FamilyGraph:
        """
        Authoritative rebuild after one or more creations.

        Responses that were received but are still waiting on an earlier
        creation are covered by this refresh and are dropped. Creations still
        in flight keep their tickets.
        """
        for ticket in [t for t, r in self._pending.items() if r is not None]:
            del self._pending[ticket]
        self._replace(assemble_graph(records, self.photo_resolver))
        return self._graph
