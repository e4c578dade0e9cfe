"""Data classes for family tree entities."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from types import MappingProxyType


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class RelationshipType(str, Enum):
    PARENT_CHILD = "parent-child"
    SPOUSE = "spouse"


AVATAR_GLYPHS = {
    Gender.FEMALE: "\U0001F469",
    Gender.MALE: "\U0001F468",
    Gender.OTHER: "\U0001F9D1",
}

# Generation assumed when a record carries none
DEFAULT_GENERATION = 1


def avatar_for(gender: Gender) -> str:
    return AVATAR_GLYPHS.get(gender, AVATAR_GLYPHS[Gender.OTHER])


@dataclass(frozen=True)
class Person:
    id: str
    first_name: str
    last_name: str
    gender: Gender
    date_of_birth: str  # ISO format YYYY-MM-DD or ""
    generation: int
    photo_ref: str | None = None
    avatar_glyph: str = ""

    def __post_init__(self):
        if not self.avatar_glyph:
            object.__setattr__(self, "avatar_glyph", avatar_for(self.gender))

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)

    def age(self, today: date | None = None) -> int:
        """Age in calendar years, 0 when the birth date is unknown."""
        if not self.date_of_birth:
            return 0
        today = today or date.today()
        return today.year - int(self.date_of_birth[:4])

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "gender": self.gender.value,
            "dateOfBirth": self.date_of_birth,
            "generation": self.generation,
            "photo": self.photo_ref,
            "avatar": self.avatar_glyph,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "Person":
        """Inverse of to_dict, for previously exported graphs."""
        return cls(
            id=str(data["id"]),
            first_name=data.get("firstName") or "",
            last_name=data.get("lastName") or "",
            gender=Gender(data.get("gender") or Gender.MALE.value),
            date_of_birth=data.get("dateOfBirth") or "",
            generation=int(data.get("generation", DEFAULT_GENERATION)),
            photo_ref=data.get("photo") or None,
            avatar_glyph=data.get("avatar") or "",
        )


@dataclass(frozen=True)
class Relationship:
    id: str
    type: RelationshipType
    person1_id: str  # parent for PARENT_CHILD
    person2_id: str  # child for PARENT_CHILD

    def same_edge(self, other: "Relationship") -> bool:
        """True when both describe the same edge; spouse pairs are unordered."""
        if self.type != other.type:
            return False
        if self.type is RelationshipType.SPOUSE:
            return {self.person1_id, self.person2_id} == {other.person1_id, other.person2_id}
        return (self.person1_id, self.person2_id) == (other.person1_id, other.person2_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "person1Id": self.person1_id,
            "person2Id": self.person2_id,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "Relationship":
        return cls(
            id=str(data["id"]),
            type=RelationshipType(data["type"]),
            person1_id=str(data["person1Id"]),
            person2_id=str(data["person2Id"]),
        )


def parent_edge(parent_id: str, child_id: str, role: str) -> Relationship:
    """Parent-child edge; role is "father" or "mother"."""
    return Relationship(
        id=f"rel_{child_id}_{role}_{parent_id}",
        type=RelationshipType.PARENT_CHILD,
        person1_id=parent_id,
        person2_id=child_id,
    )


def spouse_edge(person_id: str, spouse_id: str) -> Relationship:
    return Relationship(
        id=f"rel_{person_id}_spouse_{spouse_id}",
        type=RelationshipType.SPOUSE,
        person1_id=person_id,
        person2_id=spouse_id,
    )


@dataclass(frozen=True, eq=False)
class FamilyGraph:
    """
    All people, edges and the traversal root of one family.

    Instances are never mutated; every change produces a new graph. Graphs
    compare and hash by identity, use content_equals to compare contents.
    """

    people: Mapping[str, Person] = field(default_factory=dict)
    relationships: tuple[Relationship, ...] = ()
    root_person_id: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "people", MappingProxyType(dict(self.people)))
        object.__setattr__(self, "relationships", tuple(self.relationships))
        if self.root_person_id is not None and self.root_person_id not in self.people:
            raise ValueError(f"Root person {self.root_person_id} not found in graph")

    @property
    def is_empty(self) -> bool:
        return not self.people

    def content_equals(self, other: "FamilyGraph") -> bool:
        """Same people, same edges (order ignored) and same root."""
        return (
            dict(self.people) == dict(other.people)
            and set(self.relationships) == set(other.relationships)
            and self.root_person_id == other.root_person_id
        )

    def to_dict(self) -> dict:
        return {
            "people": {pid: p.to_dict() for pid, p in self.people.items()},
            "relationships": [r.to_dict() for r in self.relationships],
            "rootPersonId": self.root_person_id,
        }

    @classmethod
    def from_dict(cls, data: Mapping) -> "FamilyGraph":
        """
        Rebuild a graph from the output of to_dict.

        A root that is not among the people is dropped rather than rejected,
        so layout falls back to the lowest generation.
        """
        try:
            people = {}
            for person_data in data.get("people", {}).values():
                person = Person.from_dict(person_data)
                people[person.id] = person
            relationships = [Relationship.from_dict(r) for r in data.get("relationships", [])]
        except (KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"Malformed family graph: {e!r}") from e
        root_person_id = data.get("rootPersonId")
        if root_person_id not in people:
            root_person_id = None
        return cls(people=people, relationships=relationships, root_person_id=root_person_id)

    def stats(self) -> dict:
        """Summary counts: members, distinct generations, and couples (spouse edges)."""
        return {
            "total_members": len(self.people),
            "generations": len({p.generation for p in self.people.values()}),
            "couples": sum(1 for r in self.relationships if r.type is RelationshipType.SPOUSE),
        }


EMPTY_GRAPH = FamilyGraph()
