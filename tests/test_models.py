"""Tests for family graph serialization, stats and identity."""

import json

import pytest

from famtree.graph import assemble_graph
from famtree.models import EMPTY_GRAPH, FamilyGraph, Gender, Person


@pytest.fixture
def family(member):
    return assemble_graph(
        [
            member("dad", generation=0, date_of_birth="1950-01-01", spouse="mom", photo="dad.jpg"),
            member("mom", generation=0, gender="Female"),
            member("kid", generation=1, father="dad", mother="mom"),
            member("aunt", generation=0, gender="Other", spouse="uncle"),
            member("uncle", generation=0),
        ],
        lambda ref: ref,
    )


class TestFromDict:

    def test_export_then_import_has_same_content(self, family):
        restored = FamilyGraph.from_dict(json.loads(json.dumps(family.to_dict())))

        assert restored is not family
        assert restored.content_equals(family)
        assert restored.people["dad"].photo_ref == "dad.jpg"
        assert restored.people["aunt"].gender is Gender.OTHER

    def test_empty_graph(self):
        assert FamilyGraph.from_dict(EMPTY_GRAPH.to_dict()).content_equals(EMPTY_GRAPH)

    def test_unknown_root_is_dropped(self, family):
        data = family.to_dict()
        data["rootPersonId"] = "nobody"
        assert FamilyGraph.from_dict(data).root_person_id is None

    def test_malformed_data_raises_value_error(self):
        with pytest.raises(ValueError):
            FamilyGraph.from_dict({"people": {"x": {"firstName": "No id"}}})
        with pytest.raises(ValueError):
            FamilyGraph.from_dict({"relationships": [{"id": "r", "type": "cousin"}]})

    def test_person_defaults(self):
        person = Person.from_dict({"id": 7})
        assert person.id == "7"
        assert person.gender is Gender.MALE
        assert person.generation == 1
        assert person.avatar_glyph


class TestStats:

    def test_counts(self, family):
        assert family.stats() == {"total_members": 5, "generations": 2, "couples": 2}

    def test_empty(self):
        assert EMPTY_GRAPH.stats() == {"total_members": 0, "generations": 0, "couples": 0}


class TestIdentity:

    def test_graph_is_hashable(self, family):
        assert {family: "v1"}[family] == "v1"
        assert hash(EMPTY_GRAPH) == hash(EMPTY_GRAPH)

    def test_equality_is_identity(self, family):
        copy = FamilyGraph(
            people=family.people,
            relationships=family.relationships,
            root_person_id=family.root_person_id,
        )
        assert copy != family
        assert copy.content_equals(family)
