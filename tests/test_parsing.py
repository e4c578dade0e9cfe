"""Tests for member record normalization."""

from datetime import date, datetime
import logging

import pytest

from famtree.models import Gender
from famtree.parsing import (
    RecordError,
    extract_record_id,
    extract_ref_id,
    normalize_date_of_birth,
    normalize_gender,
    normalize_generation,
    normalize_records,
)


class TestExtractIds:

    @pytest.mark.parametrize(
        "ref, expected",
        [
            ({"_id": "abc"}, "abc"),
            ({"id": 42}, "42"),
            ("abc", "abc"),
            (7, "7"),
            (None, None),
            ("", None),
            ({}, None),
        ],
    )
    def test_ref_id_nested_or_bare(self, ref, expected):
        assert extract_ref_id(ref) == expected

    def test_record_id_prefers_underscore_id(self):
        assert extract_record_id({"_id": "a", "id": "b"}) == "a"
        assert extract_record_id({"id": 3}) == "3"

    def test_record_without_id_raises(self):
        with pytest.raises(RecordError):
            extract_record_id({"firstName": "Nobody"})


class TestFieldNormalization:

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("Female", Gender.FEMALE),
            ("MALE", Gender.MALE),
            ("f", Gender.FEMALE),
            ("other", Gender.OTHER),
            ("unknown", Gender.MALE),
            (None, Gender.MALE),
        ],
    )
    def test_gender_defaults_to_male(self, value, expected):
        assert normalize_gender(value) == expected

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("1990-05-17T00:00:00.000Z", "1990-05-17"),
            ("1990-05-17", "1990-05-17"),
            (date(1990, 5, 17), "1990-05-17"),
            (datetime(1990, 5, 17, 13, 30), "1990-05-17"),
            ("25 Nov 1954", "1954-11-25"),
            ("03 OCT 1931", "1931-10-03"),
            ("November 25, 1954", "1954-11-25"),
            ("11/25/1954", "1954-11-25"),
            ("1954", "1954-01-01"),
            ("1990-02-30", ""),
            ("someday", ""),
            ("", ""),
            (None, ""),
            (12345, ""),
        ],
    )
    def test_date_of_birth(self, value, expected):
        assert normalize_date_of_birth(value) == expected

    @pytest.mark.parametrize(
        "value, expected",
        [
            (0, 0), (3, 3), (-1, -1), ("2", 2), (None, 1), ("x", 1), (True, 1),
            (0.0, 0), (2.0, 2), (-1.0, -1), (" 3.0 ", 3), (1.5, 1), ("2.5", 1),
            (float("nan"), 1), (float("inf"), 1),
        ],
    )
    def test_generation(self, value, expected):
        assert normalize_generation(value) == expected


class TestNormalizeRecords:

    def test_duplicate_keeps_first_occurrence(self, member, no_photos, caplog):
        records = [
            member("p1", first_name="First", generation=0),
            member("p1", first_name="Second", generation=3),
        ]
        with caplog.at_level(logging.WARNING):
            people = normalize_records(records, no_photos)

        assert list(people) == ["p1"]
        assert people["p1"].first_name == "First"
        assert people["p1"].generation == 0
        assert "Duplicate member" in caplog.text

    def test_record_without_id_is_dropped(self, member, no_photos):
        records = [{"firstName": "Ghost"}, member("p1"), "not a record"]
        people = normalize_records(records, no_photos)
        assert list(people) == ["p1"]

    def test_person_fields(self, member, no_photos):
        record = member(
            "p1",
            first_name="Ann",
            last_name="Lee",
            gender="Female",
            generation=2,
            date_of_birth="1980-01-02T00:00:00Z",
            photo="ann.jpg",
        )
        person = normalize_records([record], no_photos)["p1"]

        assert person.full_name == "Ann Lee"
        assert person.gender is Gender.FEMALE
        assert person.date_of_birth == "1980-01-02"
        assert person.generation == 2
        assert person.photo_ref == "ann.jpg"
        assert person.avatar_glyph == "\U0001F469"
        assert person.age(date(2020, 6, 1)) == 40

    def test_photo_resolver_result_is_passed_through(self, member):
        seen = []

        def resolver(ref):
            seen.append(ref)
            return None

        people = normalize_records([member("p1", photo="x.png"), member("p2", photo="  ")], resolver)

        assert seen == ["x.png"]
        assert people["p1"].photo_ref is None
        assert people["p2"].photo_ref is None

    def test_missing_fields_degrade(self, no_photos):
        person = normalize_records([{"id": 9}], no_photos)["9"]
        assert person.first_name == ""
        assert person.gender is Gender.MALE
        assert person.date_of_birth == ""
        assert person.generation == 1
        assert person.age() == 0
