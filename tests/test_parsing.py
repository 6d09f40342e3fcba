"""Tests for record parsing and date helpers."""

from datetime import date
import json
import logging

import pytest

from familyforest.models import Gender, ParentChildKind, SpousalKind
from familyforest.parsing import (
    RecordError,
    calculate_age,
    format_date,
    load_json,
    load_records,
    parse_date_string,
    parse_person,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1954-11-25", "1954-11-25"),
        ("1954-11-25T00:00:00.000Z", "1954-11-25"),
        ("1954-11", "1954-11-01"),
        ("1954", "1954-01-01"),
        ("11/25/1954", "1954-11-25"),
        ("25 NOV 1954", "1954-11-25"),
        ("November 1954", "1954-11-01"),
        (date(1954, 11, 25), "1954-11-25"),
        ("1954-02-30", None),
        ("sometime", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_date_string(raw, expected):
    assert parse_date_string(raw) == expected


def test_format_date():
    assert format_date("1950-03-04") == "Mar 4, 1950"
    assert format_date(None) == "Unknown"


def test_calculate_age():
    today = date(2020, 6, 15)
    assert calculate_age("1950-06-15", today=today) == "70 years old"
    assert calculate_age("1950-06-16", today=today) == "69 years old"
    assert calculate_age("1950-06-15", "2000-12-01") == "50 years old (deceased)"
    assert calculate_age(None) == "Unknown age"


def test_parse_person():
    person = parse_person(
        {
            "id": 7,
            "firstName": "Ada",
            "lastName": "Lovelace",
            "birthDate": "1815-12-10T00:00:00.000Z",
            "deathDate": "1852-11-27",
            "gender": "FEMALE",
            "imageUrl": "https://example.org/ada.png",
        }
    )

    assert person.id == "7"
    assert person.full_name == "Ada Lovelace"
    assert person.birth_date == "1815-12-10"
    assert person.gender is Gender.FEMALE
    assert person.bio is None


def test_parse_person_tolerates_missing_name_and_odd_gender(caplog):
    with caplog.at_level(logging.WARNING):
        person = parse_person({"id": "x", "gender": "robot"})

    assert person.first_name == "Unknown"
    assert person.gender is Gender.UNKNOWN
    assert "no first name" in caplog.text
    assert "Unknown Gender value" in caplog.text


def test_parse_person_requires_an_id():
    with pytest.raises(RecordError):
        parse_person({"firstName": "Nobody"})


def test_load_flat_records():
    people, parent_child, spousal = load_records(
        {
            "people": [{"id": "a", "firstName": "A"}, {"id": "b", "firstName": "B"}],
            "relationships": [{"parentId": "a", "childId": "b", "type": "ADOPTED"}, {"parentId": "a"}],
            "spouses": [{"spouse1Id": "a", "spouse2Id": "b", "type": "PARTNER", "startDate": "2001"}],
        }
    )

    assert [p.id for p in people] == ["a", "b"]
    assert len(parent_child) == 1
    assert parent_child[0].kind is ParentChildKind.ADOPTED
    assert spousal[0].kind is SpousalKind.PARTNER
    assert spousal[0].start_date == "2001-01-01"


def test_load_nested_api_records_deduplicates_relations():
    payload = [
        {
            "id": "dad",
            "firstName": "John",
            "gender": "MALE",
            "parentRelations": [{"parentId": "dad", "childId": "kid", "type": "BIOLOGICAL"}],
            "childRelations": [],
            "spouseRelations1": [{"spouse1Id": "dad", "spouse2Id": "mom", "type": "MARRIED"}],
            "spouseRelations2": [],
        },
        {
            "id": "mom",
            "firstName": "Jane",
            "parentRelations": [{"parentId": "mom", "childId": "kid"}],
            "childRelations": [],
            "spouseRelations1": [],
            "spouseRelations2": [{"spouse1Id": "dad", "spouse2Id": "mom", "spouse1": {"id": "dad"}}],
        },
        {
            "id": "kid",
            "firstName": "Kid",
            "parentRelations": [],
            "childRelations": [
                {"parentId": "dad", "childId": "kid", "parent": {"id": "dad"}},
                {"parentId": "mom", "childId": "kid", "parent": {"id": "mom"}},
            ],
            "spouseRelations1": [],
            "spouseRelations2": [],
        },
    ]
    people, parent_child, spousal = load_records(payload)

    assert [p.id for p in people] == ["dad", "mom", "kid"]
    assert [(r.parent_id, r.child_id) for r in parent_child] == [("dad", "kid"), ("mom", "kid")]
    assert [(r.spouse1_id, r.spouse2_id) for r in spousal] == [("dad", "mom")]


@pytest.mark.parametrize(
    "payload",
    [
        "people",
        42,
        {"persons": []},
        {"people": ["not a record"]},
        {"people": "everyone"},
        {"people": [{"id": "a"}, {"id": "b"}], "relationships": [{"parent": "a", "childId": "b"}]},
        {"people": [{"id": "a"}, {"id": "b"}], "spouses": [{"spouse1Id": "a", "spouse2": ["b"]}]},
        [{"id": "a", "firstName": "A", "parentRelations": {"parentId": "a"}}],
    ],
)
def test_unusable_payloads(payload):
    with pytest.raises(RecordError):
        load_records(payload)


def test_load_json(tmp_path):
    path = tmp_path / "tree.json"
    path.write_text(json.dumps({"people": [{"id": "a", "firstName": "A"}]}))
    people, parent_child, spousal = load_json(path)
    assert [p.id for p in people] == ["a"]
    assert parent_child == [] and spousal == []

    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    with pytest.raises(RecordError):
        load_json(broken)


def test_null_relation_arrays_count_as_empty():
    payload = [
        {"id": "a", "firstName": "A", "parentRelations": None, "spouseRelations1": None},
        {"id": "b", "firstName": "B", "childRelations": [{"parentId": "a", "child": {"id": "b"}}]},
    ]
    people, parent_child, spousal = load_records(payload)

    assert [p.id for p in people] == ["a", "b"]
    assert [(r.parent_id, r.child_id) for r in parent_child] == [("a", "b")]
    assert spousal == []
    assert load_records({"people": [], "relationships": None, "spouses": None}) == ([], [], [])
