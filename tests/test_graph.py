"""Tests for the networkx-backed person/relation index."""

import logging

from conftest import make_person

from familyforest.graph import GraphIndex, canonical_pair, canonical_pair_key
from familyforest.models import ParentChildRelation, SpousalRelation


def ids(people):
    return [p.id for p in people]


def test_canonical_pair_key_ignores_argument_order():
    assert canonical_pair_key("b", "a") == canonical_pair_key("a", "b") == "a_b"
    assert canonical_pair("z", "m") == ("m", "z")


def test_lookups(three_generations):
    index = GraphIndex.build(*three_generations)

    assert index.person_by_id("dad").first_name == "Dad"
    assert index.person_by_id("nobody") is None
    assert ids(index.children_of("dad")) == ["k1", "k2"]
    assert ids(index.parents_of("k1")) == ["dad", "mom"]
    assert ids(index.parents_of("gp")) == []
    assert ids(index.spouses_of("mom")) == ["dad"]
    assert ids(index.spouses_of("dad")) == ["mom"]
    assert index.children_of("nobody") == []
    assert index.has_parents("dad")
    assert not index.has_parents("mom")
    assert index.is_parent_of("mom", "k2")
    assert not index.is_parent_of("k2", "mom")


def test_spouse_relation_resolves_from_both_sides():
    people = [make_person("a"), make_person("b")]
    index = GraphIndex.build(people, [], [SpousalRelation("b", "a")])

    assert ids(index.spouses_of("a")) == ["b"]
    assert ids(index.spouses_of("b")) == ["a"]
    assert index.spousal_relation("a", "b") is index.spousal_relation("b", "a")
    assert index.spouse_pairs() == [("a", "b")]


def test_duplicate_relations_collapse():
    people = [make_person("a"), make_person("b"), make_person("c")]
    index = GraphIndex.build(
        people,
        [ParentChildRelation("a", "c"), ParentChildRelation("a", "c")],
        [SpousalRelation("a", "b"), SpousalRelation("b", "a"), SpousalRelation("a", "b")],
    )

    assert index.parent_child_pairs() == [("a", "c")]
    assert index.spouse_pairs() == [("a", "b")]
    assert ids(index.spouses_of("a")) == ["b"]


def test_self_and_dangling_relations_are_dropped(caplog):
    people = [make_person("a"), make_person("b")]
    with caplog.at_level(logging.WARNING, logger="familyforest.graph"):
        index = GraphIndex.build(
            people,
            [
                ParentChildRelation("a", "a"),
                ParentChildRelation("ghost", "a"),
                ParentChildRelation("a", "b"),
            ],
            [SpousalRelation("b", "b"), SpousalRelation("a", "ghost")],
        )

    assert index.parent_child_pairs() == [("a", "b")]
    assert index.spouse_pairs() == []
    assert "ghost" not in index
    messages = " ".join(r.getMessage() for r in caplog.records)
    assert "self parent-child" in messages
    assert "self spousal" in messages
    assert messages.count("unknown person") == 2


def test_duplicate_person_keeps_first_record(caplog):
    with caplog.at_level(logging.WARNING, logger="familyforest.graph"):
        index = GraphIndex.build([make_person("a"), make_person("a", last_name="Other")])

    assert len(index) == 1
    assert index.person_by_id("a").last_name is None
    assert "Duplicate person id" in caplog.text


def test_orphans_and_stats(three_generations):
    people, parent_child, spousal = three_generations
    people = people + [make_person("loner")]
    index = GraphIndex.build(people, parent_child, spousal)

    assert ids(index.orphans()) == ["loner"]
    assert index.stats() == {
        "people": 7,
        "couples": 2,
        "parent_child": 6,
        "roots": 4,
        "orphans": 1,
    }
