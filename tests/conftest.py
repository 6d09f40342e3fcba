import matplotlib

matplotlib.use("Agg")

import pytest

from familyforest.models import ParentChildRelation, Person, SpousalRelation


def make_person(pid: str, **kwargs) -> Person:
    return Person(id=pid, first_name=pid.title(), **kwargs)


@pytest.fixture
def three_generations():
    """
    Grandparents gp+gm (married), their son dad married to mom (no recorded
    parents), and two children of dad+mom.
    """
    people = [make_person(pid) for pid in ["gp", "gm", "dad", "mom", "k1", "k2"]]
    parent_child = [
        ParentChildRelation("gp", "dad"),
        ParentChildRelation("gm", "dad"),
        ParentChildRelation("dad", "k1"),
        ParentChildRelation("mom", "k1"),
        ParentChildRelation("dad", "k2"),
        ParentChildRelation("mom", "k2"),
    ]
    spousal = [SpousalRelation("gp", "gm"), SpousalRelation("dad", "mom")]
    return people, parent_child, spousal
