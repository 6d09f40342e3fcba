"""NetworkX graph building and lookups over people and their relations."""

import logging
from typing import Iterable

import networkx as nx

from familyforest.models import ParentChildRelation, Person, SpousalRelation

logger = logging.getLogger(__name__)


def canonical_pair(a: str, b: str) -> tuple[str, str]:
    """Order an unordered pair of ids the same way regardless of argument order."""
    first, second = sorted([a, b], key=str)
    return first, second


def canonical_pair_key(a: str, b: str) -> str:
    return "_".join(str(i) for i in canonical_pair(a, b))


class GraphIndex:
    """
    Lookup structures over a flat snapshot of people and relations.

    Parent-child links live in a directed graph (parent -> child) and spousal
    links in an undirected one, both with every person as a node. Relations
    pointing at unknown people, self references and duplicates never make it
    into either graph.
    """

    def __init__(self):
        self.people: dict[str, Person] = {}
        self.lineage = nx.DiGraph()
        self.marriages = nx.Graph()
        self.spousal: dict[str, SpousalRelation] = {}

    @classmethod
    def build(
        cls,
        people: Iterable[Person],
        parent_child: Iterable[ParentChildRelation] = (),
        spousal: Iterable[SpousalRelation] = (),
    ) -> "GraphIndex":
        index = cls()
        for person in people:
            index._add_person(person)
        for rel in parent_child:
            index._add_parent_child(rel)
        for rel in spousal:
            index._add_spousal(rel)
        return index

    def _add_person(self, person: Person):
        if person.id in self.people:
            logger.warning("Duplicate person id %s (%s); keeping the first record", person.id, person.full_name)
            return
        self.people[person.id] = person
        self.lineage.add_node(person.id)
        self.marriages.add_node(person.id)

    def _add_parent_child(self, rel: ParentChildRelation):
        parent, child = rel.parent_id, rel.child_id
        if parent == child:
            logger.warning("Dropping self parent-child relation on %s", parent)
            return
        missing = [i for i in (parent, child) if i not in self.people]
        if missing:
            logger.warning("Dropping parent-child relation %s -> %s: unknown person %s", parent, child, missing)
            return
        if self.lineage.has_edge(parent, child):
            logger.debug("Collapsing duplicate parent-child relation %s -> %s", parent, child)
            return
        self.lineage.add_edge(parent, child, relation=rel)

    def _add_spousal(self, rel: SpousalRelation):
        a, b = rel.spouse1_id, rel.spouse2_id
        if a == b:
            logger.warning("Dropping self spousal relation on %s", a)
            return
        missing = [i for i in (a, b) if i not in self.people]
        if missing:
            logger.warning("Dropping spousal relation %s <-> %s: unknown person %s", a, b, missing)
            return
        key = canonical_pair_key(a, b)
        if key in self.spousal:
            logger.debug("Collapsing duplicate spousal relation %s <-> %s", a, b)
            return
        self.spousal[key] = rel
        self.marriages.add_edge(a, b, relation=rel)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.people)

    def __contains__(self, person_id) -> bool:
        return person_id in self.people

    def person_by_id(self, person_id: str) -> Person | None:
        return self.people.get(person_id)

    def children_of(self, person_id: str) -> list[Person]:
        if person_id not in self.lineage:
            return []
        return [self.people[c] for c in self.lineage.successors(person_id)]

    def parents_of(self, person_id: str) -> list[Person]:
        if person_id not in self.lineage:
            return []
        return [self.people[p] for p in self.lineage.predecessors(person_id)]

    def spouses_of(self, person_id: str) -> list[Person]:
        if person_id not in self.marriages:
            return []
        return [self.people[s] for s in self.marriages.neighbors(person_id)]

    def has_parents(self, person_id: str) -> bool:
        return person_id in self.lineage and self.lineage.in_degree(person_id) > 0

    def is_parent_of(self, parent_id: str, child_id: str) -> bool:
        return self.lineage.has_edge(parent_id, child_id)

    def spousal_relation(self, a: str, b: str) -> SpousalRelation | None:
        return self.spousal.get(canonical_pair_key(a, b))

    def spouse_pairs(self) -> list[tuple[str, str]]:
        """Every spousal pair once, in canonical order, in the order first recorded."""
        return [canonical_pair(r.spouse1_id, r.spouse2_id) for r in self.spousal.values()]

    def parent_child_pairs(self) -> list[tuple[str, str]]:
        return list(self.lineage.edges())

    def orphans(self) -> list[Person]:
        """People with no parent, child or spouse relation at all."""
        return [
            p
            for pid, p in self.people.items()
            if self.lineage.degree(pid) == 0 and self.marriages.degree(pid) == 0
        ]

    def stats(self) -> dict[str, int]:
        return {
            "people": len(self.people),
            "couples": self.marriages.number_of_edges(),
            "parent_child": self.lineage.number_of_edges(),
            "roots": sum(1 for pid in self.people if not self.has_parents(pid)),
            "orphans": len(self.orphans()),
        }
