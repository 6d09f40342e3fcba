"""Turn indexed people and relations into a forest of person and couple nodes."""

import logging
from dataclasses import dataclass, field

from familyforest.config import LayoutSettings
from familyforest.graph import GraphIndex
from familyforest.models import CoupleNode, Person, PersonNode, TreeNode

logger = logging.getLogger(__name__)


@dataclass
class TraversalContext:
    """State for one forest build. Every person is claimed at most once."""

    index: GraphIndex
    settings: LayoutSettings
    visited: set[str] = field(default_factory=set)

    def is_free(self, person: Person) -> bool:
        return person.id not in self.visited

    def first_free_spouse(self, person: Person) -> Person | None:
        for spouse in self.index.spouses_of(person.id):
            if self.is_free(spouse):
                return spouse
        return None

    def ordered(self, people: list[Person]) -> list[Person]:
        if self.settings.order_by_birth:
            return sorted(people, key=Person.birth_sort_key)
        return people


def build_forest(index: GraphIndex, settings: LayoutSettings | None = None) -> list[TreeNode]:
    """
    Build the forest of root nodes covering every indexed person exactly once.

    Roots are people without recorded parents. A root whose first free spouse
    also has no parents becomes a couple root; if that spouse does have
    parents the root is deferred, since the couple will be reached through the
    spouse's ancestry. When no root comes out of that pass, the oldest people
    are used instead. Anyone still unreached afterwards becomes a root of
    their own.
    """
    ctx = TraversalContext(index=index, settings=settings or LayoutSettings())
    roots: list[TreeNode] = []

    candidates = [p for p in index.people.values() if not index.has_parents(p.id)]
    for person in ctx.ordered(candidates):
        if not ctx.is_free(person):
            continue
        spouse = ctx.first_free_spouse(person)
        if spouse is not None and index.has_parents(spouse.id):
            logger.debug("Deferring %s: spouse %s has recorded parents", person.id, spouse.id)
            continue
        roots.append(_grow(ctx, person, spouse))

    if not roots and len(index):
        oldest = sorted(index.people.values(), key=Person.birth_sort_key)
        fallback = oldest[: ctx.settings.fallback_root_count]
        logger.info("No root people found; using oldest %s as roots", [p.id for p in fallback])
        for person in fallback:
            if ctx.is_free(person):
                roots.append(_grow(ctx, person, ctx.first_free_spouse(person)))

    for person in index.people.values():
        if ctx.is_free(person):
            logger.debug("Promoting unreached person %s to a root", person.id)
            roots.append(_grow(ctx, person, ctx.first_free_spouse(person)))

    return roots


def _make_unit(ctx: TraversalContext, person: Person, spouse: Person | None) -> TreeNode:
    ctx.visited.add(person.id)
    if spouse is None:
        return PersonNode(person)
    ctx.visited.add(spouse.id)
    return CoupleNode(person, spouse)


def _unit_children(ctx: TraversalContext, node: TreeNode) -> list[Person]:
    """Unclaimed children of every member of a unit, deduplicated, first member's first."""
    seen: dict[str, Person] = {}
    for member in node.members:
        for child in ctx.index.children_of(member.id):
            if ctx.is_free(child) and child.id not in seen:
                seen[child.id] = child
    return ctx.ordered(list(seen.values()))


def _grow(ctx: TraversalContext, person: Person, spouse: Person | None) -> TreeNode:
    """Build a unit and attach its descendants depth-first with an explicit stack."""
    root = _make_unit(ctx, person, spouse)
    stack = [root]
    while stack:
        node = stack.pop()
        children = _unit_children(ctx, node)
        # Siblings are claimed together so none of them is pulled in as a spouse
        ctx.visited.update(c.id for c in children)
        for child in children:
            node.children.append(_make_unit(ctx, child, ctx.first_free_spouse(child)))
        stack.extend(reversed(node.children))
    return root
