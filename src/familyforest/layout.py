"""Generation and coordinate assignment for a family forest."""

from collections import deque
import logging
from typing import Iterable

from familyforest.config import LayoutSettings
from familyforest.graph import GraphIndex
from familyforest.hierarchy import build_forest
from familyforest.models import (
    PARENT_CHILD,
    SPOUSE,
    CoupleNode,
    Edge,
    Layout,
    ParentChildRelation,
    Person,
    SpousalRelation,
    TreeNode,
)

logger = logging.getLogger(__name__)


def assign_generations(roots: list[TreeNode]):
    """Breadth-first from each root; a child sits one generation below its parent."""
    seen: set[int] = set()
    for root in roots:
        if id(root) in seen:
            continue
        root.generation = 0
        seen.add(id(root))
        queue = deque([root])
        while queue:
            node = queue.popleft()
            for child in node.children:
                if id(child) in seen:
                    continue
                seen.add(id(child))
                child.generation = node.generation + 1
                queue.append(child)


def _post_order(root: TreeNode) -> list[TreeNode]:
    order: list[TreeNode] = []
    stack: list[tuple[TreeNode, bool]] = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        if expanded:
            order.append(node)
            continue
        stack.append((node, True))
        for child in reversed(node.children):
            stack.append((child, False))
    return order


def _subtree(node: TreeNode) -> Iterable[TreeNode]:
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def assign_x(roots: list[TreeNode], settings: LayoutSettings):
    """
    Tidy bottom-up placement.

    Leaves take the next free slot of their generation. A parent is centred
    over the midpoint of its first and last child; when that would overlap
    something already placed in its generation, the parent and its whole
    subtree move right until it fits.
    """
    next_left: dict[int, float] = {}

    def width(node: TreeNode) -> float:
        return settings.unit_width(isinstance(node, CoupleNode))

    def occupy(node: TreeNode):
        right = node.x + width(node) / 2 + settings.sibling_gap
        next_left[node.generation] = max(next_left.get(node.generation, right), right)

    for root in roots:
        for node in _post_order(root):
            half = width(node) / 2
            floor = next_left.get(node.generation, settings.base_x)
            if node.children:
                centre = (node.children[0].x + node.children[-1].x) / 2
                if centre - half < floor:
                    shift = floor - (centre - half)
                    for child in node.children:
                        for moved in _subtree(child):
                            moved.x += shift
                            occupy(moved)
                    centre += shift
            else:
                centre = floor + half
            node.x = centre
            occupy(node)


def assign_y(roots: list[TreeNode], settings: LayoutSettings):
    """Rows by generation; jitter only offsets children that share a parent unit."""

    def place(siblings: list[TreeNode], jitter: float):
        for i, node in enumerate(siblings):
            node.y = settings.base_y + node.generation * settings.generation_spacing
            if len(siblings) > 1 and jitter:
                node.y += ((i % 3) - 1) * jitter

    place(roots, 0)
    for root in roots:
        for node in _subtree(root):
            place(node.children, settings.sibling_jitter)


def collect_edges(roots: list[TreeNode], index: GraphIndex) -> list[Edge]:
    """
    One parent-child edge per recorded relation whose child sits exactly one
    generation below its parent in the rendered forest, plus one spouse edge
    per canonical spousal pair.
    """
    generation_of: dict[str, int] = {}
    for root in roots:
        for node in _subtree(root):
            for member in node.members:
                generation_of[member.id] = node.generation

    edges: list[Edge] = []
    for parent_id, child_id in index.parent_child_pairs():
        parent_gen = generation_of.get(parent_id)
        child_gen = generation_of.get(child_id)
        if parent_gen is None or child_gen != parent_gen + 1:
            logger.debug(
                "Not drawing %s -> %s: generations %s and %s are not adjacent",
                parent_id,
                child_id,
                parent_gen,
                child_gen,
            )
            continue
        edges.append(Edge(PARENT_CHILD, parent_id, child_id))
    edges.extend(Edge(SPOUSE, a, b) for a, b in index.spouse_pairs())
    return edges


def assign_layout(
    roots: list[TreeNode], index: GraphIndex, settings: LayoutSettings | None = None
) -> Layout:
    settings = settings or LayoutSettings()
    for root in roots:
        for node in _subtree(root):
            if isinstance(node, CoupleNode):
                node.node_width = settings.node_width
                node.marriage_gap = settings.marriage_gap
    assign_generations(roots)
    assign_x(roots, settings)
    assign_y(roots, settings)
    return Layout(roots=roots, edges=collect_edges(roots, index))


def build_layout(
    people: Iterable[Person],
    parent_child: Iterable[ParentChildRelation] = (),
    spousal: Iterable[SpousalRelation] = (),
    settings: LayoutSettings | None = None,
) -> Layout:
    """Run the whole pipeline: index the records, build the forest, position it."""
    settings = settings or LayoutSettings()
    index = GraphIndex.build(people, parent_child, spousal)
    roots = build_forest(index, settings)
    layout = assign_layout(roots, index, settings)
    logger.info(
        "Laid out %d people in %d root(s) with %d edges", len(index), len(roots), len(layout.edges)
    )
    return layout
