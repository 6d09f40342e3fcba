"""Visualization functions for positioned family forests."""

import logging
from pathlib import Path

import pydot

from familyforest.models import SPOUSE, CoupleNode, Gender, Layout, Person

logger = logging.getLogger(__name__)

NODE_HEIGHT = 80.0

FILL_COLORS = {
    Gender.MALE: "lightblue",
    Gender.FEMALE: "lightpink",
}


def fill_color(person: Person) -> str:
    return FILL_COLORS.get(person.gender, "lightgray")


def person_label(person: Person) -> str:
    # Extract years from ISO dates
    birth_year = person.birth_date[:4] if person.birth_date else ""
    death_year = person.death_date[:4] if person.death_date else ""
    return f"{person.first_name}\n{person.last_name or ''}\n{birth_year}-{death_year}"


def person_positions(layout: Layout) -> dict[str, tuple[float, float]]:
    """Centre of every person's box, couples split into their two slots."""
    positions: dict[str, tuple[float, float]] = {}
    for node in layout.iter_nodes():
        if isinstance(node, CoupleNode):
            xa, xb = node.member_positions()
            positions[node.person_a.id] = (xa, node.y)
            positions[node.person_b.id] = (xb, node.y)
        else:
            positions[node.person.id] = (node.x, node.y)
    return positions


def layout_to_dot(layout: Layout, node_width: float = 160.0) -> pydot.Dot:
    """
    Build a Graphviz graph whose node positions are pinned to the layout.

    Render with `neato -n` (the graph sets layout=neato) to keep the
    coordinates; Graphviz's y axis points up, so y is negated.
    """
    P = pydot.Dot(graph_type="digraph")
    P.set("layout", "neato")
    P.set("splines", "ortho")
    P.set("outputorder", "edgesfirst")

    people = _people(layout)
    for person_id, (x, y) in person_positions(layout).items():
        person = people[person_id]
        P.add_node(
            pydot.Node(
                str(person_id),
                label=person_label(person),
                shape="box",
                style="rounded,filled",
                fillcolor=fill_color(person),
                fontsize="10",
                width=f"{node_width / 72:.2f}",
                height=f"{NODE_HEIGHT / 72:.2f}",
                fixedsize="true",
                pos=f"{x:.1f},{-y:.1f}!",
            )
        )

    for edge in layout.edges:
        if edge.kind == SPOUSE:
            P.add_edge(pydot.Edge(str(edge.from_id), str(edge.to_id), dir="none", style="dashed", color="deeppink"))
        else:
            P.add_edge(pydot.Edge(str(edge.from_id), str(edge.to_id), color="darkgray"))

    return P


def _people(layout: Layout) -> dict[str, Person]:
    return {m.id: m for node in layout.iter_nodes() for m in node.members}


def plot_layout(layout: Layout, output_path: Path | None = None, node_width: float = 160.0):
    """
    Draw the positioned forest with matplotlib.

    People are rounded boxes coloured by gender; parent-child edges are drawn
    as steps from the parent's box down to the child's, spouse edges as dashed
    lines. Saves to `output_path` when given, otherwise shows a window.
    """
    import matplotlib.pyplot as plt
    from matplotlib.patches import FancyBboxPatch

    positions = person_positions(layout)
    people = _people(layout)

    fig, ax = plt.subplots(figsize=(20, 16))
    half_w, half_h = node_width / 2, NODE_HEIGHT / 2

    for edge in layout.edges:
        x1, y1 = positions[edge.from_id]
        x2, y2 = positions[edge.to_id]
        if edge.kind == SPOUSE:
            ax.plot([x1, x2], [-y1, -y2], linestyle="--", color="deeppink", linewidth=0.8, zorder=1)
        else:
            mid = -(y1 + half_h + (y2 - half_h - y1 - half_h) / 2)
            ax.plot(
                [x1, x1, x2, x2],
                [-(y1 + half_h), mid, mid, -(y2 - half_h)],
                color="gray",
                linewidth=0.8,
                zorder=1,
            )

    for person_id, (x, y) in positions.items():
        person = people[person_id]
        ax.add_patch(
            FancyBboxPatch(
                (x - half_w, -y - half_h),
                node_width,
                NODE_HEIGHT,
                boxstyle="round,pad=2",
                facecolor=fill_color(person),
                edgecolor="dimgray",
                zorder=2,
            )
        )
        ax.text(x, -y, person_label(person), ha="center", va="center", fontsize=6, zorder=3)

    ax.set_aspect("equal")
    ax.autoscale_view()
    ax.axis("off")
    ax.set_title(f"Family Tree ({len(positions)} people, {len(layout.roots)} roots)")
    fig.tight_layout()

    if output_path:
        fig.savefig(output_path, dpi=150, bbox_inches="tight")
        logger.info("Graph saved to %s", output_path)
        plt.close(fig)
    else:
        plt.show()
