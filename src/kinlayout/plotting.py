"""Preview rendering of computed layout positions."""

from pathlib import Path

import matplotlib.pyplot as plt
import pydot
from matplotlib.patches import Rectangle

from kinlayout.constants import NODE_HEIGHT, NODE_WIDTH
from kinlayout.graph import RelationshipGraph, birth_year, primary_parent_set
from kinlayout.models import LayoutPosition, Person
from kinlayout.timeline import identify_family_units


def _centers(positions: list[LayoutPosition]) -> dict[str, tuple[float, float]]:
    # Positions are top-left corners of the node footprint
    return {p.id: (p.x + NODE_WIDTH / 2, p.y + NODE_HEIGHT / 2) for p in positions}


def _label(person: Person | None, person_id: str) -> str:
    if person is None:
        return person_id
    label = person.name or person_id
    year = birth_year(person)
    return f"{label}\n{year}" if year is not None else label


def partner_pairs(positions: list[LayoutPosition], graph: RelationshipGraph) -> list[tuple[str, str]]:
    """Positioned partner pairs, each listed once, left partner first."""
    placed = {p.id: p for p in positions}
    pairs = set()
    for person_id in placed:
        for partner_id in graph.partners_of(person_id):
            if partner_id in placed and partner_id != person_id:
                a, b = sorted([person_id, partner_id], key=lambda i: (placed[i].x, i))
                pairs.add((a, b))
    return sorted(pairs)


def child_anchors(
    positions: list[LayoutPosition], graph: RelationshipGraph
) -> list[tuple[tuple[float, float], str]]:
    """
    (anchor point, child id) for every positioned child whose primary parents
    are positioned. With two parents the anchor is the midpoint between them.
    """
    centers = _centers(positions)
    people = [graph.people_by_id[i] for i in centers if i in graph.people_by_id]
    anchors = []
    for unit in identify_family_units(people, graph):
        parent_points = [centers[pid] for pid in unit.parents if pid in centers]
        if not parent_points:
            continue
        anchor = (
            sum(x for x, _ in parent_points) / len(parent_points),
            sum(y for _, y in parent_points) / len(parent_points),
        )
        anchors.extend((anchor, child_id) for child_id in unit.children if child_id in centers)
    return anchors


def plot_layout(
    positions: list[LayoutPosition],
    graph: RelationshipGraph,
    output_path: Path | None = None,
):
    """
    Draw node boxes, partner lines and parent-to-child connectors.

    Args:
        positions: output of one of the layout strategies
        graph: the graph the positions were computed from (for connectors)
        output_path: Path to save the output image (PNG). If None, displays interactively.
    """
    fig, ax = plt.subplots(figsize=(20, 16))
    centers = _centers(positions)

    for a, b in partner_pairs(positions, graph):
        (xa, ya), (xb, yb) = centers[a], centers[b]
        ax.plot([xa, xb], [ya, yb], color="darkgray", linewidth=1, zorder=1)

    for (ax_, ay), child_id in child_anchors(positions, graph):
        cx, cy = centers[child_id]
        ax.plot([ax_, cx], [ay, cy - NODE_HEIGHT / 2], color="gray", linewidth=0.8, zorder=1)

    for pos in positions:
        person = graph.people_by_id.get(pos.id)
        fillcolor = "lightgray" if person is not None and person.is_deceased else "lightblue"
        ax.add_patch(
            Rectangle(
                (pos.x, pos.y),
                NODE_WIDTH,
                NODE_HEIGHT,
                facecolor=fillcolor,
                edgecolor="black",
                linewidth=0.5,
                zorder=2,
            )
        )
        cx, cy = centers[pos.id]
        ax.text(cx, cy, _label(person, pos.id), ha="center", va="center", fontsize=6, zorder=3)

    ax.autoscale_view()
    ax.invert_yaxis()  # screen coordinates: y grows downward
    ax.set_aspect("equal")
    ax.axis("off")
    ax.set_title(f"Family chart ({len(positions)} people)")
    fig.tight_layout()

    if output_path:
        fig.savefig(output_path, dpi=150, bbox_inches="tight")
        print(f"Chart saved to {output_path}")
    else:
        plt.show()
    plt.close(fig)


def to_dot(positions: list[LayoutPosition], graph: RelationshipGraph) -> pydot.Dot:
    """
    Build a pydot graph with every node pinned at its computed position.

    Render with Graphviz neato, which honours pinned `pos` attributes, e.g.
    `P.write(path, format="png", prog="neato")`.
    """
    P = pydot.Dot(graph_type="graph")
    P.set("splines", "line")
    P.set("outputorder", "edgesfirst")

    for pos in positions:
        person = graph.people_by_id.get(pos.id)
        cx, cy = _centers([pos])[pos.id]
        P.add_node(
            pydot.Node(
                str(pos.id),
                label=_label(person, str(pos.id)),
                shape="box",
                style="rounded,filled",
                fillcolor="lightgray" if person is not None and person.is_deceased else "lightblue",
                fontsize="10",
                width=f"{NODE_WIDTH / 72:.3f}",
                height=f"{NODE_HEIGHT / 72:.3f}",
                fixedsize="true",
                # Graphviz y grows upward
                pos=f"{cx:.1f},{-cy:.1f}!",
            )
        )

    for a, b in partner_pairs(positions, graph):
        P.add_edge(pydot.Edge(str(a), str(b), color="darkgray", penwidth="2"))

    placed = {p.id for p in positions}
    for _, child_id in child_anchors(positions, graph):
        primary = primary_parent_set(child_id, graph)
        for parent_id in primary.parent_ids:
            if parent_id in placed:
                P.add_edge(pydot.Edge(str(parent_id), str(child_id), color="gray"))
    return P
