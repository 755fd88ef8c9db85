"""Compact layout: simple top-down tree placement used as a fallback."""

from collections.abc import Iterable

from kinlayout.constants import DEFAULT_CONFIG, LayoutConfig
from kinlayout.graph import RelationshipGraph, primary_parent_set, sort_people_stable
from kinlayout.models import LayoutPosition, Person
from kinlayout.trace import TraceHook, emit
from kinlayout.visibility import visible_people


def _layout_subtree(
    person_id: str,
    x: float,
    y: float,
    graph: RelationshipGraph,
    by_id: dict[str, Person],
    placed: set[str],
    config: LayoutConfig,
) -> tuple[list[LayoutPosition], float]:
    """
    Place a person, their partners to the right and their children below.

    Returns the positions and the width the subtree takes up.
    """
    if person_id in placed:
        return [], 0
    placed.add(person_id)

    positions = [LayoutPosition(person_id, x, y)]
    width = config.node_width

    partner_x = x
    for link in graph.partner_links.get(person_id, []):
        if link.partner_id in placed or link.partner_id not in by_id:
            continue
        partner_x += config.compact_partner_gap
        positions.append(LayoutPosition(link.partner_id, partner_x, y))
        placed.add(link.partner_id)
        width = max(width, partner_x - x + config.node_width)

    children = [by_id[c] for c in graph.children_of(person_id) if c in by_id]
    child_x = x
    for child in sort_people_stable(children):
        if child.id in placed:
            continue
        child_positions, child_width = _layout_subtree(
            child.id, child_x, y + config.compact_row_height, graph, by_id, placed, config
        )
        positions.extend(child_positions)
        child_x += child_width + config.branch_indent / 2
        width = max(width, child_x - x)

    return positions, width


def compact_layout(
    people: Iterable[Person],
    graph: RelationshipGraph,
    collapsed: Iterable[str] = (),
    config: LayoutConfig | None = None,
    trace: TraceHook | None = None,
) -> list[LayoutPosition]:
    config = config or DEFAULT_CONFIG
    visible = visible_people(people, graph, collapsed)
    by_id = {p.id: p for p in visible}

    def is_root(person: Person) -> bool:
        parents = primary_parent_set(person.id, graph)
        return parents is None or not any(pid in by_id for pid in parents.parent_ids)

    roots = sort_people_stable(p for p in visible if is_root(p))
    emit(trace, "roots", ids=[r.id for r in roots])

    positions: list[LayoutPosition] = []
    placed: set[str] = set()
    x = config.margin_x
    # Anyone not reached from a root (e.g. a cycle) starts a tree of their own
    for person in roots + sort_people_stable(visible):
        if person.id in placed:
            continue
        subtree, width = _layout_subtree(person.id, x, config.margin_y, graph, by_id, placed, config)
        positions.extend(subtree)
        x += width + config.branch_indent
    return positions
