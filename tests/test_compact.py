from helpers import parent, parents, partner, people

from kinlayout.compact import compact_layout
from kinlayout.constants import (
    CANVAS_MARGIN_X,
    CANVAS_MARGIN_Y,
    COMPACT_BRANCH_INDENT,
    COMPACT_PARTNER_GAP,
    COMPACT_ROW_HEIGHT,
    NODE_WIDTH,
)
from kinlayout.graph import build_relationship_graph


def layout_of(everyone, rels, collapsed=()):
    graph = build_relationship_graph(everyone, rels)
    return {p.id: (p.x, p.y) for p in compact_layout(everyone, graph, collapsed)}


def test_partner_beside_and_children_below():
    positions = layout_of(
        people("A", "B", "C1", "C2"), [partner("A", "B"), *parents("A", "B", "C1", "C2")]
    )

    assert positions["A"] == (CANVAS_MARGIN_X, CANVAS_MARGIN_Y)
    assert positions["B"] == (CANVAS_MARGIN_X + COMPACT_PARTNER_GAP, CANVAS_MARGIN_Y)
    assert positions["C1"] == (CANVAS_MARGIN_X, CANVAS_MARGIN_Y + COMPACT_ROW_HEIGHT)
    assert positions["C2"] == (
        CANVAS_MARGIN_X + NODE_WIDTH + COMPACT_BRANCH_INDENT / 2,
        CANVAS_MARGIN_Y + COMPACT_ROW_HEIGHT,
    )


def test_root_trees_spaced_by_width():
    positions = layout_of(people("A", "B", "Z"), [partner("A", "B")])

    width = COMPACT_PARTNER_GAP + NODE_WIDTH
    assert positions["Z"] == (CANVAS_MARGIN_X + width + COMPACT_BRANCH_INDENT, CANVAS_MARGIN_Y)


def test_every_visible_person_once():
    everyone = people("A", "B", "C", "D")
    rels = [partner("A", "B"), *parents("A", "B", "C"), parent("C", "D")]
    graph = build_relationship_graph(everyone, rels)

    ids = [p.id for p in compact_layout(everyone, graph)]

    assert sorted(ids) == ["A", "B", "C", "D"]
    assert [p.id for p in compact_layout(everyone, graph, {"A_B"})] == ["A", "B"]


def test_empty_input():
    graph = build_relationship_graph([], [])
    assert compact_layout([], graph) == []
