from helpers import parent, parents, partner, people

from kinlayout.constants import CANVAS_MARGIN, HALF_CELL, NODE_WIDTH, ROW_HEIGHT
from kinlayout.generational import (
    ChildGroup,
    ClaimRegistry,
    LayoutNode,
    generational_grid,
    generational_layout,
    place_groups,
)
from kinlayout.graph import build_relationship_graph
from kinlayout.models import Person
from kinlayout.trace import collecting_trace


def grid_of(everyone, rels, collapsed=()):
    graph = build_relationship_graph(everyone, rels)
    return {g.id: (g.half_col, g.row) for g in generational_grid(everyone, graph, collapsed)}


def test_couple_with_child():
    grid = grid_of(people("A", "B", "C"), [partner("A", "B"), *parents("A", "B", "C")])

    assert grid == {"A": (0, 0), "B": (2, 0), "C": (1, 1)}


def test_pixel_conversion_centers_node_footprint():
    everyone = people("A", "B", "C")
    graph = build_relationship_graph(everyone, [partner("A", "B"), *parents("A", "B", "C")])

    positions = {p.id: (p.x, p.y) for p in generational_layout(everyone, graph)}

    assert positions["A"] == (CANVAS_MARGIN - NODE_WIDTH / 2, CANVAS_MARGIN)
    assert positions["B"] == (CANVAS_MARGIN + 2 * HALF_CELL - NODE_WIDTH / 2, CANVAS_MARGIN)
    assert positions["C"] == (CANVAS_MARGIN + HALF_CELL - NODE_WIDTH / 2, CANVAS_MARGIN + ROW_HEIGHT)


def test_empty_input():
    graph = build_relationship_graph([], [])
    assert generational_layout([], graph) == []


def test_unconnected_people_are_independent_roots_side_by_side():
    everyone = people("A", "B", "C")
    grid = grid_of(everyone, [])

    assert [grid[i][1] for i in "ABC"] == [0, 0, 0]
    assert grid["A"][0] < grid["B"][0] < grid["C"][0]
    assert grid_of(everyone, []) == grid


def test_ex_partner_children_and_current_partner_children_do_not_overlap():
    everyone = people("A", "X", "B", "X1", "X2", "B1")
    rels = [
        partner("A", "X", "divorced"),
        partner("A", "B"),
        *parents("A", "X", "X1", "X2"),
        *parents("A", "B", "B1"),
    ]
    grid = grid_of(everyone, rels)

    assert grid["X"] == (-2, 0)
    assert grid["B"] == (2, 0)
    # two children directly below each parent of the ex couple
    assert grid["X1"] == (-2, 1)
    assert grid["X2"] == (0, 1)
    # the current partner's group moves right, the ex group stays
    assert grid["B1"][0] > 1
    assert grid["B1"][0] - 1 >= grid["X2"][0] + 1


def test_most_recent_ex_sits_closest():
    everyone = people("A", "Old", "Recent")
    rels = [partner("A", "Old", "divorced"), partner("A", "Recent", "separated")]
    grid = grid_of(everyone, rels)

    assert grid["Recent"] == (-2, 0)
    assert grid["Old"] == (-4, 0)


def test_solo_children_centered_under_parent():
    everyone = people("A", "K")
    grid = grid_of(everyone, [parent("A", "K")])
    assert grid["K"] == (0, 1)


def test_partners_share_row_and_have_distinct_x():
    everyone = people("GP1", "GP2", "P", "S", "K")
    rels = [
        partner("GP1", "GP2"),
        *parents("GP1", "GP2", "P"),
        partner("P", "S"),
        *parents("P", "S", "K"),
    ]
    grid = grid_of(everyone, rels)

    assert grid["P"][1] == grid["S"][1] == 1
    assert grid["P"][0] != grid["S"][0]
    assert grid["K"] == ((grid["P"][0] + grid["S"][0]) / 2, 2)


def test_partner_married_in_is_not_rerooted():
    # S has no parents but is claimed as P's partner, so S never starts a tree
    everyone = people("S", "GP", "P")
    rels = [partner("P", "S"), parent("GP", "P")]
    graph = build_relationship_graph(everyone, rels)

    hook, events = collecting_trace()
    grid = generational_grid(everyone, graph, trace=hook)

    assert sorted(g.id for g in grid) == ["GP", "P", "S"]
    roots = [data["ids"] for event, data in events if event == "roots"]
    assert roots == [["GP"]]


def test_every_visible_person_positioned_once():
    # C has three recorded parents; the single-claim rule keeps them unique
    everyone = people("A", "B", "Step", "C")
    rels = [
        partner("A", "B"),
        partner("B", "Step"),
        *parents("A", "B", "C"),
        parent("Step", "C"),
    ]
    graph = build_relationship_graph(everyone, rels)
    grid = generational_grid(everyone, graph)

    assert sorted(g.id for g in grid) == ["A", "B", "C", "Step"]


def test_collapsed_branch_is_not_positioned():
    everyone = people("A", "B", "C", "D")
    rels = [partner("A", "B"), *parents("A", "B", "C"), parent("C", "D")]
    grid = grid_of(everyone, rels, {"A_B"})
    assert set(grid) == {"A", "B"}


def test_second_root_offset_by_first_root_bounds():
    everyone = people("A", "B", "Z")
    grid = grid_of(everyone, [partner("A", "B")])
    # A spans [-1, 3] with B at +2; gap of 4; Z's own left bound is -1
    assert grid["Z"] == (3 + 4 + 1, 0)


def test_place_groups_only_shifts_later_groups():
    wide = LayoutNode(Person("w"), left=-3, right=3)
    narrow = LayoutNode(Person("n"))
    groups = place_groups([ChildGroup(-1, [wide]), ChildGroup(1, [narrow])])

    assert groups[0].positions == [-1]
    assert groups[1].left >= groups[0].right
    assert groups[1].positions[0] > 1


def test_claim_registry():
    claims = ClaimRegistry()
    assert claims.claim("A") is True
    assert claims.claim("A") is False
    assert claims.is_claimed("A")
    assert not claims.is_claimed("B")


def test_trace_hook_receives_node_and_position_events():
    everyone = people("A", "B", "C")
    graph = build_relationship_graph(everyone, [partner("A", "B"), *parents("A", "B", "C")])
    hook, events = collecting_trace()

    generational_layout(everyone, graph, trace=hook)

    names = [event for event, _ in events]
    assert names[0] == "roots"
    assert names.count("node") == 2
    assert names.count("position") == 3


def test_stepchild_placed_under_parent_who_married_in():
    # S married into the family; K is S's child with nobody in the tree
    everyone = people("GP", "P", "S", "K")
    rels = [parent("GP", "P"), partner("P", "S"), parent("S", "K")]
    grid = grid_of(everyone, rels)

    assert grid["P"] == (0, 1)
    assert grid["S"] == (2, 1)
    assert grid["K"] == (grid["S"][0], grid["S"][1] + 1)


def test_stepchildren_sit_beside_the_couples_children():
    everyone = people("P", "S", "Both", "Step")
    rels = [partner("P", "S"), *parents("P", "S", "Both"), parent("S", "Step")]
    grid = grid_of(everyone, rels)

    assert grid["Both"][1] == grid["Step"][1] == 1
    assert grid["Step"][0] - 1 >= grid["Both"][0] + 1


def test_partner_of_married_in_root_does_not_steal_them():
    # E was married to S, who is now with P; P's side must keep S
    rels = [
        partner("E", "S", "divorced"),
        partner("P", "S"),
        parent("GP", "P"),
        *parents("P", "S", "C"),
    ]
    grid = grid_of(people("E", "GP", "P", "S", "C"), rels)

    assert grid["P"] == (0, 1)
    assert grid["S"] == (2, 1)
    assert grid["C"] == (1, 2)
    assert grid["E"][1] == 0
    assert grid_of(people("C", "S", "P", "GP", "E"), rels) == grid


def test_two_children_fall_back_to_centered_packing_when_too_wide():
    # C1 brings a partner, so one child under each parent would overlap
    everyone = people("A", "B", "C1", "C2", "D")
    rels = [partner("A", "B"), *parents("A", "B", "C1", "C2"), partner("C1", "D")]
    grid = grid_of(everyone, rels)

    assert grid["C1"] == (-1, 1)
    assert grid["D"] == (1, 1)
    assert grid["C2"] == (3, 1)
    # the packed pair spans [-2, 4], centered on the A-B pair center
    assert (grid["C1"][0] - 1 + grid["C2"][0] + 1) / 2 == 1
