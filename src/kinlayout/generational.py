"""
Generational layout: one row per generation, partners side by side.

Positions are computed on an abstract grid first. The horizontal unit is the
half-cell (a node spans one half-cell either side of its center) and the
vertical unit is the generation row. Relative to a person at half-col 0:

    current partner      +2   (pair center +1)
    exes                 -2, -4, -6, ...   (pair centers -1, -2, -3, ...)
    solo children        centered at 0
    stepchildren         centered under their own parent

The most recently recorded ex sits closest to the person. Child groups are
ordered left to right as: exes (oldest first), solo, current partner. A
partner's children by someone else sit on the far side of that partner's
shared group.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from kinlayout.constants import DEFAULT_CONFIG, LayoutConfig
from kinlayout.graph import CURRENT, RelationshipGraph, primary_parent_set, sort_people_stable
from kinlayout.models import GridPosition, LayoutPosition, Person
from kinlayout.trace import TraceHook, emit
from kinlayout.visibility import visible_people

logger = logging.getLogger(__name__)


@dataclass
class PartnerSlot:
    person: Person
    status: str
    half_col: float  # relative to the owning node
    pair_center: float
    children: list["LayoutNode"] = field(default_factory=list)
    # The partner's children by someone outside this node, centered under the partner
    own_children: list["LayoutNode"] = field(default_factory=list)

    @property
    def is_current(self) -> bool:
        return self.status == CURRENT


@dataclass
class LayoutNode:
    person: Person
    partners: list[PartnerSlot] = field(default_factory=list)  # exes left to right, then current
    solo_children: list["LayoutNode"] = field(default_factory=list)
    half_col: float = 0
    row: int = 0
    # Subtree bounds relative to this node's half_col
    left: float = -1
    right: float = 1


@dataclass
class ChildGroup:
    center: float
    children: list[LayoutNode]
    parent_cols: tuple[float, ...] = ()  # both parents' half-cols for a couple
    positions: list[float] = field(default_factory=list)
    left: float = 0
    right: float = 0

    def shift(self, offset: float) -> None:
        self.positions = [p + offset for p in self.positions]
        self.left += offset
        self.right += offset


class ClaimRegistry:
    """Tracks who has been placed so nobody is rendered twice."""

    def __init__(self):
        self._claimed: set[str] = set()

    def claim(self, person_id: str) -> bool:
        """Claim `person_id`; False when someone already claimed them."""
        if person_id in self._claimed:
            return False
        self._claimed.add(person_id)
        return True

    def is_claimed(self, person_id: str) -> bool:
        return person_id in self._claimed


# ============================================================================
# Pass (a): tree construction
# ============================================================================


class _TreeBuilder:
    def __init__(self, visible: list[Person], graph: RelationshipGraph, trace: TraceHook | None):
        self.graph = graph
        self.by_id = {p.id: p for p in visible}
        self.claims = ClaimRegistry()
        self.trace = trace

    def build(self, person: Person) -> LayoutNode | None:
        if not self.claims.claim(person.id):
            return None

        node = LayoutNode(person=person, partners=self._partner_slots(person))

        my_children = {c for c in self.graph.children_of(person.id) if c in self.by_id}
        assigned: set[str] = set()
        for slot in node.partners:
            shared = my_children & self.graph.children_of(slot.person.id)
            assigned |= shared
            slot.children = self._build_children(shared)
        node.solo_children = self._build_children(my_children - assigned)
        for slot in node.partners:
            theirs = {c for c in self.graph.children_of(slot.person.id) if c in self.by_id}
            slot.own_children = self._build_children(theirs - my_children)

        emit(
            self.trace,
            "node",
            id=person.id,
            partners=[(s.person.id, s.status, s.half_col) for s in node.partners],
            children=len(_all_children(node)),
        )
        return node

    def _build_children(self, child_ids: Iterable[str]) -> list[LayoutNode]:
        children = []
        for child in sort_people_stable(self.by_id[c] for c in child_ids):
            child_node = self.build(child)
            if child_node is not None:
                children.append(child_node)
        return children

    def _partner_slots(self, person: Person) -> list[PartnerSlot]:
        links = [
            link
            for link in self.graph.partner_links.get(person.id, [])
            if link.partner_id in self.by_id and link.partner_id != person.id
        ]
        current = next((link for link in links if link.status == CURRENT), None)
        exes = [link for link in links if link.status != CURRENT]

        ex_slots = []
        # Most recent ex (last recorded) sits closest at -2
        for link in reversed(exes):
            if not self.claims.claim(link.partner_id):
                continue
            half_col = -2 - 2 * len(ex_slots)
            ex_slots.append(
                PartnerSlot(self.by_id[link.partner_id], link.status, half_col, half_col / 2)
            )
        slots = list(reversed(ex_slots))

        if current is not None and self.claims.claim(current.partner_id):
            slots.append(PartnerSlot(self.by_id[current.partner_id], CURRENT, 2, 1))
        return slots


def _find_roots(visible: list[Person], graph: RelationshipGraph) -> list[Person]:
    """
    People with no visible primary parent, in input order.

    A root partnered with someone who has visible parents is claimed as that
    person's partner, so it never starts a tree of its own. Roots partnered
    with such a claimed root (directly or through a chain of partners) go
    last, after the trees that claim their partner are built.
    """
    visible_ids = {p.id for p in visible}

    def is_root(person: Person) -> bool:
        parents = primary_parent_set(person.id, graph)
        return parents is None or not any(pid in visible_ids for pid in parents.parent_ids)

    roots = [p for p in visible if is_root(p)]
    root_ids = {p.id for p in roots}

    married_in = {
        r.id
        for r in roots
        if any(pid in visible_ids and pid not in root_ids for pid in graph.partners_of(r.id))
    }
    late: set[str] = set()
    changed = True
    while changed:
        changed = False
        for r in roots:
            if r.id in married_in or r.id in late:
                continue
            if graph.partners_of(r.id) & (married_in | late):
                late.add(r.id)
                changed = True

    early = [r for r in roots if r.id not in married_in and r.id not in late]
    return early + [r for r in roots if r.id in late]


def build_forest(
    visible: list[Person], graph: RelationshipGraph, trace: TraceHook | None = None
) -> list[LayoutNode]:
    """Build one tree per root; anyone left unreached becomes an extra root."""
    builder = _TreeBuilder(visible, graph, trace)
    roots = _find_roots(visible, graph)
    emit(trace, "roots", ids=[r.id for r in roots])

    forest = []
    for person in roots + visible:
        if builder.claims.is_claimed(person.id):
            continue
        node = builder.build(person)
        if node is not None:
            forest.append(node)
    return forest


# ============================================================================
# Pass (b): bottom-up subtree bounds
# ============================================================================


def child_groups(node: LayoutNode) -> list[ChildGroup]:
    """
    Groups left to right: for each ex (oldest first) the ex's own children
    then the shared ones, solo, then the current partner's shared children
    and their own.
    """
    groups = []
    for slot in node.partners:
        if slot.is_current:
            continue
        if slot.own_children:
            groups.append(ChildGroup(slot.half_col, slot.own_children))
        if slot.children:
            groups.append(ChildGroup(slot.pair_center, slot.children, (0, slot.half_col)))
    if node.solo_children:
        groups.append(ChildGroup(0, node.solo_children))
    for slot in node.partners:
        if not slot.is_current:
            continue
        if slot.children:
            groups.append(ChildGroup(slot.pair_center, slot.children, (0, slot.half_col)))
        if slot.own_children:
            groups.append(ChildGroup(slot.half_col, slot.own_children))
    return groups


def _centered_positions(children: list[LayoutNode], center: float, gap: float) -> list[float]:
    if len(children) == 1:
        return [center]
    total = sum(c.right - c.left for c in children) + gap * (len(children) - 1)
    cursor = center - total / 2
    positions = []
    for child in children:
        positions.append(cursor - child.left)
        cursor += child.right - child.left + gap
    return positions


def _below_each_parent(group: ChildGroup, gap: float) -> list[float] | None:
    """One child under each parent of a couple, or None if they would overlap."""
    if len(group.children) != 2 or len(group.parent_cols) != 2:
        return None
    first, second = group.children
    lo, hi = sorted(group.parent_cols)
    if lo + first.right + gap > hi + second.left:
        return None
    return [lo, hi]


def place_groups(groups: list[ChildGroup], config: LayoutConfig = DEFAULT_CONFIG) -> list[ChildGroup]:
    """Pack each group under its center, then sweep left to right removing overlap."""
    for group in groups:
        group.positions = _below_each_parent(group, config.min_subtree_gap) or _centered_positions(
            group.children, group.center, config.min_subtree_gap
        )
        group.left = min(p + c.left for p, c in zip(group.positions, group.children))
        group.right = max(p + c.right for p, c in zip(group.positions, group.children))

    for prev, curr in zip(groups, groups[1:]):
        overlap = prev.right - curr.left + config.min_group_gap
        if overlap > 0:
            curr.shift(overlap)
    return groups


def calculate_bounds(node: LayoutNode, config: LayoutConfig = DEFAULT_CONFIG) -> None:
    for child in _all_children(node):
        calculate_bounds(child, config)

    left, right = -1.0, 1.0
    for slot in node.partners:
        left = min(left, slot.half_col - 1)
        right = max(right, slot.half_col + 1)

    for group in place_groups(child_groups(node), config):
        left = min(left, group.left)
        right = max(right, group.right)

    node.left, node.right = left, right


def _all_children(node: LayoutNode) -> list[LayoutNode]:
    children = [c for slot in node.partners for c in slot.children + slot.own_children]
    return children + node.solo_children


# ============================================================================
# Pass (c): top-down coordinate assignment
# ============================================================================


def assign_coordinates(node: LayoutNode, half_col: float, row: int, config: LayoutConfig) -> None:
    node.half_col = half_col
    node.row = row
    for group in place_groups(child_groups(node), config):
        for position, child in zip(group.positions, group.children):
            assign_coordinates(child, half_col + position, row + 1, config)


def _collect(nodes: list[LayoutNode], out: list[GridPosition]) -> None:
    for node in nodes:
        out.append(GridPosition(node.person.id, node.half_col, node.row))
        for slot in node.partners:
            out.append(GridPosition(slot.person.id, node.half_col + slot.half_col, node.row))
        for slot in node.partners:
            _collect(slot.children, out)
            _collect(slot.own_children, out)
        _collect(node.solo_children, out)


def generational_grid(
    people: Iterable[Person],
    graph: RelationshipGraph,
    collapsed: Iterable[str] = (),
    config: LayoutConfig | None = None,
    trace: TraceHook | None = None,
) -> list[GridPosition]:
    """Half-col/row coordinates for every visible person."""
    config = config or DEFAULT_CONFIG
    visible = visible_people(people, graph, collapsed)
    if not visible:
        return []

    forest = build_forest(visible, graph, trace)

    offset = 0.0
    for i, root in enumerate(forest):
        calculate_bounds(root, config)
        if i > 0:
            prev = forest[i - 1]
            offset = prev.half_col + prev.right + config.root_gap - root.left
        assign_coordinates(root, offset, 0, config)

    grid: list[GridPosition] = []
    _collect(forest, grid)
    if trace is not None:
        for pos in grid:
            emit(trace, "position", id=pos.id, half_col=pos.half_col, row=pos.row)

    logger.debug("Generational layout: %d trees, %d positions", len(forest), len(grid))
    return grid


def grid_to_pixels(pos: GridPosition, config: LayoutConfig | None = None) -> LayoutPosition:
    """Pixel top-left corner of a node whose center sits on the grid point."""
    config = config or DEFAULT_CONFIG
    return LayoutPosition(
        pos.id,
        config.canvas_margin + pos.half_col * config.half_cell - config.node_width / 2,
        config.canvas_margin + pos.row * config.row_height,
    )


def generational_layout(
    people: Iterable[Person],
    graph: RelationshipGraph,
    collapsed: Iterable[str] = (),
    config: LayoutConfig | None = None,
    trace: TraceHook | None = None,
) -> list[LayoutPosition]:
    grid = generational_grid(people, graph, collapsed, config, trace)
    return [grid_to_pixels(pos, config) for pos in grid]
