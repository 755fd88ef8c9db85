"""
Timeline layout: vertical position driven by birth year.

People with a known birth date are placed by years since the earliest known
birth. Everyone else derives y from relatives, with a small deterministic
jitter so unknown dates never collide exactly.
"""

import logging
import zlib
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from math import floor

from kinlayout.constants import DEFAULT_CONFIG, LayoutConfig
from kinlayout.graph import RelationshipGraph, primary_parent_set, sort_people_stable
from kinlayout.models import LayoutPosition, Person
from kinlayout.trace import TraceHook, emit
from kinlayout.visibility import visible_people

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365.25
JITTER_STEPS = 7  # odd, so the offsets are symmetric around 0


def parse_iso_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def stable_offset(person: Person, config: LayoutConfig = DEFAULT_CONFIG) -> float:
    """Deterministic jitter in [-3, +3] steps, keyed on creation order or id."""
    if person.creation_order is not None:
        base = person.creation_order
    else:
        base = zlib.crc32(person.id.encode("utf-8"))
    centered = base % JITTER_STEPS - JITTER_STEPS // 2
    step = max(2, floor(config.generation_band / 12))
    return centered * step


def _mean(values: list[float]) -> float | None:
    return sum(values) / len(values) if values else None


def _known_ys(ids: Iterable[str], y_positions: dict[str, float]) -> list[float]:
    return [y_positions[i] for i in sorted(ids) if i in y_positions]


def derive_y_from_relatives(
    person: Person,
    graph: RelationshipGraph,
    y_positions: dict[str, float],
    config: LayoutConfig = DEFAULT_CONFIG,
) -> float:
    """
    Y for a person without a usable birth date.

    Strategies, first match wins: primary parents (+ generation offset),
    siblings, partners, children (- generation offset), then 0.
    """
    offset = stable_offset(person, config)
    generation = config.year_height * config.child_years_offset

    parents = primary_parent_set(person.id, graph)
    if parents is not None:
        avg = _mean(_known_ys(parents.parent_ids, y_positions))
        if avg is not None:
            return avg + generation + offset

    for relatives in (graph.siblings_of(person.id), graph.partners_of(person.id)):
        avg = _mean(_known_ys(relatives, y_positions))
        if avg is not None:
            return avg + offset

    avg = _mean(_known_ys(graph.children_of(person.id), y_positions))
    if avg is not None:
        return avg - generation + offset

    return offset


def calculate_y_positions(
    people: Iterable[Person], graph: RelationshipGraph, config: LayoutConfig = DEFAULT_CONFIG
) -> dict[str, float]:
    people = list(people)
    known = {p.id: parse_iso_date(p.birth_date) for p in people if p.has_known_birth}
    known = {pid: d for pid, d in known.items() if d is not None}

    earliest = min(known.values(), default=None) or date.fromisoformat(config.epoch)

    y_positions: dict[str, float] = {}
    for pid, born in known.items():
        years = (born - earliest).days / DAYS_PER_YEAR
        y_positions[pid] = years * config.year_height

    # Creation order first so chains of unknowns resolve the same way every time
    unknown = sorted(
        (p for p in people if p.id not in known),
        key=lambda p: (p.creation_order is None, p.creation_order or 0, p.id),
    )
    for person in unknown:
        y_positions[person.id] = derive_y_from_relatives(person, graph, y_positions, config)

    return y_positions


# ============================================================================
# Family units
# ============================================================================


@dataclass(frozen=True)
class FamilyUnit:
    key: str  # "<parent_type>|<sorted parent ids>"
    parents: tuple[str, ...]
    children: tuple[str, ...]


def shared_children_exact(
    parent_ids: Iterable[str], graph: RelationshipGraph, parent_type: str | None = None
) -> list[str]:
    """
    Children shared by all of `parent_ids` whose primary parent set is
    exactly that combination (and of `parent_type`, when given). Half-siblings
    sharing only one parent are left out.
    """
    parents = sorted(set(parent_ids))
    if not parents:
        return []

    candidates = set(graph.children_of(parents[0]))
    for pid in parents[1:]:
        candidates &= graph.children_of(pid)

    result = []
    for child_id in candidates:
        primary = primary_parent_set(child_id, graph)
        if primary is None or list(primary.parent_ids) != parents:
            continue
        if parent_type is None or primary.parent_type == parent_type:
            result.append(child_id)
    return sorted(result)


def identify_family_units(people: Iterable[Person], graph: RelationshipGraph) -> list[FamilyUnit]:
    """Group children by their exact primary parent set."""
    people = list(people)
    by_id = {p.id: p for p in people}
    signatures: dict[str, tuple[str, tuple[str, ...]]] = {}

    for child in people:
        primary = primary_parent_set(child.id, graph)
        if primary is not None:
            key = f"{primary.parent_type}|{','.join(primary.parent_ids)}"
            signatures.setdefault(key, (primary.parent_type, primary.parent_ids))

    def earliest_order(children: list[Person]) -> float:
        orders = [c.creation_order for c in children if c.creation_order is not None]
        return min(orders, default=float("inf"))

    result = []
    for key, (parent_type, parents) in signatures.items():
        children = [by_id[c] for c in shared_children_exact(parents, graph, parent_type) if c in by_id]
        result.append(FamilyUnit(key, parents, tuple(c.id for c in sort_people_stable(children))))
    result.sort(key=lambda u: (earliest_order([by_id[c] for c in u.children]), u.key))
    return result


# ============================================================================
# Horizontal placement
# ============================================================================


class OccupancyMap:
    """Occupied x intervals, bucketed by y."""

    def __init__(self, config: LayoutConfig):
        self.config = config
        self._buckets: dict[int, list[tuple[float, float]]] = {}

    def _bucket(self, y: float) -> int:
        return floor(y / self.config.bucket_height)

    def is_free(self, x: float, y: float) -> bool:
        half_width = self.config.node_width / 2
        reach = self.config.node_height / 2
        for bucket in range(self._bucket(y - reach), self._bucket(y + reach) + 1):
            for start, end in self._buckets.get(bucket, ()):
                if x + half_width > start and x - half_width < end:
                    return False
        return True

    def occupy(self, x: float, y: float) -> None:
        half_width = self.config.node_width / 2
        self._buckets.setdefault(self._bucket(y), []).append((x - half_width, x + half_width))


def _find_x(
    person: Person,
    y: float,
    graph: RelationshipGraph,
    placed: dict[str, LayoutPosition],
    occupancy: OccupancyMap,
    config: LayoutConfig,
) -> float:
    for link in graph.partner_links.get(person.id, []):
        partner = placed.get(link.partner_id)
        if partner is not None:
            candidate = partner.x + config.timeline_partner_gap
            if occupancy.is_free(candidate, y):
                return candidate

    parents = primary_parent_set(person.id, graph)
    if parents is not None:
        xs = [placed[pid].x for pid in parents.parent_ids if pid in placed]
        if xs:
            candidate = sum(xs) / len(xs)
            if occupancy.is_free(candidate, y):
                return candidate

    x = config.margin_x
    while not occupancy.is_free(x, y):
        x += config.min_sibling_gap
    return x


def timeline_layout(
    people: Iterable[Person],
    graph: RelationshipGraph,
    collapsed: Iterable[str] = (),
    config: LayoutConfig | None = None,
    trace: TraceHook | None = None,
    y_positions: dict[str, float] | None = None,
) -> list[LayoutPosition]:
    config = config or DEFAULT_CONFIG
    people = list(people)
    if y_positions is None:
        y_positions = calculate_y_positions(people, graph, config)

    visible = visible_people(people, graph, collapsed)
    ordered = sorted(visible, key=lambda p: y_positions.get(p.id, 0))

    occupancy = OccupancyMap(config)
    placed: dict[str, LayoutPosition] = {}
    for person in ordered:
        y = y_positions.get(person.id, 0)
        x = _find_x(person, y, graph, placed, occupancy, config)
        occupancy.occupy(x, y)
        placed[person.id] = LayoutPosition(person.id, x, y + config.margin_y)
        emit(trace, "position", id=person.id, x=x, y=y)

    logger.debug("Timeline layout: %d positions", len(placed))
    return list(placed.values())
