"""Relationship graph building and parent-set resolution."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

import networkx as nx

from kinlayout.models import (
    PARENT_CHILD,
    PARTNER,
    SIBLING,
    ParentLink,
    PartnerLink,
    Person,
    PrimaryParentSet,
    Relationship,
)

logger = logging.getLogger(__name__)

ADOPTIVE = "adoptive"
BIOLOGICAL = "biological"
UNKNOWN = "unknown"
CURRENT = "current"


@dataclass
class RelationshipGraph:
    """Id-keyed adjacency views over one family's relationships."""

    people_by_id: dict[str, Person] = field(default_factory=dict)
    # child -> [ParentLink, ...], one per recorded parent_child edge
    parents_by_child: dict[str, list[ParentLink]] = field(default_factory=dict)
    # parent -> {child, ...}
    children_by_parent: dict[str, set[str]] = field(default_factory=dict)
    partners_by_person: dict[str, set[str]] = field(default_factory=dict)
    siblings_by_person: dict[str, set[str]] = field(default_factory=dict)
    # person -> [PartnerLink, ...] in record order
    partner_links: dict[str, list[PartnerLink]] = field(default_factory=dict)
    # parent -> child edges only
    lineage: nx.DiGraph = field(default_factory=nx.DiGraph)

    def children_of(self, person_id: str) -> set[str]:
        return self.children_by_parent.get(person_id, set())

    def parent_links(self, child_id: str) -> list[ParentLink]:
        return self.parents_by_child.get(child_id, [])

    def partners_of(self, person_id: str) -> set[str]:
        return self.partners_by_person.get(person_id, set())

    def siblings_of(self, person_id: str) -> set[str]:
        return self.siblings_by_person.get(person_id, set())

    def descendants(self, person_id: str) -> set[str]:
        """Everyone reachable from `person_id` by repeated child edges."""
        if person_id not in self.lineage:
            return set()
        return nx.descendants(self.lineage, person_id)

    def shared_children(self, parent_a: str, parent_b: str) -> set[str]:
        """Children recorded under both parents (literal intersection)."""
        return self.children_of(parent_a) & self.children_of(parent_b)

    def solo_children(self, parent_id: str) -> set[str]:
        """Children of `parent_id` with no other recorded parent link."""
        return {c for c in self.children_of(parent_id) if len(self.parent_links(c)) <= 1}


def build_relationship_graph(
    people: Iterable[Person], relationships: Iterable[Relationship]
) -> RelationshipGraph:
    """
    Build every adjacency view in a single pass over the relationships.

    Partner and sibling edges are recorded in both directions; parent_child
    edges are directed from person_a (parent) to person_b (child). Duplicate
    or contradictory edges are passed through unchanged.
    """
    graph = RelationshipGraph()

    for person in people:
        graph.people_by_id[person.id] = person
        graph.lineage.add_node(person.id)

    n_edges = 0
    for rel in relationships:
        a, b = rel.person_a, rel.person_b

        if rel.type == PARTNER:
            graph.partners_by_person.setdefault(a, set()).add(b)
            graph.partners_by_person.setdefault(b, set()).add(a)
            status = rel.status or CURRENT
            graph.partner_links.setdefault(a, []).append(PartnerLink(b, status, rel.id))
            graph.partner_links.setdefault(b, []).append(PartnerLink(a, status, rel.id))
        elif rel.type == SIBLING:
            graph.siblings_by_person.setdefault(a, set()).add(b)
            graph.siblings_by_person.setdefault(b, set()).add(a)
        elif rel.type == PARENT_CHILD:
            graph.children_by_parent.setdefault(a, set()).add(b)
            graph.parents_by_child.setdefault(b, []).append(
                ParentLink(a, rel.parent_type, bool(rel.is_primary_parent_set))
            )
            graph.lineage.add_edge(a, b)
        else:
            continue
        n_edges += 1

    logger.debug(
        "Built relationship graph: %d people, %d edges",
        len(graph.people_by_id),
        n_edges,
    )
    return graph


def _unique_sorted(ids: Iterable[str]) -> tuple[str, ...]:
    return tuple(sorted(set(ids)))


def primary_parent_set(child_id: str, graph: RelationshipGraph) -> PrimaryParentSet | None:
    """
    Pick the one canonical parent set a child is anchored under.

    Priority (first non-empty wins):
    1) links explicitly flagged primary
    2) adoptive links
    3) biological links
    4) any remaining links

    Returns None when the child has no parent links.
    """
    links = graph.parent_links(child_id)
    if not links:
        return None

    explicit = [link for link in links if link.is_primary]
    if explicit:
        types = {link.parent_type or UNKNOWN for link in explicit}
        parent_type = types.pop() if len(types) == 1 else UNKNOWN
        if parent_type not in (ADOPTIVE, BIOLOGICAL):
            parent_type = UNKNOWN
        return PrimaryParentSet(parent_type, _unique_sorted(link.parent_id for link in explicit))

    for parent_type in (ADOPTIVE, BIOLOGICAL):
        ids = [link.parent_id for link in links if link.parent_type == parent_type]
        if ids:
            return PrimaryParentSet(parent_type, _unique_sorted(ids))

    return PrimaryParentSet(UNKNOWN, _unique_sorted(link.parent_id for link in links))


def make_pair_key(parent_a: str, parent_b: str | None = None) -> str:
    """Collapse key for a parent pair (sorted) or a solo parent."""
    if parent_b is None:
        return f"{parent_a}_solo"
    return "_".join(sorted([parent_a, parent_b]))


def _stable_key(person: Person) -> tuple:
    known = person.has_known_birth
    return (
        0 if known else 1,
        person.birth_date if known else "",
        person.creation_order if person.creation_order is not None else float("inf"),
        person.id,
    )


def sort_people_stable(people: Iterable[Person]) -> list[Person]:
    """Known birth dates oldest first, unknown last, then creation order, then id."""
    return sorted(people, key=_stable_key)


def birth_year(person: Person) -> int | None:
    if not person.has_known_birth:
        return None
    try:
        return int(person.birth_date[:4])
    except ValueError:
        return None
