"""Per-couple collapse and expand of descendant branches."""

import logging
from collections.abc import Iterable

from kinlayout.graph import RelationshipGraph, make_pair_key
from kinlayout.models import Person

logger = logging.getLogger(__name__)

SOLO_SUFFIX = "_solo"


def resolve_collapse_key(key: str, graph: RelationshipGraph) -> tuple[str, ...] | None:
    """
    Split a collapse key into its parent ids.

    Returns a 1-tuple for a solo key, a 2-tuple for a pair key, or None when
    the key names no known parent. Ids are matched against the graph rather
    than split blindly, so ids containing underscores still resolve.
    """
    parents = graph.children_by_parent
    if key.endswith(SOLO_SUFFIX) and key[: -len(SOLO_SUFFIX)] in parents:
        return (key[: -len(SOLO_SUFFIX)],)

    start = key.find("_")
    while start != -1:
        a, b = key[:start], key[start + 1 :]
        if a in parents and b in parents:
            return (a, b)
        start = key.find("_", start + 1)
    return None


def _children_to_hide(key: str, graph: RelationshipGraph) -> set[str]:
    parents = resolve_collapse_key(key, graph)
    if parents is None:
        return set()
    if len(parents) == 1:
        return graph.solo_children(parents[0])
    return graph.shared_children(*parents)


def hidden_ids(
    people: Iterable[Person], graph: RelationshipGraph, collapsed: Iterable[str]
) -> set[str]:
    """
    Ids hidden by the given collapse keys.

    Step 1 hides the children each key names and all their descendants.
    Step 2 repeats until stable: a partner of a hidden person who has no
    visible parent anchor is hidden too, along with their descendants.
    """
    all_ids = {p.id for p in people}
    collapsed = sorted(collapsed)
    hidden: set[str] = set()

    for key in collapsed:
        for child_id in _children_to_hide(key, graph):
            hidden.add(child_id)
            hidden |= graph.descendants(child_id)

    changed = True
    while changed:
        changed = False
        for hidden_id in list(hidden):
            for partner_id in graph.partners_of(hidden_id):
                if partner_id in hidden or partner_id not in all_ids:
                    continue
                anchored = any(
                    link.parent_id not in hidden and link.parent_id in all_ids
                    for link in graph.parent_links(partner_id)
                )
                if anchored:
                    continue
                hidden.add(partner_id)
                hidden |= graph.descendants(partner_id)
                changed = True

    if hidden:
        logger.debug("Collapse keys %s hide %d people", collapsed, len(hidden))
    return hidden


def visible_people(
    people: Iterable[Person], graph: RelationshipGraph, collapsed: Iterable[str] = ()
) -> list[Person]:
    """The input people minus everyone hidden, in input order."""
    people = list(people)
    collapsed = frozenset(collapsed)
    if not collapsed:
        return people
    hidden = hidden_ids(people, graph, collapsed)
    return [p for p in people if p.id not in hidden]


def toggle_collapse(collapsed: Iterable[str], key: str) -> frozenset[str]:
    collapsed = frozenset(collapsed)
    if key in collapsed:
        return collapsed - {key}
    return collapsed | {key}


def expand(collapsed: Iterable[str], keys: Iterable[str]) -> frozenset[str]:
    return frozenset(collapsed) - frozenset(keys)


def all_collapse_keys(graph: RelationshipGraph) -> set[str]:
    """
    Every key naming a collapsible branch.

    A child with exactly two recorded parents yields their pair key. A child
    with one recorded parent yields a solo key, unless that parent shares a
    child with one of their partners (the branch then collapses through the
    pair key).
    """
    keys: set[str] = set()
    for child_id, links in graph.parents_by_child.items():
        parent_ids = sorted({link.parent_id for link in links})
        if len(parent_ids) == 2:
            keys.add(make_pair_key(*parent_ids))
        elif len(parent_ids) == 1:
            parent_id = parent_ids[0]
            co_parent = any(
                graph.shared_children(parent_id, partner_id)
                for partner_id in graph.partners_of(parent_id)
            )
            if not co_parent:
                keys.add(make_pair_key(parent_id))
    return keys
