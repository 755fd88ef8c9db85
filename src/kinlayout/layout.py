"""Strategy dispatch: records in, positions out."""

from collections.abc import Iterable

from kinlayout.compact import compact_layout
from kinlayout.constants import LayoutConfig
from kinlayout.generational import generational_layout
from kinlayout.graph import build_relationship_graph
from kinlayout.models import LayoutPosition, coerce_people, coerce_relationships
from kinlayout.timeline import timeline_layout
from kinlayout.trace import TraceHook

STRATEGIES = {
    "generational": generational_layout,
    "timeline": timeline_layout,
    "compact": compact_layout,
}


def compute_layout(
    people: Iterable,
    relationships: Iterable,
    collapsed: Iterable[str] = (),
    strategy: str = "generational",
    config: LayoutConfig | None = None,
    trace: TraceHook | None = None,
) -> list[LayoutPosition]:
    """
    Lay out a family chart from scratch.

    Args:
        people: Person instances or person records (mappings)
        relationships: Relationship instances or relationship records
        collapsed: collapse keys ("<a>_<b>" or "<id>_solo")
        strategy: "generational", "timeline" or "compact"
        config: overrides for the layout constants
        trace: optional diagnostic hook receiving (event, data)

    Returns:
        One LayoutPosition per visible person
    """
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown layout strategy: {strategy!r}")

    people = coerce_people(people)
    graph = build_relationship_graph(people, coerce_relationships(relationships))
    return STRATEGIES[strategy](people, graph, collapsed, config=config, trace=trace)
