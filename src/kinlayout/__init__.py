"""Relationship graph and chart layout engine for family trees."""

from kinlayout.compact import compact_layout
from kinlayout.constants import LayoutConfig
from kinlayout.generational import generational_grid, generational_layout
from kinlayout.graph import (
    RelationshipGraph,
    build_relationship_graph,
    make_pair_key,
    primary_parent_set,
)
from kinlayout.layout import compute_layout
from kinlayout.models import (
    GridPosition,
    LayoutPosition,
    ParentLink,
    Person,
    PrimaryParentSet,
    Relationship,
)
from kinlayout.timeline import identify_family_units, timeline_layout
from kinlayout.visibility import all_collapse_keys, toggle_collapse, visible_people

__all__ = [
    "GridPosition",
    "LayoutConfig",
    "LayoutPosition",
    "ParentLink",
    "Person",
    "PrimaryParentSet",
    "Relationship",
    "RelationshipGraph",
    "all_collapse_keys",
    "build_relationship_graph",
    "compact_layout",
    "compute_layout",
    "generational_grid",
    "generational_layout",
    "identify_family_units",
    "make_pair_key",
    "primary_parent_set",
    "timeline_layout",
    "toggle_collapse",
    "visible_people",
]
