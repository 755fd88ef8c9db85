"""Layout constants and the per-call configuration that carries them."""

from dataclasses import dataclass

# Shared node footprint (pixels)
NODE_WIDTH = 120
NODE_HEIGHT = 80

# Generational layout
HALF_CELL = 80  # pixels per half-cell
ROW_HEIGHT = 180
CANVAS_MARGIN = 300
MIN_SUBTREE_GAP = 0  # bounds already include the node footprint
MIN_GROUP_GAP = 2  # half-cells between child groups of different partners
ROOT_GAP = 4  # half-cells between independent root trees

# Timeline layout
TIMELINE_YEAR_HEIGHT = 100  # pixels per year
TIMELINE_MIN_SIBLING_GAP = 140
TIMELINE_PARTNER_GAP = 120
TIMELINE_GENERATION_BAND = 40  # vertical tolerance for "same generation"
TIMELINE_CHILD_YEARS_OFFSET = 25  # years between a parent and a derived child
TIMELINE_BUCKET_HEIGHT = 10  # y-bucket size of the occupancy map
TIMELINE_EPOCH = "1900-01-01"

# Compact layout
COMPACT_ROW_HEIGHT = 100
COMPACT_BRANCH_INDENT = 150
COMPACT_PARTNER_GAP = 120

CANVAS_MARGIN_X = 100
CANVAS_MARGIN_Y = 50


@dataclass(frozen=True)
class LayoutConfig:
    node_width: float = NODE_WIDTH
    node_height: float = NODE_HEIGHT

    half_cell: float = HALF_CELL
    row_height: float = ROW_HEIGHT
    canvas_margin: float = CANVAS_MARGIN
    min_subtree_gap: float = MIN_SUBTREE_GAP
    min_group_gap: float = MIN_GROUP_GAP
    root_gap: float = ROOT_GAP

    year_height: float = TIMELINE_YEAR_HEIGHT
    min_sibling_gap: float = TIMELINE_MIN_SIBLING_GAP
    timeline_partner_gap: float = TIMELINE_PARTNER_GAP
    generation_band: float = TIMELINE_GENERATION_BAND
    child_years_offset: float = TIMELINE_CHILD_YEARS_OFFSET
    bucket_height: float = TIMELINE_BUCKET_HEIGHT
    epoch: str = TIMELINE_EPOCH

    compact_row_height: float = COMPACT_ROW_HEIGHT
    branch_indent: float = COMPACT_BRANCH_INDENT
    compact_partner_gap: float = COMPACT_PARTNER_GAP

    margin_x: float = CANVAS_MARGIN_X
    margin_y: float = CANVAS_MARGIN_Y


DEFAULT_CONFIG = LayoutConfig()
