"""Table box geometry and automatic layout."""

from .geometry import (
    DEFAULT_GEOMETRY,
    Bounds,
    Geometry,
    TableBox,
    apply_table_dimensions,
    boxes_from_nodes,
    compute_bounds,
    format_number,
    rectangles_overlap,
    rounded_top_rect_path,
)
from .engine import layout_tables, needs_layout
from .overlap import resolve_overlaps

__all__ = [
    "DEFAULT_GEOMETRY",
    "Bounds",
    "Geometry",
    "TableBox",
    "apply_table_dimensions",
    "boxes_from_nodes",
    "compute_bounds",
    "format_number",
    "rectangles_overlap",
    "rounded_top_rect_path",
    "layout_tables",
    "needs_layout",
    "resolve_overlaps",
]
