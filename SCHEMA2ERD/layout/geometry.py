"""Box geometry for table cards.

A `TableBox` is the mutable runtime view of one table: its fields, its
measured size and its top-left position. Layout, routing, drag and
compaction all read and write these objects in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, NamedTuple, Optional, Sequence

TextMeasure = Callable[[str, str], float]


@dataclass(frozen=True)
class Geometry:
    padx: float = 18.0
    row_h: float = 28.0
    hdr_h: float = 34.0
    min_w: float = 260.0
    name_type_gap: float = 18.0


DEFAULT_GEOMETRY = Geometry()
HEADER_CORNER_RADIUS = 8.0


@dataclass
class TableBox:
    id: str
    fields: List[List[str]] = field(default_factory=list)
    x: Optional[float] = None
    y: Optional[float] = None
    w: float = 0.0
    h: float = 0.0
    full_h: float = 0.0
    compact_h: float = 0.0

    def has_position(self) -> bool:
        return self.x is not None and self.y is not None

    @property
    def cx(self) -> float:
        return (self.x or 0.0) + self.w / 2

    @property
    def cy(self) -> float:
        return (self.y or 0.0) + self.h / 2

    def move_to(self, x: float, y: float) -> None:
        self.x = x
        self.y = y


class Bounds(NamedTuple):
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self):
        return ((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)


def boxes_from_nodes(nodes: Iterable) -> List[TableBox]:
    """Build boxes from graph nodes (pydantic `GraphNode`s or plain dicts).

    A position is kept only when both coordinates are numbers.
    """
    boxes = []
    for node in nodes:
        data = node if isinstance(node, dict) else node.model_dump()
        x, y = data.get("x"), data.get("y")
        positioned = isinstance(x, (int, float)) and isinstance(y, (int, float))
        boxes.append(TableBox(
            id=str(data["id"]),
            fields=[list(f) for f in data.get("fields") or []],
            x=float(x) if positioned else None,
            y=float(y) if positioned else None,
        ))
    return boxes


def apply_table_dimensions(
    boxes: Sequence[TableBox],
    measure: TextMeasure,
    geometry: Geometry = DEFAULT_GEOMETRY,
    compact: bool = False,
    compact_rows: int = 3,
) -> None:
    """Size each box from measured title, column-name and column-type widths.

    `measure(text, css_class)` returns a width in pixels; the classes used
    are `title`, `cell-name` and `cell-type`.
    """
    g = geometry
    for box in boxes:
        title_w = measure(box.id, "title")
        max_name_w = 0.0
        max_type_w = 0.0
        for f in box.fields:
            name = str(f[0]) if len(f) > 0 and f[0] is not None else ""
            type_ = str(f[1]) if len(f) > 1 and f[1] is not None else ""
            max_name_w = max(max_name_w, measure(name, "cell-name"))
            max_type_w = max(max_type_w, measure(type_, "cell-type"))

        content_w = max(title_w, max_name_w + g.name_type_gap + max_type_w)
        box.w = max(g.min_w, g.padx + content_w + g.padx)
        box.full_h = g.hdr_h + len(box.fields) * g.row_h
        box.compact_h = g.hdr_h + min(compact_rows, len(box.fields)) * g.row_h
        box.h = box.compact_h if compact else box.full_h


def compute_bounds(boxes: Sequence[TableBox]) -> Bounds:
    if not boxes:
        return Bounds(0.0, 0.0, 0.0, 0.0)
    return Bounds(
        min_x=min(b.x for b in boxes),
        min_y=min(b.y for b in boxes),
        max_x=max(b.x + b.w for b in boxes),
        max_y=max(b.y + b.h for b in boxes),
    )


def rectangles_overlap(a: TableBox, b: TableBox, padding: float = 0.0) -> bool:
    return not (
        a.x + a.w + padding <= b.x
        or b.x + b.w + padding <= a.x
        or a.y + a.h + padding <= b.y
        or b.y + b.h + padding <= a.y
    )


def format_number(value: float) -> str:
    """Render a coordinate for SVG attributes.

    At most three decimals, trailing zeros trimmed, never `-0`.
    """
    rounded = round(float(value), 3)
    if rounded == 0:
        return "0"
    text = f"{rounded:.3f}".rstrip("0").rstrip(".")
    return text


def rounded_top_rect_path(width: float, height: float, radius: float = HEADER_CORNER_RADIUS) -> str:
    """Path for a rectangle whose two top corners are rounded."""
    w, h = width, height
    r = min(radius, w / 2, h)
    f = format_number
    return f"M0,{f(r)} Q0,0 {f(r)},0 H{f(w - r)} Q{f(w)},0 {f(w)},{f(r)} V{f(h)} H0 Z"
