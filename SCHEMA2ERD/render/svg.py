"""SVG construction for table cards and relationship links.

The canvas is an ElementTree document with one viewport group holding
three layers (links, labels, tables, bottom to top). Renderers return small
handle objects so controllers can update attributes in place instead of
rebuilding elements.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from SCHEMA2ERD.layout.geometry import (
    DEFAULT_GEOMETRY,
    HEADER_CORNER_RADIUS,
    Geometry,
    TableBox,
    format_number,
    rounded_top_rect_path,
)
from SCHEMA2ERD.routing.router import RoutedLink, link_endpoints

SVG_NS = "http://www.w3.org/2000/svg"
ET.register_namespace("", SVG_NS)

EXTRA_ROW_ATTR = "data-extra"


def _q(tag: str) -> str:
    return f"{{{SVG_NS}}}{tag}"


def class_list(el: ET.Element) -> List[str]:
    return (el.get("class") or "").split()


def has_class(el: ET.Element, name: str) -> bool:
    return name in class_list(el)


def toggle_class(el: ET.Element, name: str, on: bool) -> None:
    classes = [c for c in class_list(el) if c != name]
    if on:
        classes.append(name)
    if classes:
        el.set("class", " ".join(classes))
    elif "class" in el.attrib:
        del el.attrib["class"]


def set_style(el: ET.Element, prop: str, value: Optional[str]) -> None:
    """Set or remove one inline style property."""
    styles = {}
    for part in (el.get("style") or "").split(";"):
        if ":" in part:
            k, v = part.split(":", 1)
            styles[k.strip()] = v.strip()
    if value is None:
        styles.pop(prop, None)
    else:
        styles[prop] = value
    if styles:
        el.set("style", ";".join(f"{k}:{v}" for k, v in styles.items()))
    elif "style" in el.attrib:
        del el.attrib["style"]


class SvgCanvas:
    """Root `<svg>` plus the viewport group and its layers."""

    def __init__(self, width: float = 1200, height: float = 800):
        self.width = width
        self.height = height
        self.reset()

    def reset(self) -> None:
        """Drop every element and recreate empty layers."""
        self.svg = ET.Element(_q("svg"), {
            "width": format_number(self.width),
            "height": format_number(self.height),
            "viewBox": f"0 0 {format_number(self.width)} {format_number(self.height)}",
            "class": "erd-canvas",
        })
        self.viewport = ET.SubElement(self.svg, _q("g"), {"class": "viewport"})
        self.link_layer = ET.SubElement(self.viewport, _q("g"), {"class": "links"})
        self.label_layer = ET.SubElement(self.viewport, _q("g"), {"class": "labels"})
        self.table_layer = ET.SubElement(self.viewport, _q("g"), {"class": "tables"})
        self.empty_state: Optional[ET.Element] = None

    def resize(self, width: float, height: float) -> None:
        self.width = width
        self.height = height
        self.svg.set("width", format_number(width))
        self.svg.set("height", format_number(height))
        self.svg.set("viewBox", f"0 0 {format_number(width)} {format_number(height)}")

    def set_viewport_transform(self, transform: str) -> None:
        self.viewport.set("transform", transform)

    def show_empty_state(self, message: str = "Paste a schema to see its diagram") -> None:
        if self.empty_state is None:
            self.empty_state = ET.SubElement(self.svg, _q("text"), {
                "class": "empty-state",
                "x": format_number(self.width / 2),
                "y": format_number(self.height / 2),
                "text-anchor": "middle",
            })
        self.empty_state.text = message

    def hide_empty_state(self) -> None:
        if self.empty_state is not None:
            self.svg.remove(self.empty_state)
            self.empty_state = None

    def raise_to_top(self, el: ET.Element) -> None:
        """Move a table group to the end of its layer so it paints last."""
        self.table_layer.remove(el)
        self.table_layer.append(el)

    def to_string(self) -> str:
        return ET.tostring(self.svg, encoding="unicode")


@dataclass
class RowElements:
    rect: ET.Element
    name: ET.Element
    type: ET.Element
    extra: bool = False

    def elements(self):
        return (self.rect, self.name, self.type)


@dataclass
class TableElement:
    box: TableBox
    group: ET.Element
    outline: ET.Element
    header: ET.Element
    title: ET.Element
    rows: List[RowElements] = field(default_factory=list)

    def sync_position(self) -> None:
        self.group.set("transform", f"translate({format_number(self.box.x)},{format_number(self.box.y)})")

    def sync_height(self) -> None:
        self.outline.set("height", format_number(self.box.h))

    def set_extra_rows(self, opacity: float, visible: bool) -> None:
        for row in self.rows:
            if not row.extra:
                continue
            for el in row.elements():
                el.set("opacity", format_number(opacity))
                set_style(el, "display", None if visible else "none")

    def extra_rows(self) -> List[RowElements]:
        return [r for r in self.rows if r.extra]


@dataclass
class LinkElement:
    from_id: str
    to_id: str
    color: str
    path: ET.Element
    start_label: ET.Element
    end_label: ET.Element

    def apply_route(self, routed: RoutedLink) -> None:
        self.path.set("d", routed.path)
        for el, label in ((self.start_label, routed.start_label), (self.end_label, routed.end_label)):
            el.text = label.text
            el.set("x", format_number(label.x))
            el.set("y", format_number(label.y))
            el.set("text-anchor", label.anchor)
            el.set("dominant-baseline", "central")

    def elements(self):
        return (self.path, self.start_label, self.end_label)


class TableRenderer:
    """Draws one card per box into the table layer."""

    def __init__(self, geometry: Geometry = DEFAULT_GEOMETRY, compact_rows: int = 3):
        self.geometry = geometry
        self.compact_rows = compact_rows

    def render(self, canvas: SvgCanvas, boxes: Sequence[TableBox], compact: bool = False) -> Dict[str, TableElement]:
        g = self.geometry
        elements: Dict[str, TableElement] = {}
        for box in boxes:
            group = ET.SubElement(canvas.table_layer, _q("g"), {"class": "table", "data-id": box.id})
            outline = ET.SubElement(group, _q("rect"), {
                "class": "table-outline",
                "width": format_number(box.w),
                "height": format_number(box.h),
            })
            header = ET.SubElement(group, _q("path"), {
                "class": "header",
                "d": rounded_top_rect_path(box.w, g.hdr_h, HEADER_CORNER_RADIUS),
            })
            title = ET.SubElement(group, _q("text"), {
                "class": "title",
                "x": format_number(g.padx),
                "y": format_number(g.hdr_h / 2 + 5),
            })
            title.text = box.id

            table = TableElement(box=box, group=group, outline=outline, header=header, title=title)
            for i, f in enumerate(box.fields):
                y = g.hdr_h + i * g.row_h
                rect = ET.SubElement(group, _q("rect"), {
                    "class": "row alt" if i % 2 else "row",
                    "x": "0",
                    "y": format_number(y),
                    "width": format_number(box.w),
                    "height": format_number(g.row_h),
                })
                name = ET.SubElement(group, _q("text"), {
                    "class": "cell-name",
                    "x": format_number(g.padx),
                    "y": format_number(y + g.row_h / 2 + 5),
                })
                name.text = str(f[0]) if len(f) > 0 else ""
                type_ = ET.SubElement(group, _q("text"), {
                    "class": "cell-type",
                    "x": format_number(box.w - g.padx),
                    "y": format_number(y + g.row_h / 2 + 5),
                    "text-anchor": "end",
                })
                type_.text = str(f[1]) if len(f) > 1 else ""

                row = RowElements(rect=rect, name=name, type=type_, extra=i >= self.compact_rows)
                if row.extra:
                    for el in row.elements():
                        el.set(EXTRA_ROW_ATTR, "1")
                table.rows.append(row)

            table.set_extra_rows(0.0 if compact else 1.0, visible=not compact)
            table.sync_position()
            elements[box.id] = table
        return elements


class LinkRenderer:
    """Creates one path and two cardinality labels per link."""

    def render(
        self, canvas: SvgCanvas, links: Sequence, color_at: Callable[[int], str]
    ) -> List[LinkElement]:
        result = []
        for index, link in enumerate(links):
            from_id, to_id, _, _ = link_endpoints(link)
            color = color_at(index)
            path = ET.SubElement(canvas.link_layer, _q("path"), {"class": "link"})
            set_style(path, "stroke", color)
            labels = []
            for _ in range(2):
                label = ET.SubElement(canvas.label_layer, _q("text"), {"class": "cardmark"})
                set_style(label, "fill", color)
                labels.append(label)
            result.append(LinkElement(
                from_id=from_id,
                to_id=to_id,
                color=color,
                path=path,
                start_label=labels[0],
                end_label=labels[1],
            ))
        return result
