"""Anchor sides and anchor points on table boxes."""

from __future__ import annotations

from typing import Dict, NamedTuple, Tuple

from SCHEMA2ERD.layout.geometry import TableBox

SIDES = ("left", "right", "top", "bottom")

DIRECTIONS: Dict[str, Tuple[int, int]] = {
    "left": (-1, 0),
    "right": (1, 0),
    "top": (0, -1),
    "bottom": (0, 1),
}


class Anchor(NamedTuple):
    x: float
    y: float
    dx: int
    dy: int


def is_horizontal(side: str) -> bool:
    """True for left/right sides, where routes leave horizontally."""
    return side in ("left", "right")


def auto_anchor(a: TableBox, b: TableBox) -> str:
    """Side of `a` facing `b`, chosen by the dominant axis between centres."""
    dx = b.cx - a.cx
    dy = b.cy - a.cy
    if abs(dx) > abs(dy):
        return "right" if dx > 0 else "left"
    return "bottom" if dy > 0 else "top"


def anchor_point(box: TableBox, side: str) -> Anchor:
    """Midpoint of `side`."""
    dx, dy = DIRECTIONS[side]
    if side == "left":
        return Anchor(box.x, box.y + box.h / 2, dx, dy)
    if side == "right":
        return Anchor(box.x + box.w, box.y + box.h / 2, dx, dy)
    if side == "top":
        return Anchor(box.x + box.w / 2, box.y, dx, dy)
    return Anchor(box.x + box.w / 2, box.y + box.h, dx, dy)


def anchor_point_with_slot(
    box: TableBox, side: str, slot: int, total: int, edge_padding: float = 10.0
) -> Anchor:
    """Point `slot` of `total` evenly spaced along `side`, padded at both ends."""
    if total <= 1:
        return anchor_point(box, side)
    t = (slot + 1) / (total + 1)
    dx, dy = DIRECTIONS[side]
    along_y = box.y + edge_padding + (box.h - 2 * edge_padding) * t
    along_x = box.x + edge_padding + (box.w - 2 * edge_padding) * t
    if side == "left":
        return Anchor(box.x, along_y, dx, dy)
    if side == "right":
        return Anchor(box.x + box.w, along_y, dx, dy)
    if side == "top":
        return Anchor(along_x, box.y, dx, dy)
    return Anchor(along_x, box.y + box.h, dx, dy)
