"""Axis-aligned routes between two anchors."""

from __future__ import annotations

from typing import List, Tuple

from .anchors import Anchor, is_horizontal

Point = Tuple[float, float]


def project(anchor: Anchor, offset: float) -> Point:
    """Step `offset` pixels out of the box along the side's normal."""
    return (anchor.x + anchor.dx * offset, anchor.y + anchor.dy * offset)


def manhattan(p1: Anchor, p2: Anchor, side1: str, side2: str, offset: float = 12.0) -> List[Point]:
    """Orthogonal polyline from `p1` to `p2`.

    Two horizontal sides share a vertical midline, two vertical sides share a
    horizontal midline, and mixed sides meet at a single elbow.
    """
    start = (p1.x, p1.y)
    end = (p2.x, p2.y)
    a1 = project(p1, offset)
    a2 = project(p2, offset)

    if is_horizontal(side1):
        if is_horizontal(side2):
            mx = (a1[0] + a2[0]) / 2
            return [start, a1, (mx, a1[1]), (mx, a2[1]), a2, end]
        return [start, a1, (a2[0], a1[1]), a2, end]

    if not is_horizontal(side2):
        my = (a1[1] + a2[1]) / 2
        return [start, a1, (a1[0], my), (a2[0], my), a2, end]
    return [start, a1, (a1[0], a2[1]), a2, end]
