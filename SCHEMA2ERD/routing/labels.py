"""Cardinality label placement at both ends of a route."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

Point = Tuple[float, float]

HORIZONTAL_EPS = 1.5


@dataclass(frozen=True)
class LabelPlacement:
    text: str
    x: float
    y: float
    anchor: str  # SVG text-anchor: start | end


def cardinality_text(card: str) -> str:
    return "1" if card == "1" else "*"


def _sign(v: float) -> int:
    return (v > 0) - (v < 0)


def place_labels(
    points: Sequence[Point],
    from_card: str,
    to_card: str,
    near: float = 14.0,
    offset: float = 6.0,
) -> Tuple[LabelPlacement, LabelPlacement]:
    """Labels for the source and target end of a routed polyline.

    Each label sits `near` pixels along the end segment. On horizontal
    segments it is lifted above the line; on vertical ones it is pushed to
    the side, with the anchor chosen so the text reads away from the box.
    """
    s0, s1 = points[0], points[1]
    e0, e1 = points[-2], points[-1]

    s_horiz = abs(s0[1] - s1[1]) <= HORIZONTAL_EPS
    e_horiz = abs(e0[1] - e1[1]) <= HORIZONTAL_EPS
    start_dir = (_sign(s1[0] - s0[0]), _sign(s1[1] - s0[1]))
    end_dir = (_sign(e1[0] - e0[0]), _sign(e1[1] - e0[1]))

    if s_horiz:
        sx, sy = s0[0] + near * (start_dir[0] or 1), s0[1]
        start = LabelPlacement(
            cardinality_text(from_card), sx, sy - offset - 2, "start" if start_dir[0] >= 0 else "end"
        )
    else:
        sx, sy = s0[0], s0[1] + near * (start_dir[1] or 1)
        right = s1[0] > s0[0]
        start = LabelPlacement(
            cardinality_text(from_card), sx + (-offset if right else offset), sy, "end" if right else "start"
        )

    if e_horiz:
        ex, ey = e1[0] - near * (end_dir[0] or 1), e1[1]
        end = LabelPlacement(
            cardinality_text(to_card), ex, ey - offset - 2, "end" if end_dir[0] >= 0 else "start"
        )
    else:
        ex, ey = e1[0], e1[1] - near * (end_dir[1] or 1)
        right = e1[0] > e0[0]
        end = LabelPlacement(
            cardinality_text(to_card), ex + (-offset if right else offset), ey, "end" if right else "start"
        )

    return start, end
