"""Polyline simplification and SVG path data with rounded corners."""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from SCHEMA2ERD.layout.geometry import format_number

Point = Tuple[float, float]


def _close(a: float, b: float, eps: float) -> bool:
    return abs(a - b) <= eps


def simplify_orthogonal(points: Sequence[Point], epsilon: float = 2.0) -> List[Point]:
    """Drop interior points that are collinear with their neighbours.

    The joints right after the start and right before the end are always
    kept, so the first and last segments (where labels go) stay put.
    """
    pts = list(points)
    if len(pts) <= 2:
        return pts

    result = [pts[0]]
    last = len(pts) - 2
    for i in range(1, len(pts) - 1):
        a = result[-1]
        b = pts[i]
        c = pts[i + 1]
        if i == 1 or i == last:
            result.append(b)
            continue
        horizontal = _close(a[1], b[1], epsilon) and _close(b[1], c[1], epsilon)
        vertical = _close(a[0], b[0], epsilon) and _close(b[0], c[0], epsilon)
        if horizontal or vertical:
            continue
        result.append(b)
    result.append(pts[-1])
    return result


def _pt(p: Point) -> str:
    return f"{format_number(p[0])},{format_number(p[1])}"


def to_rounded_path(points: Sequence[Point], radius: float = 3.0, epsilon: float = 2.0) -> str:
    """SVG path through `points`, replacing each corner by a short quadratic curve.

    The curve radius is at most `radius` and at most half of either adjacent
    segment; corners that would get a radius under 1px stay sharp.
    """
    pts = list(points)
    if not pts:
        return ""
    if len(pts) < 3:
        return " ".join(("L" if i else "M") + _pt(p) for i, p in enumerate(pts))

    parts = ["M" + _pt(pts[0])]
    for i in range(1, len(pts) - 1):
        prev, curr, nxt = pts[i - 1], pts[i], pts[i + 1]
        straight = (
            (_close(prev[1], curr[1], epsilon) and _close(curr[1], nxt[1], epsilon))
            or (_close(prev[0], curr[0], epsilon) and _close(curr[0], nxt[0], epsilon))
        )
        if straight:
            parts.append("L" + _pt(curr))
            continue

        d1 = math.hypot(curr[0] - prev[0], curr[1] - prev[1])
        d2 = math.hypot(nxt[0] - curr[0], nxt[1] - curr[1])
        r = min(radius, d1 / 2, d2 / 2)
        if r < 1:
            parts.append("L" + _pt(curr))
            continue

        k1 = r / d1
        k2 = r / d2
        curve_start = (curr[0] - (curr[0] - prev[0]) * k1, curr[1] - (curr[1] - prev[1]) * k1)
        curve_end = (curr[0] + (nxt[0] - curr[0]) * k2, curr[1] + (nxt[1] - curr[1]) * k2)
        parts.append(f"L{_pt(curve_start)} Q{_pt(curr)} {_pt(curve_end)}")

    parts.append("L" + _pt(pts[-1]))
    return " ".join(parts)
