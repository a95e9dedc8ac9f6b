"""Pairwise overlap repair for laid-out boxes."""

from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .geometry import TableBox, rectangles_overlap


def _overlapping_pairs(boxes: Sequence[TableBox], padding: float) -> List[Tuple[int, int]]:
    """Index pairs (i < j) whose padded rectangles intersect right now."""
    n = len(boxes)
    if n < 2:
        return []
    x = np.array([b.x for b in boxes])
    y = np.array([b.y for b in boxes])
    w = np.array([b.w for b in boxes])
    h = np.array([b.h for b in boxes])
    i, j = np.triu_indices(n, k=1)
    separated = (
        (x[i] + w[i] + padding <= x[j])
        | (x[j] + w[j] + padding <= x[i])
        | (y[i] + h[i] + padding <= y[j])
        | (y[j] + h[j] + padding <= y[i])
    )
    hit = ~separated
    return list(zip(i[hit].tolist(), j[hit].tolist()))


def resolve_overlaps(
    boxes: Sequence[TableBox],
    padding: float = 24.0,
    max_iterations: int = 400,
    step: float = 10.0,
    rng: Optional[np.random.Generator] = None,
) -> int:
    """Push overlapping boxes apart in place.

    Each pass moves every still-overlapping pair `step` pixels apart along
    the line between their centres. Stops after a pass that moves nothing or
    after `max_iterations` passes. Returns the number of passes run.
    """
    rng = rng if rng is not None else np.random.default_rng()
    passes = 0
    for _ in range(max_iterations):
        passes += 1
        moved_any = False
        # Pairs found at the start of a pass are re-checked against live positions
        for i, j in _overlapping_pairs(boxes, padding):
            a, b = boxes[i], boxes[j]
            if not rectangles_overlap(a, b, padding):
                continue
            dx = a.cx - b.cx
            dy = a.cy - b.cy
            if dx == 0 and dy == 0:
                dx = float(rng.random() - 0.5)
                dy = float(rng.random() - 0.5)
            length = max(1.0, math.sqrt(dx * dx + dy * dy))
            ux = dx / length * step
            uy = dy / length * step
            a.x += ux
            a.y += uy
            b.x -= ux
            b.y -= uy
            moved_any = True
        if not moved_any:
            break
    return passes
