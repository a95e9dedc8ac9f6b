"""Automatic placement of table boxes.

`layout_tables` seeds centres on a golden-angle spiral, runs the force
simulation, shifts everything to positive coordinates and then repairs
residual overlaps. Boxes that all carry positions already (a restored
share link, for example) are returned untouched.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from SCHEMA2ERD.config import LayoutConfig, get_layout_config
from SCHEMA2ERD.utils.logging import get_logger
from .force import index_links, run_force_layout
from .geometry import TableBox
from .overlap import resolve_overlaps

logger = get_logger(__name__)

GOLDEN_ANGLE = 2.399963229728653


def spiral_seed(boxes: Sequence[TableBox], config: LayoutConfig) -> List[Tuple[float, float]]:
    """Initial centres: a box's own centre if positioned, else a spiral point."""
    centres = []
    for i, box in enumerate(boxes):
        r = config.spiral_base_radius + i * config.spiral_step
        cx = box.x + box.w / 2 if box.x is not None else math.cos(i * GOLDEN_ANGLE) * r
        cy = box.y + box.h / 2 if box.y is not None else math.sin(i * GOLDEN_ANGLE) * r
        centres.append((cx, cy))
    return centres


def translate_to_margin(boxes: Sequence[TableBox], centres: np.ndarray, margin: float) -> None:
    """Write centres back as top-left positions, shifted so the smallest
    left/top edge sits at `margin`."""
    if not len(boxes):
        return
    w = np.array([b.w for b in boxes])
    h = np.array([b.h for b in boxes])
    left = centres[:, 0] - w / 2
    top = centres[:, 1] - h / 2
    dx = margin - left.min()
    dy = margin - top.min()
    for box, x, y in zip(boxes, left + dx, top + dy):
        box.move_to(float(x), float(y))


def needs_layout(boxes: Sequence[TableBox]) -> bool:
    return not all(b.has_position() for b in boxes)


def layout_tables(
    boxes: Sequence[TableBox],
    links: Sequence[Tuple[str, str]],
    config: Optional[LayoutConfig] = None,
    rng: Optional[np.random.Generator] = None,
) -> Sequence[TableBox]:
    """Assign (x, y) to every box in place and return the same sequence.

    Args:
        boxes: Measured boxes (`w`/`h` already set).
        links: (from, to) table-name pairs.
        config: Layout constants; defaults to config.yaml.
        rng: Random source for tie-breaking jiggle; seeded from config when None.
    """
    if not boxes or not needs_layout(boxes):
        return boxes

    config = config or get_layout_config()
    rng = rng if rng is not None else np.random.default_rng(config.seed)

    centres = run_force_layout(
        spiral_seed(boxes, config),
        [(b.w, b.h) for b in boxes],
        index_links([b.id for b in boxes], links),
        config=config,
        rng=rng,
    )
    translate_to_margin(boxes, centres, config.margin)
    passes = resolve_overlaps(
        boxes,
        padding=config.overlap_padding,
        max_iterations=config.overlap_max_iterations,
        step=config.overlap_step,
        rng=rng,
    )
    logger.debug(f"Laid out {len(boxes)} tables ({passes} overlap pass(es))")
    return boxes
