"""Compact/expanded table view toggle.

Compact mode shows only the first few rows of every table. Toggling
animates each table's height between its full and compact value while the
extra rows fade; links follow the changing heights with one relink per
frame and a final relink once the heights settle.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

from SCHEMA2ERD.config import InteractionConfig, get_interaction_config
from SCHEMA2ERD.layout.geometry import DEFAULT_GEOMETRY, HEADER_CORNER_RADIUS, Geometry, rounded_top_rect_path
from SCHEMA2ERD.render.svg import TableElement
from SCHEMA2ERD.utils.logging import get_logger
from .animation import Animation, lerp
from .frames import CoalescedFrame

logger = get_logger(__name__)


class CompactionController:
    def __init__(
        self,
        tables: Dict[str, TableElement],
        relink: CoalescedFrame,
        relink_now: Callable[[], None],
        config: Optional[InteractionConfig] = None,
        geometry: Geometry = DEFAULT_GEOMETRY,
        compact: bool = False,
    ):
        self.tables = tables
        self.relink = relink
        self.relink_now = relink_now
        self.config = config or get_interaction_config()
        self.geometry = geometry
        self.is_compact = compact
        self.extra_opacity = 0.0 if compact else 1.0
        self._animation: Optional[Animation] = None

    @property
    def is_animating(self) -> bool:
        return self._animation is not None and self._animation.active

    def toggle(self) -> bool:
        """Flip the mode and start the transition. Returns the new mode."""
        if self._animation is not None:
            self._animation.cancel()

        self.is_compact = not self.is_compact
        compact = self.is_compact
        starts = {tid: t.box.h for tid, t in self.tables.items()}
        targets = {
            tid: (t.box.compact_h if compact else t.box.full_h)
            for tid, t in self.tables.items()
        }
        opacity_from = self.extra_opacity
        opacity_to = 0.0 if compact else 1.0

        if not compact:
            for table in self.tables.values():
                table.set_extra_rows(opacity_from, visible=True)

        def update(p: float) -> None:
            for tid, table in self.tables.items():
                table.box.h = lerp(starts[tid], targets[tid], p)
                table.sync_height()
            self.extra_opacity = lerp(opacity_from, opacity_to, p)
            for table in self.tables.values():
                table.set_extra_rows(self.extra_opacity, visible=True)
            self.relink.request()

        def finish() -> None:
            for tid, table in self.tables.items():
                table.box.h = targets[tid]
                table.sync_height()
                table.header.set("d", rounded_top_rect_path(table.box.w, self.geometry.hdr_h, HEADER_CORNER_RADIUS))
                table.set_extra_rows(opacity_to, visible=not compact)
            self.extra_opacity = opacity_to
            self._animation = None
            self.relink.cancel()
            self.relink_now()

        self._animation = Animation(self.config.compaction_ms, update, finish)
        logger.debug(f"Compaction {'on' if compact else 'off'} for {len(self.tables)} table(s)")
        self.relink_now()
        return compact

    def advance(self, now_ms: float) -> bool:
        if self._animation is None:
            return False
        return self._animation.step(now_ms)
