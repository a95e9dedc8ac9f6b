"""Table search box behaviour.

Typing is debounced. A query that names a table exactly (ignoring case and
surrounding whitespace) dims every other table and every link not touching
it, then pans to the match. The viewport centre from before the first
successful search is remembered and restored when the query is cleared.
"""

from __future__ import annotations

from typing import Dict, Optional, Sequence, Tuple

from SCHEMA2ERD.config import InteractionConfig, get_interaction_config
from SCHEMA2ERD.render.svg import LinkElement, TableElement, toggle_class
from SCHEMA2ERD.utils.logging import get_logger
from .frames import FrameScheduler, TimerHandle
from .zoom import ZoomController

logger = get_logger(__name__)


def normalize_query(text: Optional[str]) -> str:
    return (text or "").strip().lower()


class SearchController:
    def __init__(
        self,
        tables: Dict[str, TableElement],
        links: Sequence[LinkElement],
        zoom: ZoomController,
        scheduler: FrameScheduler,
        config: Optional[InteractionConfig] = None,
    ):
        self.config = config or get_interaction_config()
        self.tables = tables
        self.links = list(links)
        self.zoom = zoom
        self.scheduler = scheduler
        self.by_lower_id = {tid.lower(): table for tid, table in tables.items()}
        self.previous_center: Optional[Tuple[float, float]] = None
        self.matched_id: Optional[str] = None
        self._timer: Optional[TimerHandle] = None

    def on_input(self, text: Optional[str]) -> None:
        """Schedule `apply` for the debounced query, replacing any pending one."""
        query = normalize_query(text)
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self.scheduler.call_later(self.config.search_debounce_ms, lambda: self._fire(query))

    def _fire(self, query: str) -> None:
        self._timer = None
        self.apply(query)

    def _dim_links(self, predicate) -> None:
        for link in self.links:
            dimmed = predicate(link)
            for el in link.elements():
                toggle_class(el, "dimmed", dimmed)

    def apply(self, query: str) -> None:
        if not query:
            self.matched_id = None
            for table in self.tables.values():
                toggle_class(table.group, "dimmed", False)
            self._dim_links(lambda link: False)
            if self.previous_center is not None:
                x, y = self.previous_center
                self.zoom.pan_to_point(x, y, animate=True, duration=self.config.pan_duration_ms)
                self.previous_center = None
            return

        match = self.by_lower_id.get(query)
        if match is None:
            logger.debug(f"No table named '{query}'")
            self.matched_id = None
            for table in self.tables.values():
                toggle_class(table.group, "dimmed", True)
            self._dim_links(lambda link: True)
            return

        match_id = match.box.id
        self.matched_id = match_id
        for tid, table in self.tables.items():
            toggle_class(table.group, "dimmed", tid != match_id)
        self._dim_links(lambda link: link.from_id != match_id and link.to_id != match_id)

        if self.previous_center is None:
            self.previous_center = self.zoom.current_center()
        box = match.box
        self.zoom.pan_to_point(box.cx, box.cy, animate=True, duration=self.config.pan_duration_ms)
