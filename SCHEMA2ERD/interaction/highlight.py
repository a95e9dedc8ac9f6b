"""Neighbourhood highlighting.

Clicking a table (press and release without moving more than a few pixels)
keeps that table and every table within the chosen number of hops
undimmed; everything else is dimmed. Clicking the same table again, or the
empty canvas, clears the highlight.
"""

from __future__ import annotations

import math
from collections import deque
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from SCHEMA2ERD.config import InteractionConfig, get_interaction_config
from SCHEMA2ERD.render.svg import LinkElement, TableElement, toggle_class
from SCHEMA2ERD.utils.logging import get_logger

logger = get_logger(__name__)

DEPTH_CHOICES = ("1", "2", "3", "all")

Point = Tuple[float, float]


def build_adjacency(table_ids: Iterable[str], pairs: Iterable[Tuple[str, str]]) -> Dict[str, Set[str]]:
    """Undirected adjacency over table ids; link endpoints are added even if
    they are not among `table_ids`."""
    adjacency: Dict[str, Set[str]] = {tid: set() for tid in table_ids}
    for a, b in pairs:
        adjacency.setdefault(a, set()).add(b)
        adjacency.setdefault(b, set()).add(a)
    return adjacency


def depth_limit(depth: str) -> float:
    """Hop limit for a depth control value.

    "all" is unlimited. Anything that is not an integer, and any integer
    below 1, is treated as 1 hop: a highlight always includes direct
    neighbours.
    """
    if depth == "all":
        return math.inf
    try:
        value = int(depth)
    except (TypeError, ValueError):
        logger.debug(f"Unknown highlight depth {depth!r}; using 1")
        return 1
    if value < 1:
        logger.debug(f"Highlight depth {value} is below 1; using 1")
        return 1
    return value


def reachable(adjacency: Dict[str, Set[str]], start: str, depth: str = "1") -> Set[str]:
    """Ids within `depth` hops of `start` (breadth-first, `start` included)."""
    limit = depth_limit(depth)
    visited = {start}
    queue = deque([(start, 0)])
    while queue:
        node, d = queue.popleft()
        if d >= limit:
            continue
        for neighbour in adjacency.get(node, ()):
            if neighbour not in visited:
                visited.add(neighbour)
                queue.append((neighbour, d + 1))
    return visited


class _PendingTap:
    __slots__ = ("table_id", "x", "y", "moved")

    def __init__(self, table_id: str, x: float, y: float):
        self.table_id = table_id
        self.x = x
        self.y = y
        self.moved = False


class HighlightController:
    def __init__(
        self,
        tables: Dict[str, TableElement],
        links: Sequence[LinkElement],
        config: Optional[InteractionConfig] = None,
        depth: Optional[str] = None,
    ):
        self.config = config or get_interaction_config()
        self.tables = tables
        self.links: List[LinkElement] = list(links)
        self.adjacency = build_adjacency(tables.keys(), [(l.from_id, l.to_id) for l in self.links])
        self.depth = depth or self.config.default_highlight_depth
        self.selected_id: Optional[str] = None
        self._pending: Optional[_PendingTap] = None

    # pointer state machine

    def pointer_down(self, table_id: str, point: Point, button: int = 0) -> None:
        if button != 0:
            return
        self._pending = _PendingTap(table_id, point[0], point[1])

    def pointer_move(self, point: Point) -> None:
        tap = self._pending
        if tap is None:
            return
        if math.hypot(point[0] - tap.x, point[1] - tap.y) > self.config.click_move_threshold_px:
            tap.moved = True

    def pointer_up(self) -> None:
        tap = self._pending
        if tap is None:
            return
        self._pending = None
        if tap.moved:
            return
        if self.selected_id == tap.table_id:
            self.clear()
        else:
            self.select(tap.table_id)

    def pointer_cancel(self) -> None:
        self._pending = None

    def background_click(self) -> None:
        self.clear()

    # state

    def set_depth(self, depth: str) -> None:
        self.depth = depth
        if self.selected_id:
            self.apply(self.selected_id)

    def select(self, table_id: str) -> None:
        self.selected_id = table_id
        self.apply(table_id)

    def clear(self) -> None:
        self.selected_id = None
        self.apply(None)

    def reachable_from(self, table_id: str) -> Set[str]:
        return reachable(self.adjacency, table_id, self.depth)

    def apply(self, start_id: Optional[str]) -> None:
        if not start_id:
            for table in self.tables.values():
                toggle_class(table.group, "dimmed", False)
                toggle_class(table.group, "selected", False)
            for link in self.links:
                for el in link.elements():
                    toggle_class(el, "dimmed", False)
            return

        keep = self.reachable_from(start_id)
        logger.debug(f"Highlighting {len(keep)} table(s) around '{start_id}' (depth {self.depth})")
        for tid, table in self.tables.items():
            toggle_class(table.group, "dimmed", tid not in keep)
            toggle_class(table.group, "selected", tid == start_id)
        for link in self.links:
            on_path = link.from_id in keep and link.to_id in keep
            for el in link.elements():
                toggle_class(el, "dimmed", not on_path)
