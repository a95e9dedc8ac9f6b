"""Table dragging.

A drag moves one box in content coordinates and asks for a relink at most
once per frame. Releasing the table relinks immediately. Layout and overlap
repair never run again after a drag, so the user's placement is kept.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from SCHEMA2ERD.render.svg import SvgCanvas, TableElement
from .frames import CoalescedFrame

Point = Tuple[float, float]


def _identity(point: Point) -> Point:
    return point


@dataclass
class _DragState:
    table_id: str
    origin: Point
    pointer: Point


class DragController:
    def __init__(
        self,
        canvas: SvgCanvas,
        tables: Dict[str, TableElement],
        relink: CoalescedFrame,
        relink_now: Callable[[], None],
        to_content: Callable[[Point], Point] = _identity,
    ):
        self.canvas = canvas
        self.tables = tables
        self.relink = relink
        self.relink_now = relink_now
        self.to_content = to_content
        self._state: Optional[_DragState] = None

    @property
    def active(self) -> bool:
        return self._state is not None

    @property
    def table_id(self) -> Optional[str]:
        return self._state.table_id if self._state else None

    def pointer_down(self, table_id: str, point: Point) -> bool:
        """Start dragging `table_id` from screen `point`; raises it above the others."""
        table = self.tables.get(table_id)
        if table is None:
            return False
        self.canvas.raise_to_top(table.group)
        box = table.box
        self._state = _DragState(
            table_id=table_id,
            origin=(box.x or 0.0, box.y or 0.0),
            pointer=self.to_content(point),
        )
        return True

    def _move(self, point: Point) -> None:
        state = self._state
        table = self.tables[state.table_id]
        px, py = self.to_content(point)
        table.box.move_to(state.origin[0] + px - state.pointer[0], state.origin[1] + py - state.pointer[1])
        table.sync_position()

    def pointer_move(self, point: Point) -> None:
        if self._state is None:
            return
        self._move(point)
        self.relink.request()

    def pointer_up(self, point: Optional[Point] = None) -> None:
        if self._state is None:
            return
        if point is not None:
            self._move(point)
        self._state = None
        for table in self.tables.values():
            table.sync_position()
        self.relink.cancel()
        self.relink_now()

    def cancel(self) -> None:
        self._state = None
