"""Headless render session: the diagram controller.

`RenderSession` turns a graph into an SVG document and keeps it interactive.
The host forwards pointer, wheel and search events and calls `tick(now_ms)`
once per frame; the session mutates its in-memory SVG accordingly. Each
`render` purges everything from the previous graph, including controller
state, before drawing the new one.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from SCHEMA2ERD.config import (
    InteractionConfig,
    LayoutConfig,
    RouterConfig,
    get_interaction_config,
)
from SCHEMA2ERD.ir.models import Graph
from SCHEMA2ERD.layout import (
    DEFAULT_GEOMETRY,
    Geometry,
    TableBox,
    apply_table_dimensions,
    boxes_from_nodes,
    compute_bounds,
    layout_tables,
    needs_layout,
)
from SCHEMA2ERD.render import (
    LinkColorManager,
    LinkElement,
    LinkRenderer,
    SvgCanvas,
    TableElement,
    TableRenderer,
    TextMeasurer,
)
from SCHEMA2ERD.routing import RoutedLink, route_links
from SCHEMA2ERD.utils.error_handling import ErrorContext, log_error_with_context
from SCHEMA2ERD.utils.logging import get_logger
from .compaction import CompactionController
from .drag import DragController
from .frames import CoalescedFrame, FrameScheduler
from .highlight import HighlightController
from .search import SearchController
from .zoom import ZoomController, ZoomTransform

logger = get_logger(__name__)

Point = Tuple[float, float]
GraphInput = Union[Graph, Dict[str, Any]]


@dataclass
class RenderedLink:
    from_id: str
    to_id: str
    from_card: str
    to_card: str
    color: str
    element: LinkElement
    route: Optional[RoutedLink] = None

    def as_dict(self) -> Dict[str, str]:
        return {"from": self.from_id, "to": self.to_id, "fromCard": self.from_card, "toCard": self.to_card}


class RenderSession:
    def __init__(
        self,
        width: float = 1200,
        height: float = 800,
        measure=None,
        config: Optional[InteractionConfig] = None,
        layout_config: Optional[LayoutConfig] = None,
        router_config: Optional[RouterConfig] = None,
        geometry: Geometry = DEFAULT_GEOMETRY,
        scheduler: Optional[FrameScheduler] = None,
        depth_controls_height: Optional[float] = None,
    ):
        self.config = config or get_interaction_config()
        self.layout_config = layout_config
        self.router_config = router_config
        self.geometry = geometry
        self.measure = measure or TextMeasurer()
        self.scheduler = scheduler or FrameScheduler()
        self.depth_controls_height = depth_controls_height

        self.canvas = SvgCanvas(width, height)
        self.colors = LinkColorManager()
        self.zoom = ZoomController(width, height, self.config, on_change=self._on_zoom)
        self.relink = CoalescedFrame(self.scheduler, self.update_links)
        self.compact = False

        self.graph: Optional[Graph] = None
        self.boxes: List[TableBox] = []
        self.tables: Dict[str, TableElement] = {}
        self.links: List[RenderedLink] = []
        self.auto_layout = False

        self.drag: Optional[DragController] = None
        self.highlight: Optional[HighlightController] = None
        self.search_controller: Optional[SearchController] = None
        self.compaction: Optional[CompactionController] = None

        self._pan_from: Optional[Point] = None
        self._pan_moved = False

        self.canvas.show_empty_state()

    @property
    def empty_state_visible(self) -> bool:
        return self.canvas.empty_state is not None

    def _on_zoom(self, transform: ZoomTransform) -> None:
        self.canvas.set_viewport_transform(transform.to_svg())

    def _reserved_bottom(self) -> float:
        if self.depth_controls_height is None:
            return 0.0
        return self.depth_controls_height + self.config.reserved_bottom_extra_px

    # drawing

    def clear(self, show_empty: bool = True) -> None:
        """Remove every drawn element and drop per-graph controller state."""
        self.relink.cancel()
        self.zoom.interrupt()
        self.canvas.reset()
        self.canvas.set_viewport_transform(self.zoom.transform.to_svg())
        self.graph = None
        self.boxes = []
        self.tables = {}
        self.links = []
        self.drag = None
        self.highlight = None
        self.search_controller = None
        self.compaction = None
        self._pan_from = None
        self.colors.reset()
        if show_empty:
            self.canvas.show_empty_state()
        else:
            self.canvas.hide_empty_state()

    def render(self, graph: GraphInput) -> bool:
        """Draw `graph`. Returns False (empty state shown) when it has no tables."""
        graph = graph if isinstance(graph, Graph) else Graph.model_validate(graph)
        self.clear(show_empty=False)
        if graph.is_empty():
            self.canvas.show_empty_state()
            return False
        self.graph = graph

        boxes = boxes_from_nodes(graph.nodes)
        apply_table_dimensions(
            boxes, self.measure, self.geometry,
            compact=self.compact, compact_rows=self.config.compact_rows,
        )
        by_id = {b.id: b for b in boxes}
        drawable = [l for l in graph.links if l.from_ in by_id and l.to in by_id]
        if len(drawable) < len(graph.links):
            logger.debug(f"Skipping {len(graph.links) - len(drawable)} link(s) to unknown tables")

        self.auto_layout = needs_layout(boxes)
        if self.auto_layout:
            layout_tables(boxes, [(l.from_, l.to) for l in drawable], self.layout_config)
        self.boxes = boxes

        self.tables = TableRenderer(self.geometry, self.config.compact_rows).render(
            self.canvas, boxes, compact=self.compact
        )
        elements = LinkRenderer().render(self.canvas, drawable, self.colors.color_by_index)
        self.links = [
            RenderedLink(
                from_id=l.from_, to_id=l.to, from_card=l.fromCard, to_card=l.toCard,
                color=el.color, element=el,
            )
            for l, el in zip(drawable, elements)
        ]

        link_elements = [rl.element for rl in self.links]
        self.drag = DragController(
            self.canvas, self.tables, self.relink, self.update_links,
            to_content=lambda p: self.zoom.transform.invert(p),
        )
        self.highlight = HighlightController(self.tables, link_elements, self.config)
        self.search_controller = SearchController(
            self.tables, link_elements, self.zoom, self.scheduler, self.config
        )
        self.compaction = CompactionController(
            self.tables, self.relink, self.update_links, self.config, self.geometry, compact=self.compact
        )

        self.update_links()
        self.fit()
        logger.info(
            f"Rendered {len(boxes)} table(s), {len(self.links)} link(s)"
            f" ({'auto layout' if self.auto_layout else 'stored positions'})"
        )
        return True

    def render_response(self, status_code: int, body: Union[str, bytes, Dict[str, Any], None]) -> bool:
        """Render a parse-endpoint response.

        A non-success status, a body that is not JSON or any failure while
        drawing leaves the canvas cleared with the empty state showing.
        """
        context = ErrorContext(stage="render", operation="render_response",
                               additional_context={"status": status_code})
        if isinstance(body, dict):
            data = body
        else:
            try:
                data = json.loads(body or b"")
            except ValueError as e:
                log_error_with_context(e, context, level="warning")
                self.clear(True)
                return False

        if not 200 <= status_code < 300:
            logger.warning(f"Parse error response ({status_code}): {data}")
            self.clear(True)
            return False

        try:
            return self.render(data)
        except Exception as e:
            log_error_with_context(e, context, level="error")
            self.clear(True)
            return False

    def update_links(self) -> None:
        """Re-route every link against the current box positions and heights."""
        if not self.links:
            return
        specs = [rl.as_dict() for rl in self.links]
        routed = route_links({b.id: b for b in self.boxes}, specs, self.router_config)
        for route in routed:
            rendered = self.links[route.index]
            rendered.route = route
            rendered.element.apply_route(route)

    def fit(self, animate: bool = False) -> None:
        if not self.boxes:
            return
        self.zoom.fit_to_bounds(
            compute_bounds(self.boxes),
            padding=self.config.fit_padding,
            reserved_bottom=self._reserved_bottom(),
            animate=animate,
        )

    def tick(self, now_ms: float) -> None:
        """Advance animations, due timers and queued frame callbacks."""
        self.zoom.advance(now_ms)
        if self.compaction is not None:
            self.compaction.advance(now_ms)
        self.scheduler.tick(now_ms)

    # pointer input

    def pointer_down(self, point: Point, table_id: Optional[str] = None, button: int = 0) -> None:
        if table_id is not None and table_id in self.tables:
            self.highlight.pointer_down(table_id, point, button)
            if button == 0:
                self.drag.pointer_down(table_id, point)
            return
        if button == 0:
            self._pan_from = point
            self._pan_moved = False

    def pointer_move(self, point: Point) -> None:
        if self.drag is not None and self.drag.active:
            self.highlight.pointer_move(point)
            self.drag.pointer_move(point)
            return
        if self._pan_from is not None:
            dx = point[0] - self._pan_from[0]
            dy = point[1] - self._pan_from[1]
            if dx or dy:
                self.zoom.pan_by(dx, dy)
                self._pan_moved = True
            self._pan_from = point

    def pointer_up(self, point: Optional[Point] = None) -> None:
        if self.drag is not None and self.drag.active:
            if point is not None:
                self.highlight.pointer_move(point)
            self.highlight.pointer_up()
            self.drag.pointer_up(point)
            return
        if self._pan_from is not None:
            was_pan = self._pan_moved
            self._pan_from = None
            if not was_pan:
                self.background_click()

    def pointer_cancel(self) -> None:
        if self.highlight is not None:
            self.highlight.pointer_cancel()
        if self.drag is not None and self.drag.active:
            self.drag.pointer_up()
        self._pan_from = None

    def background_click(self) -> None:
        if self.highlight is not None:
            self.highlight.background_click()

    def wheel(self, delta_y: float, point: Point, delta_mode: int = 0, ctrl_key: bool = False) -> None:
        self.zoom.wheel(delta_y, point, delta_mode, ctrl_key)

    def zoom_in(self) -> None:
        self.zoom.zoom_in()

    def zoom_out(self) -> None:
        self.zoom.zoom_out()

    # toolbar

    def search(self, text: str) -> None:
        if self.search_controller is not None:
            self.search_controller.on_input(text)

    def set_depth(self, depth: str) -> None:
        if self.highlight is not None:
            self.highlight.set_depth(depth)

    def toggle_compact(self) -> bool:
        if self.compaction is None:
            self.compact = not self.compact
        else:
            self.compact = self.compaction.toggle()
        return self.compact

    # output

    def snapshot(self) -> Optional[Dict[str, Any]]:
        """Current graph with table positions, for share links."""
        if self.graph is None:
            return None
        positions = {b.id: b for b in self.boxes}
        nodes = []
        for node in self.graph.nodes:
            box = positions.get(node.id)
            update = {"x": box.x, "y": box.y} if box is not None and box.has_position() else {}
            nodes.append(node.model_copy(update=update))
        return Graph(nodes=nodes, links=list(self.graph.links)).to_dict()

    def to_svg(self) -> str:
        return self.canvas.to_string()
