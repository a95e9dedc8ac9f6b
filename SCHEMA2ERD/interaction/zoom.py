"""Pan/zoom state of the diagram viewport.

`ZoomTransform` mirrors d3-zoom's transform object: screen = content * k +
(x, y). `ZoomController` owns the current transform, clamps every scale to
the configured extent and runs at most one animated transition at a time;
starting a new one (or a wheel/pan gesture) interrupts the old one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from SCHEMA2ERD.config import InteractionConfig, get_interaction_config
from SCHEMA2ERD.layout.geometry import Bounds, format_number
from SCHEMA2ERD.utils.logging import get_logger
from .animation import Animation, lerp

logger = get_logger(__name__)

Point = Tuple[float, float]


@dataclass(frozen=True)
class ZoomTransform:
    k: float = 1.0
    x: float = 0.0
    y: float = 0.0

    def apply(self, point: Point) -> Point:
        return (point[0] * self.k + self.x, point[1] * self.k + self.y)

    def invert(self, point: Point) -> Point:
        return ((point[0] - self.x) / self.k, (point[1] - self.y) / self.k)

    def translate(self, dx: float, dy: float) -> "ZoomTransform":
        return ZoomTransform(self.k, self.x + self.k * dx, self.y + self.k * dy)

    def scale(self, factor: float) -> "ZoomTransform":
        return ZoomTransform(self.k * factor, self.x, self.y)

    def to_svg(self) -> str:
        return f"translate({format_number(self.x)},{format_number(self.y)}) scale({format_number(self.k)})"


IDENTITY = ZoomTransform()


class ZoomController:
    def __init__(
        self,
        width: float,
        height: float,
        config: Optional[InteractionConfig] = None,
        on_change: Optional[Callable[[ZoomTransform], None]] = None,
    ):
        self.config = config or get_interaction_config()
        self.width = width
        self.height = height
        self.on_change = on_change
        self.transform = IDENTITY
        self._animation: Optional[Animation] = None

    @property
    def scale_extent(self) -> Tuple[float, float]:
        return (self.config.min_scale, self.config.max_scale)

    @property
    def is_animating(self) -> bool:
        return self._animation is not None and self._animation.active

    def resize(self, width: float, height: float) -> None:
        self.width = width
        self.height = height

    def _clamp(self, k: float) -> float:
        lo, hi = self.scale_extent
        return max(lo, min(hi, k))

    def _set(self, transform: ZoomTransform) -> None:
        self.transform = transform
        if self.on_change is not None:
            self.on_change(transform)

    def set_transform(self, transform: ZoomTransform) -> None:
        self.interrupt()
        self._set(ZoomTransform(self._clamp(transform.k), transform.x, transform.y))

    def interrupt(self) -> None:
        if self._animation is not None:
            self._animation.cancel()
            self._animation = None

    def _scaled_at(self, k: float, point: Point) -> ZoomTransform:
        """Transform with scale `k` that keeps `point` (screen) fixed."""
        k = self._clamp(k)
        cx, cy = self.transform.invert(point)
        return ZoomTransform(k, point[0] - cx * k, point[1] - cy * k)

    def _centre(self) -> Point:
        return (self.width / 2, self.height / 2)

    def current_center(self, transform: Optional[ZoomTransform] = None) -> Point:
        """Content coordinates shown at the middle of the viewport."""
        t = transform or self.transform
        return ((self.width / 2 - t.x) / t.k, (self.height / 2 - t.y) / t.k)

    # gestures

    def wheel(self, delta_y: float, point: Point, delta_mode: int = 0, ctrl_key: bool = False) -> None:
        """Apply one wheel event, anchored at the pointer."""
        self.interrupt()
        factor = 0.05 if delta_mode == 1 else 1.0 if delta_mode else 0.002
        delta = -delta_y * factor * (10 if ctrl_key else 1)
        self._set(self._scaled_at(self.transform.k * 2 ** delta, point))

    def pan_by(self, dx: float, dy: float) -> None:
        """Background drag: move the viewport by a screen-space delta."""
        self.interrupt()
        t = self.transform
        self._set(ZoomTransform(t.k, t.x + dx, t.y + dy))

    # programmatic

    def zoom_by(self, factor: float, animate: bool = True) -> None:
        target = self._scaled_at(self.transform.k * factor, self._centre())
        if animate:
            self.animate_to(target, self.config.zoom_duration_ms)
        else:
            self.set_transform(target)

    def zoom_in(self) -> None:
        self.zoom_by(self.config.zoom_step)

    def zoom_out(self) -> None:
        self.zoom_by(1 / self.config.zoom_step)

    def reset(self) -> None:
        self.set_transform(IDENTITY)

    def fit_to_bounds(
        self,
        bounds: Bounds,
        padding: Optional[float] = None,
        reserved_bottom: float = 0.0,
        animate: bool = False,
    ) -> ZoomTransform:
        """Centre `bounds` in the viewport at the largest scale that fits.

        `reserved_bottom` pixels at the bottom of the viewport (covered by
        overlay controls) are left out of the fitting area.
        """
        if padding is None:
            padding = self.config.fit_padding
        content_w = max(1.0, bounds.max_x - bounds.min_x)
        content_h = max(1.0, bounds.max_y - bounds.min_y)
        view_w = max(1.0, self.width - padding * 2)
        view_h = max(1.0, self.height - padding * 2 - reserved_bottom)

        scale = self._clamp(min(view_w / content_w, view_h / content_h))
        tx = (self.width - content_w * scale) / 2 - bounds.min_x * scale
        ty = ((self.height - reserved_bottom) - content_h * scale) / 2 - bounds.min_y * scale
        target = ZoomTransform(scale, tx, ty)
        logger.debug(f"Fitting {content_w:.0f}x{content_h:.0f} content at scale {scale:.3f}")

        if animate:
            self.animate_to(target, self.config.pan_duration_ms)
        else:
            self.set_transform(target)
        return target

    def pan_to_point(
        self,
        x: float,
        y: float,
        animate: bool = True,
        duration: Optional[float] = None,
        scale: Optional[float] = None,
    ) -> ZoomTransform:
        """Centre content point (x, y), optionally changing the scale."""
        k = self._clamp(scale if scale is not None else self.transform.k)
        target = ZoomTransform(k, self.width / 2 - x * k, self.height / 2 - y * k)
        if animate:
            self.animate_to(target, self.config.pan_duration_ms if duration is None else duration)
        else:
            self.set_transform(target)
        return target

    def animate_to(self, target: ZoomTransform, duration_ms: float) -> None:
        """Start a transition to `target`.

        The viewport centre moves linearly in content space while the scale
        changes geometrically, so a zoom about the centre keeps the centre
        still for the whole transition.
        """
        self.interrupt()
        start = self.transform
        c0 = self.current_center(start)
        c1 = self.current_center(target)
        ratio = target.k / start.k

        def update(p: float) -> None:
            if p >= 1.0:
                self._set(target)
                return
            k = start.k * ratio ** p
            cx = lerp(c0[0], c1[0], p)
            cy = lerp(c0[1], c1[1], p)
            self._set(ZoomTransform(k, self.width / 2 - cx * k, self.height / 2 - cy * k))

        self._animation = Animation(duration_ms, update)

    def advance(self, now_ms: float) -> bool:
        """Step the running transition; returns True while one is active."""
        if self._animation is None:
            return False
        running = self._animation.step(now_ms)
        if not running:
            self._animation = None
        return running
