"""Time-parameterised interpolation.

Animations never read a clock. They are stepped with the host's frame time
and take their start time from the first step they see.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional


def ease_cubic_in_out(t: float) -> float:
    """d3's default transition easing."""
    t *= 2
    if t <= 1:
        return t * t * t / 2
    t -= 2
    return (t * t * t + 2) / 2


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


@dataclass(frozen=True)
class Tween:
    start: float
    end: float
    easing: Callable[[float], float] = ease_cubic_in_out

    def value_at(self, f: float) -> float:
        f = min(1.0, max(0.0, f))
        if f >= 1.0:
            return self.end
        return lerp(self.start, self.end, self.easing(f))


class Animation:
    """A fixed-duration animation that reports eased progress.

    `on_update(p)` runs on every step with eased progress `p`; the last call
    always gets exactly 1.0, after which `on_end()` runs once.
    """

    def __init__(
        self,
        duration_ms: float,
        on_update: Callable[[float], None],
        on_end: Optional[Callable[[], None]] = None,
        easing: Callable[[float], float] = ease_cubic_in_out,
    ):
        self.duration_ms = max(0.0, float(duration_ms))
        self.on_update = on_update
        self.on_end = on_end
        self.easing = easing
        self.start_ms: Optional[float] = None
        self.finished = False
        self.cancelled = False

    @property
    def active(self) -> bool:
        return not (self.finished or self.cancelled)

    def progress(self, now_ms: float) -> float:
        """Raw (uneased) fraction of the duration elapsed at `now_ms`."""
        if self.start_ms is None:
            return 0.0
        if self.duration_ms == 0:
            return 1.0
        return min(1.0, max(0.0, (now_ms - self.start_ms) / self.duration_ms))

    def step(self, now_ms: float) -> bool:
        """Advance to `now_ms`. Returns True while the animation is still running."""
        if not self.active:
            return False
        if self.start_ms is None:
            self.start_ms = now_ms
        raw = self.progress(now_ms)
        if raw >= 1.0:
            self.on_update(1.0)
            self.finished = True
            if self.on_end is not None:
                self.on_end()
            return False
        self.on_update(self.easing(raw))
        return True

    def cancel(self) -> None:
        self.cancelled = True
