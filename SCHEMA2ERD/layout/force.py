"""Force-directed placement of table boxes.

A vectorised port of the d3-force model used for the diagram: many-body
repulsion, spring links, box-sized collision, weak x/y pull to the origin
and a centering force, stepped with d3's alpha and velocity decay.

Many-body repulsion is computed exactly (no Barnes-Hut approximation);
graphs here are at most a few hundred tables. Link and collision updates
are applied simultaneously per tick rather than one pair at a time.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from SCHEMA2ERD.config import LayoutConfig

ALPHA_MIN = 0.001
ALPHA_DECAY = 1 - ALPHA_MIN ** (1 / 300)
VELOCITY_DECAY = 0.4
DISTANCE_MIN2 = 1.0


@dataclass
class ForceState:
    """Node centres and velocities, one row per table."""
    x: np.ndarray
    y: np.ndarray
    vx: np.ndarray
    vy: np.ndarray
    w: np.ndarray
    h: np.ndarray

    @classmethod
    def from_centres(cls, centres: Sequence[Tuple[float, float]], sizes: Sequence[Tuple[float, float]]) -> "ForceState":
        c = np.asarray(centres, dtype=float).reshape(-1, 2)
        s = np.asarray(sizes, dtype=float).reshape(-1, 2)
        n = len(c)
        return cls(x=c[:, 0].copy(), y=c[:, 1].copy(), vx=np.zeros(n), vy=np.zeros(n), w=s[:, 0], h=s[:, 1])


def tick_count(n: int, config: LayoutConfig) -> int:
    return int(math.ceil(min(config.max_ticks, config.ticks_per_sqrt_node * math.sqrt(n))))


def _jiggle(rng: np.random.Generator, size) -> np.ndarray:
    return (rng.random(size) - 0.5) * 1e-6


class ForceSimulation:
    """Runs a fixed number of ticks over a `ForceState`."""

    def __init__(
        self,
        state: ForceState,
        links: Sequence[Tuple[int, int]],
        config: Optional[LayoutConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.state = state
        self.config = config or LayoutConfig()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)
        self.alpha = 1.0

        n = len(state.x)
        # Self-loops exert no net force
        pairs = [(s, t) for s, t in links if s != t]
        self.source = np.array([p[0] for p in pairs], dtype=int)
        self.target = np.array([p[1] for p in pairs], dtype=int)

        count = np.zeros(n)
        np.add.at(count, self.source, 1)
        np.add.at(count, self.target, 1)
        if len(pairs):
            self.bias = count[self.source] / (count[self.source] + count[self.target])
            cfg = self.config
            self.distance = (
                cfg.link_base_distance
                + np.maximum(state.w[self.source], state.w[self.target]) * cfg.link_size_factor
                + np.maximum(state.h[self.source], state.h[self.target]) * cfg.link_size_factor
            )
        else:
            self.bias = np.zeros(0)
            self.distance = np.zeros(0)

        self.radius = np.hypot(state.w, state.h) / 2 + self.config.collide_margin

    def run(self, ticks: int) -> ForceState:
        for _ in range(ticks):
            self.tick()
        return self.state

    def tick(self) -> None:
        self.alpha += (0.0 - self.alpha) * ALPHA_DECAY
        self._charge()
        self._links()
        for _ in range(self.config.collide_iterations):
            self._collide()
        self._pull_to_origin()
        self._center()

        s = self.state
        s.vx *= 1 - VELOCITY_DECAY
        s.vy *= 1 - VELOCITY_DECAY
        s.x += s.vx
        s.y += s.vy

    def _charge(self) -> None:
        s = self.state
        n = len(s.x)
        if n < 2:
            return
        dx = s.x[None, :] - s.x[:, None]
        dy = s.y[None, :] - s.y[:, None]
        off_diag = ~np.eye(n, dtype=bool)

        zero_x = (dx == 0) & off_diag
        if zero_x.any():
            dx[zero_x] = _jiggle(self.rng, int(zero_x.sum()))
        zero_y = (dy == 0) & off_diag
        if zero_y.any():
            dy[zero_y] = _jiggle(self.rng, int(zero_y.sum()))

        l = dx * dx + dy * dy
        near = l < DISTANCE_MIN2
        l = np.where(near, np.sqrt(DISTANCE_MIN2 * l), l)
        l[~off_diag] = 1.0

        w = self.config.charge_strength * self.alpha / l
        w[~off_diag] = 0.0
        s.vx += (dx * w).sum(axis=1)
        s.vy += (dy * w).sum(axis=1)

    def _links(self) -> None:
        if not len(self.source):
            return
        s = self.state
        src, tgt = self.source, self.target
        x = s.x[tgt] + s.vx[tgt] - s.x[src] - s.vx[src]
        y = s.y[tgt] + s.vy[tgt] - s.y[src] - s.vy[src]
        zx = x == 0
        if zx.any():
            x[zx] = _jiggle(self.rng, int(zx.sum()))
        zy = y == 0
        if zy.any():
            y[zy] = _jiggle(self.rng, int(zy.sum()))

        l = np.sqrt(x * x + y * y)
        l = (l - self.distance) / l * self.alpha * self.config.link_strength
        x *= l
        y *= l

        b = self.bias
        np.add.at(s.vx, tgt, -x * b)
        np.add.at(s.vy, tgt, -y * b)
        np.add.at(s.vx, src, x * (1 - b))
        np.add.at(s.vy, src, y * (1 - b))

    def _collide(self) -> None:
        s = self.state
        n = len(s.x)
        if n < 2:
            return
        xi = s.x + s.vx
        yi = s.y + s.vy
        i, j = np.triu_indices(n, k=1)
        x = xi[i] - xi[j]
        y = yi[i] - yi[j]
        r = self.radius[i] + self.radius[j]
        l = x * x + y * y
        hit = l < r * r
        if not hit.any():
            return

        i, j, x, y, r, l = i[hit], j[hit], x[hit], y[hit], r[hit], l[hit]
        zx = x == 0
        if zx.any():
            x[zx] = _jiggle(self.rng, int(zx.sum()))
            l = l + np.where(zx, x * x, 0.0)
        zy = y == 0
        if zy.any():
            y[zy] = _jiggle(self.rng, int(zy.sum()))
            l = l + np.where(zy, y * y, 0.0)

        dist = np.sqrt(l)
        k = (r - dist) / dist
        x *= k
        y *= k
        ri2 = self.radius[i] ** 2
        rj2 = self.radius[j] ** 2
        share = rj2 / (ri2 + rj2)
        np.add.at(s.vx, i, x * share)
        np.add.at(s.vy, i, y * share)
        np.add.at(s.vx, j, -x * (1 - share))
        np.add.at(s.vy, j, -y * (1 - share))

    def _pull_to_origin(self) -> None:
        s = self.state
        k = self.config.center_strength * self.alpha
        s.vx += (0.0 - s.x) * k
        s.vy += (0.0 - s.y) * k

    def _center(self) -> None:
        s = self.state
        if not len(s.x):
            return
        s.x -= s.x.mean()
        s.y -= s.y.mean()


def run_force_layout(
    centres: Sequence[Tuple[float, float]],
    sizes: Sequence[Tuple[float, float]],
    links: Sequence[Tuple[int, int]],
    config: Optional[LayoutConfig] = None,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """Simulate and return final centres as an (n, 2) array."""
    config = config or LayoutConfig()
    state = ForceState.from_centres(centres, sizes)
    sim = ForceSimulation(state, links, config=config, rng=rng)
    sim.run(tick_count(len(state.x), config))
    return np.column_stack([state.x, state.y])


def index_links(ids: Sequence[str], pairs: Sequence[Tuple[str, str]]) -> Sequence[Tuple[int, int]]:
    """Map (from, to) table names to row indices, dropping unknown names."""
    index: Dict[str, int] = {name: i for i, name in enumerate(ids)}
    return [(index[a], index[b]) for a, b in pairs if a in index and b in index]
