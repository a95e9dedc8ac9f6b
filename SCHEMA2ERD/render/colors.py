"""Per-link stroke colours."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from SCHEMA2ERD.routing.router import link_endpoints

DEFAULT_PALETTE = (
    "#ef4444", "#3b82f6", "#10b981", "#f59e0b", "#8b5cf6", "#ec4899",
    "#06b6d4", "#14b8a6", "#84cc16", "#e11d48", "#0ea5e9", "#22c55e",
    "#a855f7", "#f43f5e", "#f97316", "#eab308", "#38bdf8", "#34d399",
    "#60a5fa", "#a3e635", "#fb923c", "#c084fc", "#fbbf24", "#4ade80",
)


class ColorSchemes:
    DEFAULT = "default"
    PASTEL = "pastel"
    MONOCHROME = "monochrome"
    BOLD = "bold"


SCHEME_PALETTES: Dict[str, Sequence[str]] = {
    ColorSchemes.DEFAULT: DEFAULT_PALETTE,
    ColorSchemes.PASTEL: (
        "#fbb6ce", "#fbd38d", "#bee3f8", "#c6f6d5", "#e9d8fd",
        "#fecaca", "#fed7aa", "#a5f3fc", "#bbf7d0", "#ddd6fe",
    ),
    ColorSchemes.MONOCHROME: (
        "#1f2937", "#374151", "#4b5563", "#6b7280", "#9ca3af",
        "#d1d5db", "#e5e7eb", "#f3f4f6", "#3b82f6", "#60a5fa",
    ),
    ColorSchemes.BOLD: (
        "#dc2626", "#ea580c", "#ca8a04", "#16a34a", "#0284c7",
        "#7c3aed", "#c026d3", "#be123c", "#0891b2", "#4f46e5",
    ),
}


class LinkColorManager:
    """Hands out palette colours by link index or by relationship key.

    Index colouring is stateless (cycles through the palette); key colouring
    remembers the colour given to each `from->to` key until `reset()`.
    """

    def __init__(self, palette: Optional[Sequence[str]] = None):
        self.palette: List[str] = list(palette or DEFAULT_PALETTE)
        self._assignments: Dict[str, str] = {}
        self._next_index = 0

    def color_by_index(self, index: int) -> str:
        return self.palette[index % len(self.palette)]

    def color_by_key(self, key: str) -> str:
        color = self._assignments.get(key)
        if color is None:
            color = self.palette[self._next_index % len(self.palette)]
            self._assignments[key] = color
            self._next_index += 1
        return color

    def assign_by_index(self, links: Sequence[Any]) -> List[str]:
        return [self.color_by_index(i) for i in range(len(links))]

    def assign_by_relationship(self, links: Sequence[Any]) -> List[str]:
        colors = []
        for link in links:
            from_id, to_id, _, _ = link_endpoints(link)
            colors.append(self.color_by_key(f"{from_id}->{to_id}"))
        return colors

    def reset(self) -> None:
        self._assignments.clear()
        self._next_index = 0

    def set_palette(self, palette: Sequence[str]) -> None:
        if isinstance(palette, str) or not palette:
            raise ValueError("Palette must be a non-empty sequence of color codes")
        self.palette = list(palette)
        self.reset()

    def get_palette(self) -> List[str]:
        return list(self.palette)

    def apply_scheme(self, scheme: str) -> None:
        """Switch to a named scheme; unknown names fall back to the default palette."""
        self.set_palette(SCHEME_PALETTES.get(scheme, DEFAULT_PALETTE))
