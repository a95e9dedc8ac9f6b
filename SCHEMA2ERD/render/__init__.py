"""SVG rendering surface: canvas, table cards, links, colours, text widths."""

from .colors import DEFAULT_PALETTE, ColorSchemes, LinkColorManager
from .measure import FontSpec, TextMeasurer
from .svg import (
    SVG_NS,
    LinkElement,
    LinkRenderer,
    SvgCanvas,
    TableElement,
    TableRenderer,
    has_class,
    toggle_class,
)

__all__ = [
    "DEFAULT_PALETTE",
    "ColorSchemes",
    "LinkColorManager",
    "FontSpec",
    "TextMeasurer",
    "SVG_NS",
    "LinkElement",
    "LinkRenderer",
    "SvgCanvas",
    "TableElement",
    "TableRenderer",
    "has_class",
    "toggle_class",
]
