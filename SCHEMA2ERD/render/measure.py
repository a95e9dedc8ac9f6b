"""Text width measurement for headless rendering.

Without a browser there is no `getBBox()`. Widths come from the advance
lengths of a Pillow font per CSS class instead. A host that can measure
real text passes its own `measure(text, css_class)` callable.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Optional, Sequence, Tuple

from PIL import ImageFont

from SCHEMA2ERD.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class FontSpec:
    """Font the stylesheet uses for one text class."""
    size: int
    bold: bool = False


# Mirrors the stylesheet: bold header titles, slightly smaller type column
DEFAULT_FONTS: Dict[str, FontSpec] = {
    "title": FontSpec(size=14, bold=True),
    "cell-name": FontSpec(size=13),
    "cell-type": FontSpec(size=12),
}
FALLBACK_FONT = FontSpec(size=13)

# Pillow searches the platform font directories for bare file names
REGULAR_FONT_FILES: Tuple[str, ...] = ("DejaVuSans.ttf", "LiberationSans-Regular.ttf", "Arial.ttf", "arial.ttf")
BOLD_FONT_FILES: Tuple[str, ...] = ("DejaVuSans-Bold.ttf", "LiberationSans-Bold.ttf", "Arial Bold.ttf", "arialbd.ttf")

NARROW_CHARS = frozenset("iljtf.,:;'|!()[] ")
WIDE_CHARS = frozenset("mwMW@%")


def _heuristic_width(text: str, size: float, bold: bool = False) -> float:
    """Average-glyph estimate, used only when no font could be loaded."""
    avg = size * (0.62 if bold else 0.56)
    width = 0.0
    for ch in text:
        if ch in NARROW_CHARS:
            width += avg * 0.5
        elif ch in WIDE_CHARS:
            width += avg * 1.4
        else:
            width += avg
    return width


@lru_cache(maxsize=32)
def load_font(files: Tuple[str, ...], size: int) -> Optional[ImageFont.ImageFont]:
    """First loadable truetype font in `files`, else Pillow's default font at
    `size`, else None."""
    for name in files:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    try:
        font = ImageFont.load_default(size=size)
    except OSError as e:
        logger.warning(f"No font available for text measurement ({e}); estimating widths")
        return None
    logger.debug(f"None of {files} found; measuring with Pillow's default font")
    return font


class TextMeasurer:
    """Callable `measure(text, css_class) -> width` backed by Pillow fonts."""

    def __init__(
        self,
        fonts: Optional[Dict[str, FontSpec]] = None,
        regular_files: Sequence[str] = REGULAR_FONT_FILES,
        bold_files: Sequence[str] = BOLD_FONT_FILES,
    ):
        self.fonts = dict(DEFAULT_FONTS)
        if fonts:
            self.fonts.update(fonts)
        self.regular_files = tuple(regular_files)
        self.bold_files = tuple(bold_files)

    def __call__(self, text: str, css_class: str) -> float:
        return self.measure(text, css_class)

    def spec_for(self, css_class: str) -> FontSpec:
        return self.fonts.get(css_class, FALLBACK_FONT)

    def font(self, spec: FontSpec) -> Optional[ImageFont.ImageFont]:
        """Truetype font for `spec`, Pillow's built-in font, or None."""
        return load_font(self.bold_files if spec.bold else self.regular_files, spec.size)

    def measure(self, text: str, css_class: str) -> float:
        if not text:
            return 0.0
        spec = self.spec_for(css_class)
        font = self.font(spec)
        if font is None:
            return _heuristic_width(text, spec.size, spec.bold)
        return float(font.getlength(text))
