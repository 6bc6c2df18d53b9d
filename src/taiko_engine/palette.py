"""
Color generation for new connection pairs.

A fixed palette of well separated colors is used first; past its end,
colors are generated by stepping the hue by the golden angle so that
consecutive colors stay distinguishable.
"""

from __future__ import annotations

import colorsys
import re
from typing import Collection, Optional, Sequence

from .validation import ValidationError

_HEX_RE = re.compile(r"^#[0-9a-fA-F]{6}$")

DEFAULT_PALETTE: tuple[str, ...] = (
    "#e6194b",
    "#3cb44b",
    "#4363d8",
    "#f58231",
    "#911eb4",
    "#42d4f4",
    "#f032e6",
    "#bfef45",
    "#469990",
    "#9a6324",
    "#800000",
    "#808000",
    "#000075",
    "#fabed4",
    "#dcbeff",
    "#aaffc3",
)

GOLDEN_ANGLE = 137.50776405003785


class ColorPalette:
    """
    Deterministic color source indexed by a generation counter.

    Example:
        palette = ColorPalette()
        color, next_index = palette.next_color(0, used={"#e6194b"})
        # color == "#3cb44b", next_index == 2
    """

    def __init__(self, colors: Optional[Sequence[str]] = None) -> None:
        """
        Initialize palette.

        Args:
            colors: Hex colors ("#rrggbb") to hand out first

        Raises:
            ValidationError: If a color is not "#rrggbb"
        """
        colors = tuple(colors) if colors is not None else DEFAULT_PALETTE
        for color in colors:
            if not isinstance(color, str) or not _HEX_RE.match(color):
                raise ValidationError(f'Palette colors must look like "#rrggbb", got {color!r}')
        self._colors = tuple(c.lower() for c in colors)

    @property
    def colors(self) -> tuple[str, ...]:
        return self._colors

    def color_at(self, index: int) -> str:
        """Get the color for a generation index."""
        if index < len(self._colors):
            return self._colors[index]
        step = index - len(self._colors)
        hue = ((step * GOLDEN_ANGLE) % 360.0) / 360.0
        lightness = 0.45 + 0.1 * (step % 3)
        r, g, b = colorsys.hls_to_rgb(hue, lightness, 0.75)
        return f"#{round(r * 255):02x}{round(g * 255):02x}{round(b * 255):02x}"

    def next_color(self, index: int, used: Collection[str] = ()) -> tuple[str, int]:
        """
        Get the next color not currently in use.

        Args:
            index: Current generation counter
            used: Colors already on the board

        Returns:
            (color, next generation counter)
        """
        used_lower = {c.lower() for c in used}
        limit = index + len(self._colors) + len(used_lower) + 1
        candidate = index
        while candidate < limit:
            color = self.color_at(candidate)
            if color not in used_lower:
                return color, candidate + 1
            candidate += 1
        return self.color_at(candidate), candidate + 1


__all__ = ["ColorPalette", "DEFAULT_PALETTE"]
