# glyphterm/colors.py
from __future__ import annotations

from glyphterm.types import RGBA

WHITE: RGBA = (1.0, 1.0, 1.0, 1.0)
BLACK: RGBA = (0.0, 0.0, 0.0, 1.0)
TRANSPARENT: RGBA = (0.0, 0.0, 0.0, 0.0)

RED: RGBA = (1.0, 0.0, 0.0, 1.0)
GREEN: RGBA = (0.0, 1.0, 0.0, 1.0)
BLUE: RGBA = (0.0, 0.0, 1.0, 1.0)
YELLOW: RGBA = (1.0, 1.0, 0.0, 1.0)
CYAN: RGBA = (0.0, 1.0, 1.0, 1.0)
MAGENTA: RGBA = (1.0, 0.0, 1.0, 1.0)
GREY: RGBA = (0.5, 0.5, 0.5, 1.0)


def rgba(r: float, g: float, b: float, a: float = 1.0) -> RGBA:
    """Build a colour tuple, clamping every channel into [0, 1]."""
    return (
        min(max(float(r), 0.0), 1.0),
        min(max(float(g), 0.0), 1.0),
        min(max(float(b), 0.0), 1.0),
        min(max(float(a), 0.0), 1.0),
    )


def rgb8(r: int, g: int, b: int, a: int = 255) -> RGBA:
    """Build a colour from 0-255 channel values."""
    return rgba(r / 255.0, g / 255.0, b / 255.0, a / 255.0)
