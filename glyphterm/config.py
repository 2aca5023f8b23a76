# glyphterm/config.py
from __future__ import annotations

import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Tuple

from glyphterm.console.atlas import AtlasLayout
from glyphterm.types import PixelSize


class ScalingMode(str, Enum):
    """How the terminal grid is fitted into the window."""

    # Keep the content aspect ratio, scale by any real factor.
    STRETCH = "stretch"
    # Scale by the largest whole multiple that fits; letterbox the rest.
    PIXEL_PERFECT = "pixel_perfect"
    # Keep the glyph size and change the number of rows/columns instead.
    RESIZE_TERMINALS = "resize_terminals"


class BackendKind(str, Enum):
    """Mesh layouts a console can be rendered with."""

    WITH_BACKGROUND = "with_background"
    NO_BACKGROUND = "no_background"
    SPARSE = "sparse"


def default_gutter_size(platform: str | None = None) -> float:
    """
    Gutter left around the terminal when the window is letterboxed.

    Windows and macOS compositors clip the outermost pixels of a resizable
    GL window, so a small gutter is kept there.
    """
    platform = sys.platform if platform is None else platform
    if platform.startswith("win") or platform == "darwin":
        return 2.0
    return 0.0


@dataclass(frozen=True, slots=True)
class FontSettings:
    """A glyph atlas image and how it is sliced."""

    path: Path
    columns: int = 16
    rows: int = 16
    glyph_px: PixelSize = (8.0, 8.0)

    def layout(self) -> AtlasLayout:
        return AtlasLayout(self.columns, self.rows, self.glyph_px)


@dataclass(frozen=True, slots=True)
class LayerSettings:
    """One console layer drawn with the font at `font_index`."""

    font_index: int
    width: int
    height: int
    backend: BackendKind = BackendKind.WITH_BACKGROUND

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ValueError(
                f"Layer must be at least 1x1 cells, got {self.width}x{self.height}"
            )


@dataclass(frozen=True, slots=True)
class TerminalSettings:
    """Top-level configuration consumed by the Application."""

    fonts: Tuple[FontSettings, ...]
    layers: Tuple[LayerSettings, ...]
    width_px: int = 1280
    height_px: int = 800
    title: str = "glyphterm"
    scaling_mode: ScalingMode = ScalingMode.STRETCH
    desired_gutter: float = field(default_factory=default_gutter_size)
    # Pending mesh swaps above this count are reported as a diagnostic.
    max_pending_swaps: int = 16
    vsync: bool = True

    def __post_init__(self) -> None:
        if self.width_px < 1 or self.height_px < 1:
            raise ValueError(
                f"Window must be at least 1x1 pixels, got "
                f"{self.width_px}x{self.height_px}"
            )
        if not self.fonts:
            raise ValueError("At least one font is required")
        if not self.layers:
            raise ValueError("At least one layer is required")
        for layer in self.layers:
            if not 0 <= layer.font_index < len(self.fonts):
                raise ValueError(
                    f"Layer references font {layer.font_index}, "
                    f"but only {len(self.fonts)} font(s) are configured"
                )
        if self.desired_gutter < 0:
            raise ValueError(f"Gutter must be >= 0, got {self.desired_gutter}")

    @staticmethod
    def simple_80x50(font_path: Path | str, **kwargs) -> TerminalSettings:
        """One 80x50 console using a 16x16 atlas of 8x8 glyphs."""
        return TerminalSettings(
            fonts=(FontSettings(Path(font_path)),),
            layers=(LayerSettings(font_index=0, width=80, height=50),),
            width_px=kwargs.pop("width_px", 80 * 8 * 2),
            height_px=kwargs.pop("height_px", 50 * 8 * 2),
            **kwargs,
        )
