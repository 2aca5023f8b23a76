# glyphterm/console/scaler.py
from __future__ import annotations

import logging
import math
from typing import Tuple

from glyphterm.config import ScalingMode, default_gutter_size
from glyphterm.types import GridPos, PixelSize

logger = logging.getLogger(__name__)


def round_nearest(value: float) -> float:
    """Round half up. Used for every pixel snap so edges agree with each other."""
    return float(math.floor(value + 0.5))


class ViewportScaler:
    """
    Fits a content rectangle into the physical viewport.

    Screen space used here has its origin at the centre of the viewport and
    y growing downward, so `top_left()` is the upper-left corner of the
    letterboxed content area and row 0 of a grid is the top row.

    Gutters are the total margin on an axis (both sides together); the
    content is centred, so each side receives half of it.
    """

    def __init__(self, desired_gutter: float | None = None) -> None:
        if desired_gutter is None:
            desired_gutter = default_gutter_size()

        self.physical_size: PixelSize = (0.0, 0.0)
        self.desired_gutter = float(desired_gutter)
        self.x_gutter = self.desired_gutter / 2.0
        self.y_gutter = self.desired_gutter / 2.0
        self.scale_factor = 1
        self.pixel_perfect = False

    def __repr__(self) -> str:
        return (
            f"ViewportScaler(size={self.physical_size}, "
            f"gutter=({self.x_gutter}, {self.y_gutter}), "
            f"scale={self.scale_factor}, pixel_perfect={self.pixel_perfect})"
        )

    def set_viewport_size(self, width: float, height: float) -> None:
        """Store a new physical size. Gutters fall back to the neutral default."""
        self.physical_size = (float(width), float(height))
        self.x_gutter = self.desired_gutter / 2.0
        self.y_gutter = self.desired_gutter / 2.0

    def recalculate(
        self,
        content_size: PixelSize,
        largest_cell_size: PixelSize,
        mode: ScalingMode,
    ) -> None:
        """
        Recompute gutters and scale for `content_size` (in unscaled pixels).

        `largest_cell_size` is accepted for callers that size content by their
        biggest font; the gutter arithmetic only depends on the content size.
        """
        if mode == ScalingMode.PIXEL_PERFECT:
            self.pixel_perfect = True
            self._recalculate_pixel_perfect(content_size)
        else:
            self.pixel_perfect = False
            self._recalculate_stretch(content_size)

        logger.debug(
            "Recalculated viewport for content %s (cell %s, %s): %r",
            content_size,
            largest_cell_size,
            mode.value,
            self,
        )

    def _recalculate_stretch(self, content_size: PixelSize) -> None:
        screen_w, screen_h = self.physical_size
        aspect_ratio = content_size[0] / content_size[1]

        perfect_height = screen_w / aspect_ratio
        if perfect_height <= screen_h:
            # Too tall: bars above and below
            self.y_gutter = screen_h - perfect_height
            self.x_gutter = self.desired_gutter
        else:
            # Too wide: bars left and right
            perfect_width = screen_h * aspect_ratio
            self.x_gutter = screen_w - perfect_width
            self.y_gutter = self.desired_gutter

        self.scale_factor = 1

    def _recalculate_pixel_perfect(self, content_size: PixelSize) -> None:
        screen_w, screen_h = self.physical_size

        max_scale_x = math.floor(screen_w / content_size[0])
        max_scale_y = math.floor(screen_h / content_size[1])
        self.scale_factor = max(1, min(max_scale_x, max_scale_y))

        self.x_gutter = screen_w - content_size[0] * self.scale_factor
        self.y_gutter = screen_h - content_size[1] * self.scale_factor

    def top_left(self) -> Tuple[float, float]:
        """Upper-left corner of the content area, relative to the viewport centre."""
        screen_w, screen_h = self.physical_size
        x = -(screen_w / 2.0) + (self.x_gutter / 2.0)
        y = -(screen_h / 2.0) + (self.y_gutter / 2.0)

        if self.pixel_perfect:
            return (round_nearest(x), round_nearest(y))
        return (x, y)

    def step(
        self, width: int, height: int, cell_px: PixelSize
    ) -> Tuple[float, float]:
        """On-screen size of one cell of a `width` x `height` grid."""
        if self.pixel_perfect:
            return (
                cell_px[0] * self.scale_factor,
                cell_px[1] * self.scale_factor,
            )

        screen_w, screen_h = self.physical_size
        return (
            (screen_w - self.x_gutter) / width,
            (screen_h - self.y_gutter) / height,
        )

    def available_size(self) -> Tuple[float, float]:
        screen_w, screen_h = self.physical_size
        return (screen_w - self.x_gutter, screen_h - self.y_gutter)

    def inverse_map(
        self,
        pointer_local: Tuple[float, float],
        width: int,
        height: int,
        cell_px: PixelSize,
    ) -> GridPos:
        """
        Convert a pointer position into the (column, row) under it.

        `pointer_local` is measured from the viewport centre with y growing
        downward, and resolved against `top_left()`, the corner the mesh
        edges start from. Positions outside the grid clamp to the nearest
        edge cell.
        """
        left, top = self.top_left()
        step_x, step_y = self.step(width, height, cell_px)
        col = math.floor((pointer_local[0] - left) / step_x)
        row = math.floor((pointer_local[1] - top) / step_y)

        return (
            min(max(col, 0), width - 1),
            min(max(row, 0), height - 1),
        )

    def cell_center(
        self, col: int, row: int, width: int, height: int, cell_px: PixelSize
    ) -> Tuple[float, float]:
        """Screen position of the middle of a cell; the forward counterpart of inverse_map."""
        left, top = self.top_left()
        step_x, step_y = self.step(width, height, cell_px)
        return (left + (col + 0.5) * step_x, top + (row + 0.5) * step_y)
