# glyphterm/console/atlas.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from glyphterm.types import PixelSize

# Full-cell block in code page 437. Background quads sample this glyph so the
# background colour fills the whole cell.
SOLID_BLOCK_GLYPH = 219

# Fraction of one texel that every edge is pulled inward by.
BLEED_DIVISOR = 20.0

TexRect = Tuple[float, float, float, float]  # u0, v0, u1, v1


@dataclass(frozen=True, slots=True)
class AtlasLayout:
    """Describes how glyphs are packed into a font atlas image."""

    columns: int
    rows: int
    glyph_px: PixelSize

    def __post_init__(self) -> None:
        if self.columns < 1 or self.rows < 1:
            raise ValueError(
                f"Atlas must have at least one column and row, got "
                f"{self.columns}x{self.rows}"
            )
        if self.glyph_px[0] <= 0 or self.glyph_px[1] <= 0:
            raise ValueError(f"Glyph size must be positive, got {self.glyph_px}")

    @property
    def glyph_count(self) -> int:
        return self.columns * self.rows

    @property
    def image_size(self) -> Tuple[int, int]:
        return (
            int(self.columns * self.glyph_px[0]),
            int(self.rows * self.glyph_px[1]),
        )


class GlyphAtlasMapper:
    """
    Maps a glyph index onto its normalized rectangle in the atlas texture.

    Glyphs are laid out row-major: index 0 is the top-left cell, indices grow
    left to right and then top to bottom. The returned rectangle is shrunk by
    1/20th of a texel on every edge so linear filtering never samples the
    neighbouring glyph.
    """

    __slots__ = ("layout", "_step_u", "_step_v", "_eps_u", "_eps_v")

    def __init__(self, layout: AtlasLayout) -> None:
        self.layout = layout
        self._step_u = 1.0 / layout.columns
        self._step_v = 1.0 / layout.rows
        self._eps_u = (1.0 / (layout.columns * layout.glyph_px[0])) / BLEED_DIVISOR
        self._eps_v = (1.0 / (layout.rows * layout.glyph_px[1])) / BLEED_DIVISOR

    def texture_coords(self, glyph: int) -> TexRect:
        """Return (u0, v0, u1, v1) for glyph. Out-of-range glyphs are undefined."""
        columns = self.layout.columns
        col = glyph % columns
        row = glyph // columns

        u0 = col * self._step_u + self._eps_u
        v0 = row * self._step_v + self._eps_v
        u1 = (col + 1) * self._step_u - self._eps_u
        v1 = (row + 1) * self._step_v - self._eps_v
        return (u0, v0, u1, v1)

    def texture_coords_array(self, glyphs: np.ndarray) -> np.ndarray:
        """Vectorized texture_coords. Returns an (N, 4) float32 array."""
        glyphs = np.asarray(glyphs, dtype=np.int64)
        columns = self.layout.columns
        cols = glyphs % columns
        rows = glyphs // columns

        out = np.empty((glyphs.shape[0], 4), dtype=np.float64)
        out[:, 0] = cols * self._step_u + self._eps_u
        out[:, 1] = rows * self._step_v + self._eps_v
        out[:, 2] = (cols + 1) * self._step_u - self._eps_u
        out[:, 3] = (rows + 1) * self._step_v - self._eps_v
        return out.astype(np.float32)

    def clamp(self, glyphs: np.ndarray) -> np.ndarray:
        """Clamp glyph indices into the range the atlas can address."""
        return np.clip(glyphs, 0, self.layout.glyph_count - 1)
