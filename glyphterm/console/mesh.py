# glyphterm/console/mesh.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from glyphterm.config import BackendKind
from glyphterm.console.atlas import SOLID_BLOCK_GLYPH, GlyphAtlasMapper
from glyphterm.console.glyph import GlyphCell
from glyphterm.console.scaler import ViewportScaler
from glyphterm.types import PixelSize

BACKGROUND_DEPTH = 0.0
FOREGROUND_DEPTH = 0.5

VERTICES_PER_QUAD = 4
INDICES_PER_QUAD = 6

# Corner order: top-left, top-right, bottom-left, bottom-right.
# Two triangles, (0, 1, 2) and (3, 2, 1), share the same orientation.
QUAD_INDEX_PATTERN = np.array([0, 1, 2, 3, 2, 1], dtype=np.uint32)

VERTEX_FORMAT = "3f 3f 2f 4f"
VERTEX_ATTRIBUTES = ("in_position", "in_normal", "in_uv", "in_color")


@dataclass(frozen=True, slots=True)
class MeshData:
    """CPU-side triangle list produced by a rebuild, ready for upload."""

    positions: np.ndarray  # (N, 3) float32
    normals: np.ndarray  # (N, 3) float32
    uv: np.ndarray  # (N, 2) float32
    colors: np.ndarray  # (N, 4) float32
    indices: np.ndarray  # (M,) uint32

    @property
    def vertex_count(self) -> int:
        return int(self.positions.shape[0])

    @property
    def index_count(self) -> int:
        return int(self.indices.shape[0])

    def interleaved(self) -> bytes:
        """Pack the vertex streams as VERTEX_FORMAT for a single VBO."""
        packed = np.hstack((self.positions, self.normals, self.uv, self.colors))
        return np.ascontiguousarray(packed, dtype=np.float32).tobytes()

    @staticmethod
    def empty() -> MeshData:
        return MeshData(
            positions=np.zeros((0, 3), dtype=np.float32),
            normals=np.zeros((0, 3), dtype=np.float32),
            uv=np.zeros((0, 2), dtype=np.float32),
            colors=np.zeros((0, 4), dtype=np.float32),
            indices=np.zeros((0,), dtype=np.uint32),
        )


@dataclass(frozen=True, slots=True)
class _Layer:
    cols: np.ndarray
    rows: np.ndarray
    glyphs: np.ndarray
    colors: np.ndarray
    depth: float


class GridMeshBuilder:
    """
    Turns a grid of GlyphCells into a screen-space triangle mesh.

    Every cell becomes one quad per layer. Background quads sample the solid
    block glyph tinted with the cell background; foreground quads sample the
    cell glyph tinted with the foreground colour and sit in front of them.
    All background quads precede all foreground quads in the output.
    """

    def __init__(self, atlas: GlyphAtlasMapper, cell_px: PixelSize) -> None:
        self.atlas = atlas
        self.cell_px = cell_px

    def build(
        self,
        cells: Sequence[GlyphCell],
        width: int,
        height: int,
        scaler: ViewportScaler,
        kind: BackendKind = BackendKind.WITH_BACKGROUND,
        positions: Sequence[int] | None = None,
    ) -> MeshData:
        """
        Rebuild the whole mesh.

        `positions` holds the row-major grid index of each entry in `cells`;
        when omitted, `cells` is the full row-major grid.
        """
        count = len(cells)
        if positions is None:
            if count != width * height:
                raise ValueError(
                    f"Expected {width * height} cells for a {width}x{height} "
                    f"grid, got {count}"
                )
            index = np.arange(count, dtype=np.int64)
        else:
            index = np.fromiter(positions, dtype=np.int64, count=count)

        cols = index % width
        rows = index // width
        glyphs = self.atlas.clamp(
            np.fromiter((c.glyph for c in cells), dtype=np.int64, count=count)
        )
        fg = np.array([c.foreground for c in cells], dtype=np.float32).reshape(-1, 4)
        bg = np.array([c.background for c in cells], dtype=np.float32).reshape(-1, 4)
        solid = np.full(count, SOLID_BLOCK_GLYPH, dtype=np.int64)

        foreground = _Layer(cols, rows, glyphs, fg, FOREGROUND_DEPTH)

        match kind:
            case BackendKind.WITH_BACKGROUND:
                layers = [_Layer(cols, rows, solid, bg, BACKGROUND_DEPTH), foreground]
            case BackendKind.NO_BACKGROUND:
                layers = [foreground]
            case BackendKind.SPARSE:
                visible = bg[:, 3] > 0.0
                layers = [
                    _Layer(
                        cols[visible],
                        rows[visible],
                        solid[visible],
                        bg[visible],
                        BACKGROUND_DEPTH,
                    ),
                    foreground,
                ]
            case _:
                raise ValueError(f"Unknown backend kind: {kind!r}")

        xs, ys = self.edges(width, height, scaler)
        return self._assemble(layers, xs, ys)

    def edges(
        self, width: int, height: int, scaler: ViewportScaler
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Column and row boundaries in screen space.

        xs[i] is the left edge of column i and xs[width] the right edge of the
        last column. Outside pixel-perfect mode every edge is snapped to a
        whole pixel so neighbouring cells share it and no seam opens up.
        """
        left, top = scaler.top_left()
        step_x, step_y = scaler.step(width, height, self.cell_px)

        xs = left + np.arange(width + 1, dtype=np.float64) * step_x
        ys = top + np.arange(height + 1, dtype=np.float64) * step_y

        if not scaler.pixel_perfect:
            xs = np.floor(xs + 0.5)
            ys = np.floor(ys + 0.5)
        return xs, ys

    def _assemble(
        self, layers: Sequence[_Layer], xs: np.ndarray, ys: np.ndarray
    ) -> MeshData:
        quad_count = sum(len(layer.cols) for layer in layers)
        if quad_count == 0:
            return MeshData.empty()

        positions = np.empty((quad_count, VERTICES_PER_QUAD, 3), dtype=np.float32)
        uv = np.empty((quad_count, VERTICES_PER_QUAD, 2), dtype=np.float32)
        colors = np.empty((quad_count, VERTICES_PER_QUAD, 4), dtype=np.float32)

        start = 0
        for layer in layers:
            n = len(layer.cols)
            if n == 0:
                continue
            end = start + n

            left = xs[layer.cols]
            right = xs[layer.cols + 1]
            top = ys[layer.rows]
            bottom = ys[layer.rows + 1]

            quad = positions[start:end]
            quad[:, 0, 0], quad[:, 0, 1] = left, top
            quad[:, 1, 0], quad[:, 1, 1] = right, top
            quad[:, 2, 0], quad[:, 2, 1] = left, bottom
            quad[:, 3, 0], quad[:, 3, 1] = right, bottom
            quad[:, :, 2] = layer.depth

            # Atlas v grows downward like screen y, so top corners take v0.
            tex = self.atlas.texture_coords_array(layer.glyphs)
            u0, v0, u1, v1 = tex[:, 0], tex[:, 1], tex[:, 2], tex[:, 3]
            quad_uv = uv[start:end]
            quad_uv[:, 0, 0], quad_uv[:, 0, 1] = u0, v0
            quad_uv[:, 1, 0], quad_uv[:, 1, 1] = u1, v0
            quad_uv[:, 2, 0], quad_uv[:, 2, 1] = u0, v1
            quad_uv[:, 3, 0], quad_uv[:, 3, 1] = u1, v1

            colors[start:end] = layer.colors[:, np.newaxis, :]
            start = end

        vertex_count = quad_count * VERTICES_PER_QUAD
        normals = np.zeros((vertex_count, 3), dtype=np.float32)
        normals[:, 2] = 1.0

        base = np.arange(quad_count, dtype=np.uint32) * VERTICES_PER_QUAD
        indices = (base[:, np.newaxis] + QUAD_INDEX_PATTERN).reshape(-1)

        return MeshData(
            positions=positions.reshape(vertex_count, 3),
            normals=normals,
            uv=uv.reshape(vertex_count, 2),
            colors=colors.reshape(vertex_count, 4),
            indices=indices.astype(np.uint32),
        )


def resize(available_size: PixelSize, cell_px: PixelSize) -> Tuple[int, int]:
    """How many whole cells of `cell_px` fit into `available_size` (at least 1x1)."""
    return (
        max(1, math.floor(available_size[0] / cell_px[0])),
        max(1, math.floor(available_size[1] / cell_px[1])),
    )
