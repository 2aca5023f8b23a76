# glyphterm/console/simple_console.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List, Tuple

from glyphterm.colors import BLACK, TRANSPARENT, WHITE
from glyphterm.config import BackendKind
from glyphterm.console.glyph import SPACE_GLYPH, GlyphCell, to_cp437
from glyphterm.console.mesh import GridMeshBuilder, MeshData, resize
from glyphterm.console.scaler import ViewportScaler
from glyphterm.types import RGBA, PixelSize


class Console(ABC):
    """Common write API shared by dense and sparse consoles."""

    backend: BackendKind

    def __init__(self, font_index: int, width: int, height: int) -> None:
        if width < 1 or height < 1:
            raise ValueError(f"Console must be at least 1x1, got {width}x{height}")
        self.font_index = font_index
        self.width = width
        self.height = height
        # Set on every write; cleared once a rebuilt mesh has been submitted.
        self.dirty = True

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def _index(self, x: int, y: int) -> int:
        if not self.in_bounds(x, y):
            raise IndexError(
                f"Cell ({x}, {y}) is outside the {self.width}x{self.height} console"
            )
        return y * self.width + x

    @abstractmethod
    def cls(self) -> None: ...

    @abstractmethod
    def set(self, x: int, y: int, glyph: int, fg: RGBA, bg: RGBA) -> None: ...

    @abstractmethod
    def set_glyph(self, x: int, y: int, glyph: int) -> None: ...

    @abstractmethod
    def set_foreground(self, x: int, y: int, fg: RGBA) -> None: ...

    @abstractmethod
    def set_background(self, x: int, y: int, bg: RGBA) -> None: ...

    @abstractmethod
    def resize(self, width: int, height: int) -> None: ...

    @abstractmethod
    def build_mesh(
        self, builder: GridMeshBuilder, scaler: ViewportScaler
    ) -> MeshData: ...

    def print(self, x: int, y: int, text: str) -> None:
        """Write `text` starting at (x, y), keeping existing colours. Clipped at the right edge."""
        for offset, ch in enumerate(text):
            if not self.in_bounds(x + offset, y):
                break
            self.set_glyph(x + offset, y, to_cp437(ch))

    def print_color(
        self, x: int, y: int, text: str, fg: RGBA, bg: RGBA = BLACK
    ) -> None:
        for offset, ch in enumerate(text):
            if not self.in_bounds(x + offset, y):
                break
            self.set(x + offset, y, to_cp437(ch), fg, bg)

    def print_centered(self, y: int, text: str) -> None:
        self.print(max(0, (self.width - len(text)) // 2), y, text)

    def resize_to_fit(
        self, available: PixelSize, cell_px: PixelSize
    ) -> Tuple[int, int]:
        """Change the grid to however many `cell_px` cells fit into `available`."""
        width, height = resize(available, cell_px)
        if (width, height) != (self.width, self.height):
            self.resize(width, height)
        return (width, height)


class SimpleConsole(Console):
    """A dense grid: every cell is stored and drawn."""

    def __init__(
        self,
        font_index: int,
        width: int,
        height: int,
        backend: BackendKind = BackendKind.WITH_BACKGROUND,
    ) -> None:
        if backend == BackendKind.SPARSE:
            raise ValueError("Use SparseConsole for the sparse backend")
        super().__init__(font_index, width, height)
        self.backend = backend
        self.terminal: List[GlyphCell] = [
            GlyphCell() for _ in range(width * height)
        ]

    def at(self, x: int, y: int) -> GlyphCell:
        return self.terminal[self._index(x, y)]

    def cls(self) -> None:
        for cell in self.terminal:
            cell.glyph = SPACE_GLYPH
            cell.foreground = WHITE
            cell.background = BLACK
        self.dirty = True

    def cls_bg(self, bg: RGBA) -> None:
        for cell in self.terminal:
            cell.glyph = SPACE_GLYPH
            cell.foreground = WHITE
            cell.background = bg
        self.dirty = True

    def set(self, x: int, y: int, glyph: int, fg: RGBA, bg: RGBA) -> None:
        cell = self.terminal[self._index(x, y)]
        cell.glyph = glyph
        cell.foreground = fg
        cell.background = bg
        self.dirty = True

    def set_glyph(self, x: int, y: int, glyph: int) -> None:
        self.terminal[self._index(x, y)].glyph = glyph
        self.dirty = True

    def set_foreground(self, x: int, y: int, fg: RGBA) -> None:
        self.terminal[self._index(x, y)].foreground = fg
        self.dirty = True

    def set_background(self, x: int, y: int, bg: RGBA) -> None:
        self.terminal[self._index(x, y)].background = bg
        self.dirty = True

    def resize(self, width: int, height: int) -> None:
        """Change grid dimensions, keeping the overlapping top-left region."""
        if width < 1 or height < 1:
            raise ValueError(f"Console must be at least 1x1, got {width}x{height}")

        old = self.terminal
        old_width, old_height = self.width, self.height
        self.terminal = [GlyphCell() for _ in range(width * height)]
        for y in range(min(height, old_height)):
            for x in range(min(width, old_width)):
                self.terminal[y * width + x] = old[y * old_width + x]

        self.width = width
        self.height = height
        self.dirty = True

    def build_mesh(self, builder: GridMeshBuilder, scaler: ViewportScaler) -> MeshData:
        return builder.build(
            self.terminal, self.width, self.height, scaler, kind=self.backend
        )


class SparseConsole(Console):
    """Only cells that have been written are stored; everything else is see-through."""

    backend = BackendKind.SPARSE

    def __init__(self, font_index: int, width: int, height: int) -> None:
        super().__init__(font_index, width, height)
        self.cells: Dict[int, GlyphCell] = {}

    def __len__(self) -> int:
        return len(self.cells)

    def at(self, x: int, y: int) -> GlyphCell | None:
        return self.cells.get(self._index(x, y))

    def _cell(self, x: int, y: int) -> GlyphCell:
        idx = self._index(x, y)
        cell = self.cells.get(idx)
        if cell is None:
            cell = GlyphCell(background=TRANSPARENT)
            self.cells[idx] = cell
        return cell

    def cls(self) -> None:
        self.cells.clear()
        self.dirty = True

    def set(self, x: int, y: int, glyph: int, fg: RGBA, bg: RGBA) -> None:
        self.cells[self._index(x, y)] = GlyphCell(glyph, fg, bg)
        self.dirty = True

    def set_glyph(self, x: int, y: int, glyph: int) -> None:
        self._cell(x, y).glyph = glyph
        self.dirty = True

    def set_foreground(self, x: int, y: int, fg: RGBA) -> None:
        self._cell(x, y).foreground = fg
        self.dirty = True

    def set_background(self, x: int, y: int, bg: RGBA) -> None:
        self._cell(x, y).background = bg
        self.dirty = True

    def resize(self, width: int, height: int) -> None:
        """Change grid dimensions, dropping cells that fall outside."""
        if width < 1 or height < 1:
            raise ValueError(f"Console must be at least 1x1, got {width}x{height}")

        kept: Dict[int, GlyphCell] = {}
        for idx, cell in self.cells.items():
            x, y = idx % self.width, idx // self.width
            if x < width and y < height:
                kept[y * width + x] = cell

        self.cells = kept
        self.width = width
        self.height = height
        self.dirty = True

    def build_mesh(self, builder: GridMeshBuilder, scaler: ViewportScaler) -> MeshData:
        positions = sorted(self.cells)
        return builder.build(
            [self.cells[idx] for idx in positions],
            self.width,
            self.height,
            scaler,
            kind=BackendKind.SPARSE,
            positions=positions,
        )
