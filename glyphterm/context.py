# glyphterm/context.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Tuple

from glyphterm.config import BackendKind, FontSettings, ScalingMode, TerminalSettings
from glyphterm.console.atlas import AtlasLayout, GlyphAtlasMapper
from glyphterm.console.mesh import GridMeshBuilder, MeshData
from glyphterm.console.scaler import ViewportScaler
from glyphterm.console.simple_console import Console, SimpleConsole, SparseConsole
from glyphterm.console.swap import MeshSwapCoordinator
from glyphterm.types import GridPos, PixelSize

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FontStore:
    """CPU-side view of a loaded font: how to slice it and how to mesh with it."""

    settings: FontSettings
    layout: AtlasLayout
    mapper: GlyphAtlasMapper
    builder: GridMeshBuilder

    @staticmethod
    def from_settings(settings: FontSettings) -> FontStore:
        layout = settings.layout()
        mapper = GlyphAtlasMapper(layout)
        return FontStore(
            settings=settings,
            layout=layout,
            mapper=mapper,
            builder=GridMeshBuilder(mapper, layout.glyph_px),
        )

    @property
    def glyph_px(self) -> PixelSize:
        return self.layout.glyph_px


class TerminalContext:
    """
    Everything the terminal pipeline mutates during a tick.

    Owned by the World as a resource and handed to systems from there, so
    there is exactly one writer per tick.
    """

    def __init__(self, settings: TerminalSettings) -> None:
        self.settings = settings
        self.scaling_mode = settings.scaling_mode
        self.fonts: List[FontStore] = [FontStore.from_settings(f) for f in settings.fonts]
        self.consoles: List[Console] = []
        for layer in settings.layers:
            if layer.backend == BackendKind.SPARSE:
                console: Console = SparseConsole(layer.font_index, layer.width, layer.height)
            else:
                console = SimpleConsole(
                    layer.font_index, layer.width, layer.height, backend=layer.backend
                )
            self.consoles.append(console)

        self.scaler = ViewportScaler(settings.desired_gutter)
        self.swaps = MeshSwapCoordinator(max_pending=settings.max_pending_swaps)

        self.active_console = 0
        self.mouse_pixel: Tuple[float, float] = (0.0, 0.0)
        self.mouse_cell: GridPos = (0, 0)
        self.fps = 0.0
        self.frame_time_ms = 0.0

        self.on_resize(settings.width_px, settings.height_px)

    # CONSOLES
    def console(self, index: int | None = None) -> Console:
        """The console at `index`, or the active one."""
        return self.consoles[self.active_console if index is None else index]

    def set_active_console(self, index: int) -> None:
        if not 0 <= index < len(self.consoles):
            raise IndexError(
                f"Console {index} does not exist ({len(self.consoles)} configured)"
            )
        self.active_console = index

    def font(self, index: int) -> FontStore:
        try:
            return self.fonts[index]
        except IndexError:
            raise KeyError(f"Font {index} not found") from None

    def font_for(self, layer: int) -> FontStore:
        return self.font(self.consoles[layer].font_index)

    def mark_all_dirty(self) -> None:
        for console in self.consoles:
            console.dirty = True

    # SIZING
    def pixel_size(self) -> PixelSize:
        """Unscaled size of layer 0 in pixels; every other layer is fitted over it."""
        base = self.consoles[0]
        glyph_w, glyph_h = self.font_for(0).glyph_px
        return (base.width * glyph_w, base.height * glyph_h)

    def largest_font(self) -> PixelSize:
        return (
            max(f.glyph_px[0] for f in self.fonts),
            max(f.glyph_px[1] for f in self.fonts),
        )

    def resize_terminals(self) -> None:
        """Give every console as many cells as fit the current viewport."""
        available = self.scaler.available_size()
        for idx, console in enumerate(self.consoles):
            before = (console.width, console.height)
            after = console.resize_to_fit(available, self.font_for(idx).glyph_px)
            if after != before:
                logger.info("Console %d resized from %dx%d to %dx%d", idx, *before, *after)

    def on_resize(self, width: int, height: int) -> None:
        """Apply a new window size: refit the grid or the scale, then mark for rebuild."""
        self.scaler.set_viewport_size(width, height)
        if self.scaling_mode == ScalingMode.RESIZE_TERMINALS:
            self.resize_terminals()
        self.scaler.recalculate(self.pixel_size(), self.largest_font(), self.scaling_mode)
        self.mark_all_dirty()

    def set_scaling_mode(self, mode: ScalingMode) -> None:
        self.scaling_mode = mode
        width, height = self.scaler.physical_size
        self.on_resize(int(width), int(height))

    # MESHES
    def build_mesh(self, layer: int) -> MeshData:
        console = self.consoles[layer]
        return console.build_mesh(self.font_for(layer).builder, self.scaler)

    # TIMING
    def update_timing(self, fps: float, frame_time_ms: float) -> None:
        """Record frame statistics, rounded to whole numbers for display."""
        self.fps = float(round(fps))
        self.frame_time_ms = float(round(frame_time_ms))

    # POINTER
    def set_mouse_pixel_position(self, pos: Tuple[float, float]) -> None:
        """
        Record the pointer, measured from the viewport centre with y down,
        and resolve the cell it covers on the active console.
        """
        self.mouse_pixel = pos
        console = self.console()
        self.mouse_cell = self.scaler.inverse_map(
            pos,
            console.width,
            console.height,
            self.font_for(self.active_console).glyph_px,
        )
