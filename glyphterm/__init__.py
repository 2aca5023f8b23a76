# glyphterm/__init__.py
from glyphterm.config import (
    BackendKind,
    FontSettings,
    LayerSettings,
    ScalingMode,
    TerminalSettings,
)
from glyphterm.console.atlas import SOLID_BLOCK_GLYPH, AtlasLayout, GlyphAtlasMapper
from glyphterm.console.glyph import GlyphCell, to_cp437
from glyphterm.console.mesh import GridMeshBuilder, MeshData
from glyphterm.console.scaler import ViewportScaler
from glyphterm.console.simple_console import SimpleConsole, SparseConsole
from glyphterm.console.swap import MeshSwapCoordinator, PendingSwap, SwapState

__all__ = [
    "BackendKind",
    "FontSettings",
    "LayerSettings",
    "ScalingMode",
    "TerminalSettings",
    "SOLID_BLOCK_GLYPH",
    "AtlasLayout",
    "GlyphAtlasMapper",
    "GlyphCell",
    "to_cp437",
    "GridMeshBuilder",
    "MeshData",
    "ViewportScaler",
    "SimpleConsole",
    "SparseConsole",
    "MeshSwapCoordinator",
    "PendingSwap",
    "SwapState",
]
