# glyphterm/components.py
from __future__ import annotations

from dataclasses import dataclass

from glyphterm.types import MeshId


@dataclass(frozen=True, slots=True)
class DisplayMesh:
    """An entity that draws `mesh_id` for console layer `layer`."""

    mesh_id: MeshId
    layer: int
    font_index: int = 0
