# glyphterm/graphics/terminal_renderer.py
from __future__ import annotations

import logging
from typing import Dict, List

import moderngl

from glyphterm.components import DisplayMesh
from glyphterm.config import FontSettings
from glyphterm.core.world import World
from glyphterm.graphics.font_atlas import create_font_texture
from glyphterm.graphics.mesh_manager import MeshManager
from glyphterm.graphics.shaders import ShaderManager

logger = logging.getLogger(__name__)


class TerminalRenderer:
    """Draws every DisplayMesh entity whose mesh is on the GPU, layer by layer."""

    def __init__(
        self,
        gl: moderngl.Context,
        meshes: MeshManager,
        fonts: List[FontSettings],
        clear_color=(0.0, 0.0, 0.0, 1.0),
    ) -> None:
        self._gl = gl
        self._meshes = meshes
        self._shaders = ShaderManager(gl)
        self._program = self._shaders.get("terminal")
        self._textures: Dict[int, moderngl.Texture] = {
            idx: create_font_texture(gl, font) for idx, font in enumerate(fonts)
        }
        self.clear_color = clear_color

        self._u_viewport = self._program["u_viewport"]
        self._u_font = self._program["u_font"]
        self._u_font.value = 0

    def render(self, world: World, viewport: tuple[int, int]) -> int:
        """Draw the scene into the current framebuffer. Returns the draw count."""
        gl = self._gl
        width, height = viewport
        gl.viewport = (0, 0, width, height)
        gl.clear(*self.clear_color)

        # Layers are ordered by draw order, background quads by index order.
        gl.disable(moderngl.DEPTH_TEST | moderngl.CULL_FACE)
        gl.enable(moderngl.BLEND)
        gl.blend_func = moderngl.SRC_ALPHA, moderngl.ONE_MINUS_SRC_ALPHA

        self._u_viewport.value = (float(width), float(height))

        displays = sorted(
            (display for _, display in world.join(DisplayMesh)),
            key=lambda d: d.layer,
        )

        draws = 0
        for display in displays:
            if not self._meshes.is_ready(display.mesh_id):
                continue
            vao = self._meshes.vao_for(display.mesh_id, self._program)
            if vao is None:
                continue

            self._textures[display.font_index].use(location=0)
            vao.render(moderngl.TRIANGLES)
            draws += 1
        return draws

    def release(self) -> None:
        for texture in self._textures.values():
            texture.release()
        self._textures.clear()
        self._shaders.release()
