# glyphterm/graphics/shaders.py
from pathlib import Path
from typing import Dict

import moderngl

SHADER_DIR = Path(__file__).parent / "glsl"


class ShaderManager:
    """Compiles `{name}.vert` + `{name}.frag` pairs once and caches the program."""

    def __init__(self, ctx: moderngl.Context, shader_dir: Path = SHADER_DIR):
        self.ctx = ctx
        self.dir = Path(shader_dir)
        self._programs: Dict[str, moderngl.Program] = {}

    def get(self, name: str) -> moderngl.Program:
        if name not in self._programs:
            vert_path = self.dir / f"{name}.vert"
            frag_path = self.dir / f"{name}.frag"

            if not vert_path.exists() or not frag_path.exists():
                raise FileNotFoundError(f"Shader {name} missing in {self.dir}")

            self._programs[name] = self.ctx.program(
                vertex_shader=vert_path.read_text(),
                fragment_shader=frag_path.read_text(),
            )
        return self._programs[name]

    def release(self) -> None:
        for program in self._programs.values():
            program.release()
        self._programs.clear()
