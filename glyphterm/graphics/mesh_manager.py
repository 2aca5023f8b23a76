# glyphterm/graphics/mesh_manager.py
from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import moderngl

from glyphterm.console.mesh import VERTEX_ATTRIBUTES, VERTEX_FORMAT, MeshData
from glyphterm.types import MeshId

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MeshHandle:
    """GPU-side mesh representation."""

    vbo: Optional[moderngl.Buffer]
    ibo: Optional[moderngl.Buffer]
    index_count: int
    vao_cache: Dict[int, moderngl.VertexArray]  # keyed by program id
    label: str


class MeshManager:
    """
    Uploads terminal meshes and tracks which ones exist on the GPU.

    `submit` only queues the data. Buffers are created by `flush`, which
    returns the ids that became ready; the caller turns those into MeshReady
    events for the next tick.
    """

    def __init__(self, gl: moderngl.Context, prefix: str = "terminal") -> None:
        self._gl = gl
        self._prefix = prefix
        self._ids = itertools.count(1)
        self._queued: Dict[MeshId, tuple[MeshData, str]] = {}
        self._meshes: Dict[MeshId, MeshHandle] = {}

    def __contains__(self, mesh_id: object) -> bool:
        return mesh_id in self._meshes or mesh_id in self._queued

    @property
    def queued(self) -> List[MeshId]:
        return list(self._queued)

    def submit(self, data: MeshData, *, label: str = "") -> MeshId:
        """Queue `data` for upload and return its new identity."""
        mesh_id = MeshId(f"{self._prefix}.{next(self._ids)}")
        self._queued[mesh_id] = (data, label or str(mesh_id))
        logger.debug(
            "Queued mesh %s (%d vertices, %d indices)",
            mesh_id,
            data.vertex_count,
            data.index_count,
        )
        return mesh_id

    def flush(self) -> List[MeshId]:
        """Create GPU buffers for every queued mesh. Returns the ready ids."""
        ready: List[MeshId] = []
        for mesh_id, (data, label) in self._queued.items():
            self._meshes[mesh_id] = self._upload(data, label)
            ready.append(mesh_id)
        self._queued.clear()

        if ready:
            logger.debug("Compiled %d mesh(es): %s", len(ready), ", ".join(ready))
        return ready

    def _upload(self, data: MeshData, label: str) -> MeshHandle:
        # Zero-sized buffers are rejected by the driver; an empty mesh draws nothing.
        if data.vertex_count == 0:
            return MeshHandle(None, None, 0, {}, label)

        vbo = self._gl.buffer(data.interleaved())
        ibo = self._gl.buffer(data.indices.astype("u4").tobytes())
        return MeshHandle(
            vbo=vbo,
            ibo=ibo,
            index_count=data.index_count,
            vao_cache={},
            label=label,
        )

    def is_ready(self, mesh_id: MeshId) -> bool:
        return mesh_id in self._meshes

    def get(self, mesh_id: MeshId) -> MeshHandle:
        """Retrieve an uploaded mesh handle."""
        try:
            return self._meshes[mesh_id]
        except KeyError:
            raise KeyError(f"Mesh '{mesh_id}' not found") from None

    def release(self, mesh_id: MeshId) -> None:
        """Free the GPU buffers for `mesh_id`. Unknown ids are ignored."""
        if self._queued.pop(mesh_id, None) is not None:
            return

        handle = self._meshes.pop(mesh_id, None)
        if handle is None:
            return

        for vao in handle.vao_cache.values():
            vao.release()
        if handle.vbo is not None:
            handle.vbo.release()
        if handle.ibo is not None:
            handle.ibo.release()
        logger.debug("Released mesh %s", mesh_id)

    def release_all(self) -> None:
        for mesh_id in list(self._meshes):
            self.release(mesh_id)
        self._queued.clear()

    def vao_for(
        self, mesh_id: MeshId, program: moderngl.Program
    ) -> Optional[moderngl.VertexArray]:
        """Create or reuse a VAO for the given mesh and program. None for empty meshes."""
        mesh = self.get(mesh_id)
        if mesh.vbo is None:
            return None

        key = id(program)
        vao = mesh.vao_cache.get(key)
        if vao is not None:
            return vao

        program_attribs = {
            name for name in program if isinstance(program[name], moderngl.Attribute)
        }
        if not program_attribs:
            raise RuntimeError("Program has no vertex attributes")

        # Attributes the program does not read are skipped as padding.
        final_fmt_parts = []
        final_attrs = []
        for attr_name, fmt in zip(VERTEX_ATTRIBUTES, VERTEX_FORMAT.split()):
            if attr_name in program_attribs:
                final_fmt_parts.append(fmt)
                final_attrs.append(attr_name)
            else:
                final_fmt_parts.append(f"{_format_size(fmt)}x")

        if not final_attrs:
            raise RuntimeError(
                f"No compatible vertex attributes between mesh '{mesh_id}' "
                f"and program {id(program)}"
            )

        vao = self._gl.vertex_array(
            program,
            [(mesh.vbo, " ".join(final_fmt_parts), *final_attrs)],
            index_buffer=mesh.ibo,
            index_element_size=4,
        )
        mesh.vao_cache[key] = vao
        return vao


def _format_size(fmt: str) -> int:
    # fmt examples: "3f", "2f", "4i"
    count = int(fmt[:-1])
    kind = fmt[-1]

    if kind in ("f", "i"):
        return count * 4
    if kind == "h":
        return count * 2

    raise ValueError(f"Unsupported vertex format: {fmt}")
