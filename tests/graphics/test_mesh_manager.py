import numpy as np
import pytest

from glyphterm.console.glyph import GlyphCell
from glyphterm.console.mesh import GridMeshBuilder, MeshData
from glyphterm.config import ScalingMode
from glyphterm.graphics.mesh_manager import MeshManager, _format_size


@pytest.fixture
def meshes(fake_gl):
    return MeshManager(fake_gl)


@pytest.fixture
def quad(atlas, scaler):
    scaler.set_viewport_size(64, 64)
    scaler.recalculate((8.0, 8.0), (8.0, 8.0), ScalingMode.PIXEL_PERFECT)
    return GridMeshBuilder(atlas, (8.0, 8.0)).build([GlyphCell()], 1, 1, scaler)


def test_submit_queues_without_uploading(meshes, fake_gl, quad):
    mesh_id = meshes.submit(quad)

    assert mesh_id == "terminal.1"
    assert mesh_id in meshes
    assert meshes.queued == [mesh_id]
    assert not meshes.is_ready(mesh_id)
    assert fake_gl.buffers == []


def test_ids_are_never_reused(meshes, quad):
    first = meshes.submit(quad)
    meshes.flush()
    meshes.release(first)

    assert meshes.submit(quad) == "terminal.2"


def test_flush_uploads_and_reports_ready(meshes, fake_gl, quad):
    a = meshes.submit(quad)
    b = meshes.submit(quad)

    assert meshes.flush() == [a, b]
    assert meshes.flush() == []
    assert meshes.is_ready(a) and meshes.is_ready(b)

    handle = meshes.get(a)
    assert handle.index_count == 12
    assert handle.vbo.data == quad.interleaved()
    assert np.frombuffer(handle.ibo.data, dtype=np.uint32).tolist() == quad.indices.tolist()
    assert len(fake_gl.buffers) == 4


def test_empty_mesh_has_no_buffers(meshes, fake_gl):
    mesh_id = meshes.submit(MeshData.empty())
    meshes.flush()

    assert meshes.is_ready(mesh_id)
    assert meshes.get(mesh_id).vbo is None
    assert meshes.vao_for(mesh_id, program=object()) is None
    assert fake_gl.buffers == []


def test_release_frees_buffers(meshes, quad):
    mesh_id = meshes.submit(quad)
    meshes.flush()
    handle = meshes.get(mesh_id)

    meshes.release(mesh_id)

    assert handle.vbo.released and handle.ibo.released
    assert mesh_id not in meshes
    with pytest.raises(KeyError):
        meshes.get(mesh_id)


def test_release_of_queued_mesh_cancels_upload(meshes, fake_gl, quad):
    mesh_id = meshes.submit(quad)

    meshes.release(mesh_id)

    assert meshes.flush() == []
    assert fake_gl.buffers == []


def test_release_unknown_is_ignored(meshes):
    meshes.release("terminal.42")


def test_release_all(meshes, fake_gl, quad):
    meshes.submit(quad)
    meshes.flush()
    meshes.submit(quad)

    meshes.release_all()

    assert all(buf.released for buf in fake_gl.buffers)
    assert meshes.queued == []
    assert meshes.flush() == []


@pytest.mark.parametrize("fmt, size", [("3f", 12), ("2f", 8), ("4i", 16), ("2h", 4)])
def test_format_size(fmt, size):
    assert _format_size(fmt) == size


def test_format_size_rejects_unknown():
    with pytest.raises(ValueError):
        _format_size("3d")
