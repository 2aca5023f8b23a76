import pytest

from glyphterm.colors import BLUE, RED, YELLOW
from glyphterm.components import DisplayMesh
from glyphterm.config import LayerSettings, ScalingMode
from glyphterm.console.swap import SwapState
from glyphterm.context import TerminalContext
from glyphterm.core.events import PointerMoved, WindowResized
from glyphterm.core.scheduler import Scheduler, Stage
from glyphterm.graphics.mesh_manager import MeshManager
from glyphterm.systems.terminal import add_terminal_systems
from tests.conftest import make_settings


class Pipeline:
    """A headless world running the terminal systems against a fake GL context."""

    def __init__(self, world, gl, settings):
        self.world = world
        self.gl = gl
        self.ctx = TerminalContext(settings)
        self.meshes = MeshManager(gl)
        world.add_resource(self.ctx)
        world.add_resource(self.meshes)

        self.scheduler = Scheduler()
        add_terminal_systems(self.scheduler)
        self.scheduler.run_stage(Stage.STARTUP, world)

    def tick(self, count: int = 1) -> None:
        for _ in range(count):
            self.scheduler.tick(self.world)

    def displayed(self):
        return sorted(
            (d.layer, d.mesh_id) for _, d in self.world.join(DisplayMesh)
        )


@pytest.fixture
def pipeline(world, fake_gl):
    return Pipeline(world, fake_gl, make_settings())


def test_startup_spawns_one_display_per_layer(world, fake_gl):
    layers = (
        LayerSettings(font_index=0, width=80, height=50),
        LayerSettings(font_index=0, width=80, height=50),
    )
    p = Pipeline(world, fake_gl, make_settings(layers=layers))

    assert p.displayed() == [(0, "terminal.1"), (1, "terminal.2")]
    assert p.meshes.queued == ["terminal.1", "terminal.2"]


def test_first_meshes_compile_without_swapping(pipeline):
    pipeline.tick()

    assert pipeline.meshes.is_ready("terminal.1")
    assert pipeline.displayed() == [(0, "terminal.1")]

    # The ready notice for the initial mesh matches no swap
    pipeline.tick()

    assert pipeline.displayed() == [(0, "terminal.1")]
    assert len(pipeline.ctx.swaps) == 0
    assert not any(buf.released for buf in pipeline.gl.buffers)


def test_write_swaps_on_the_tick_after_compile(pipeline):
    pipeline.tick(2)
    old = pipeline.meshes.get("terminal.1")

    pipeline.ctx.console().set(0, 0, ord("@"), YELLOW, BLUE)
    pipeline.tick()

    # Rebuilt and compiled, but the display still shows the old mesh
    assert pipeline.meshes.is_ready("terminal.2")
    assert pipeline.displayed() == [(0, "terminal.1")]
    assert [s.state for s in pipeline.ctx.swaps.pending] == [SwapState.REQUESTED]

    pipeline.tick()

    assert pipeline.displayed() == [(0, "terminal.2")]
    assert old.vbo.released and old.ibo.released
    assert not pipeline.meshes.is_ready("terminal.1")
    assert len(pipeline.ctx.swaps) == 0


def test_clean_consoles_are_not_rebuilt(pipeline):
    pipeline.tick(5)

    assert pipeline.displayed() == [(0, "terminal.1")]
    assert len(pipeline.gl.buffers) == 2


def test_rebuild_waits_for_pending_swap(pipeline):
    pipeline.tick(2)
    console = pipeline.ctx.console()

    console.set(0, 0, ord("a"), RED, BLUE)
    pipeline.tick()
    console.set(1, 0, ord("b"), RED, BLUE)
    pipeline.tick()

    # terminal.2 was applied this tick; the second write is still queued
    assert pipeline.displayed() == [(0, "terminal.2")]
    assert console.dirty
    assert "terminal.3" not in pipeline.meshes

    pipeline.tick(2)

    assert pipeline.displayed() == [(0, "terminal.3")]
    assert not console.dirty


def test_resizes_in_one_tick_collapse_to_the_last(pipeline):
    pipeline.tick(2)
    pipeline.world.emit_event(WindowResized(800, 600))
    pipeline.world.emit_event(WindowResized(1280, 800))

    pipeline.tick()

    assert pipeline.ctx.scaler.physical_size == (1280.0, 800.0)
    assert pipeline.meshes.is_ready("terminal.2")
    assert "terminal.3" not in pipeline.meshes


def test_resize_rebuilds_at_new_scale(pipeline):
    pipeline.tick(2)
    pipeline.world.emit_event(WindowResized(2560, 1600))

    pipeline.tick(2)

    assert pipeline.ctx.scaler.scale_factor == 4
    assert pipeline.displayed() == [(0, "terminal.2")]


def test_pointer_maps_to_cell(pipeline):
    # 1920x1080 at scale 2: the grid spans x -640..640, y -400..400 from centre
    pipeline.world.emit_event(PointerMoved(968.0, 548.0))

    pipeline.tick()

    assert pipeline.ctx.mouse_pixel == (8.0, 8.0)
    assert pipeline.ctx.mouse_cell == (40, 25)


def test_pointer_uses_size_from_same_tick_resize(pipeline):
    pipeline.world.emit_event(WindowResized(640, 400))
    pipeline.world.emit_event(PointerMoved(16.0, 16.0))

    pipeline.tick()

    # 640x400 at scale 1: the grid starts at the window corner
    assert pipeline.ctx.mouse_cell == (2, 2)


def test_resize_terminals_mode_changes_grid(world, fake_gl):
    p = Pipeline(world, fake_gl, make_settings(mode=ScalingMode.RESIZE_TERMINALS))
    assert (p.ctx.console().width, p.ctx.console().height) == (240, 135)

    world.emit_event(WindowResized(800, 600))
    p.tick(2)

    assert (p.ctx.console().width, p.ctx.console().height) == (100, 75)
    assert p.displayed() == [(0, "terminal.2")]


def test_switching_scaling_mode_marks_consoles_dirty(pipeline):
    pipeline.tick(2)

    pipeline.ctx.set_scaling_mode(ScalingMode.STRETCH)

    assert pipeline.ctx.console().dirty
    assert not pipeline.ctx.scaler.pixel_perfect
