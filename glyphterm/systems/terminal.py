# glyphterm/systems/terminal.py
from __future__ import annotations

import logging
from dataclasses import replace

from glyphterm.components import DisplayMesh
from glyphterm.context import TerminalContext
from glyphterm.core.events import MeshReady, PointerMoved, WindowResized
from glyphterm.core.scheduler import Scheduler, Stage
from glyphterm.core.world import World
from glyphterm.graphics.mesh_manager import MeshManager
from glyphterm.graphics.terminal_renderer import TerminalRenderer
from glyphterm.types import MeshId, SystemId

logger = logging.getLogger(__name__)


def spawn_terminals_system(world: World) -> None:
    """Build the first mesh of every console and spawn its display entity."""
    ctx = world.get_resource(TerminalContext)
    meshes = world.get_resource(MeshManager)

    for layer, console in enumerate(ctx.consoles):
        mesh_id = meshes.submit(ctx.build_mesh(layer), label=f"console {layer}")
        console.dirty = False
        world.create_entity(
            DisplayMesh(mesh_id=mesh_id, layer=layer, font_index=console.font_index)
        )


def window_resize_system(world: World) -> None:
    """Apply the newest resize of this tick; earlier ones are superseded."""
    event = world.latest_event(WindowResized)
    if event is None:
        return

    ctx = world.get_resource(TerminalContext)
    ctx.on_resize(event.width, event.height)
    logger.debug("Viewport resized to %dx%d: %r", event.width, event.height, ctx.scaler)


def update_pointer_system(world: World) -> None:
    """Convert the newest window-space pointer position into a grid cell."""
    event = world.latest_event(PointerMoved)
    if event is None:
        return

    ctx = world.get_resource(TerminalContext)
    screen_w, screen_h = ctx.scaler.physical_size
    ctx.set_mouse_pixel_position((event.x - screen_w / 2.0, event.y - screen_h / 2.0))


def update_consoles_system(world: World) -> None:
    """
    Rebuild dirty consoles and request a swap to the new mesh.

    A console whose previous replacement is still waiting on the backend
    stays dirty and is rebuilt once that swap has been applied.
    """
    ctx = world.get_resource(TerminalContext)
    meshes = world.get_resource(MeshManager)

    for _, display in world.join(DisplayMesh):
        console = ctx.consoles[display.layer]
        if not console.dirty or ctx.swaps.is_replacing(display.mesh_id):
            continue

        new_id = meshes.submit(ctx.build_mesh(display.layer), label=f"console {display.layer}")
        ctx.swaps.request(display.mesh_id, new_id)
        console.dirty = False


def replace_meshes_system(world: World) -> None:
    """Swap in every mesh the backend reported ready, then free what it replaced."""
    ready = [event.mesh_id for event in world.get_events(MeshReady)]
    if not ready:
        return

    ctx = world.get_resource(TerminalContext)
    meshes = world.get_resource(MeshManager)

    def repoint(old_ref: MeshId, new_ref: MeshId) -> int:
        count = 0
        for eid, display in world.join(DisplayMesh):
            if display.mesh_id == old_ref:
                world.mutate_component(eid, replace(display, mesh_id=new_ref))
                count += 1
        return count

    ctx.swaps.process_ready(ready, repoint=repoint, release=meshes.release)


def render_system(world: World) -> None:
    """Draw display entities when a renderer is attached (headless worlds skip this)."""
    renderer = world.try_resource(TerminalRenderer)
    if renderer is None:
        return

    ctx = world.get_resource(TerminalContext)
    width, height = ctx.scaler.physical_size
    renderer.render(world, (int(width), int(height)))


def compile_meshes_system(world: World) -> None:
    """Upload queued meshes. Their ready events are handled on the next tick."""
    meshes = world.get_resource(MeshManager)
    for mesh_id in meshes.flush():
        world.emit_event(MeshReady(mesh_id))


def add_terminal_systems(scheduler: Scheduler) -> None:
    scheduler.add_system(Stage.STARTUP, spawn_terminals_system)
    scheduler.add_system(Stage.INPUT, window_resize_system)
    scheduler.add_system(
        Stage.INPUT,
        update_pointer_system,
        after=SystemId("window_resize_system"),
    )
    scheduler.add_system(Stage.REBUILD, update_consoles_system)
    scheduler.add_system(Stage.SWAP, replace_meshes_system)
    scheduler.add_system(Stage.RENDER, render_system)
    scheduler.add_system(
        Stage.RENDER,
        compile_meshes_system,
        name=SystemId("compile_meshes"),
        after=SystemId("render_system"),
    )
