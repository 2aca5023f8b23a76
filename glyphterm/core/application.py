# glyphterm/core/application.py
from __future__ import annotations

import logging
from typing import Optional

import moderngl
import pygame

from glyphterm.context import TerminalContext
from glyphterm.config import TerminalSettings
from glyphterm.core.events import WindowResized
from glyphterm.core.scheduler import Scheduler, Stage, SystemFn
from glyphterm.core.world import World
from glyphterm.graphics.mesh_manager import MeshManager
from glyphterm.graphics.terminal_renderer import TerminalRenderer
from glyphterm.input.handler import InputHandler
from glyphterm.systems.terminal import add_terminal_systems
from glyphterm.types import SystemId

logger = logging.getLogger(__name__)


class Application:
    """
    Owns the window, the GL context and the World, and runs the tick loop.

    User code registers systems for Stage.UPDATE and writes cells through the
    TerminalContext resource.
    """

    def __init__(self, settings: TerminalSettings, fps: int = 60) -> None:
        self.settings = settings
        self.fps = fps
        self.window: pygame.Surface | None = None
        self.ctx: moderngl.Context | None = None
        self.clock: pygame.time.Clock | None = None
        self.running = False

        self.world = World()
        self.scheduler = Scheduler()
        self.input = InputHandler()

        self.world.add_resource(TerminalContext(settings))
        self.world.add_resource(self.input)
        add_terminal_systems(self.scheduler)

    @property
    def terminal(self) -> TerminalContext:
        return self.world.get_resource(TerminalContext)

    def add_system(
        self,
        system: SystemFn,
        stage: Stage = Stage.UPDATE,
        name: Optional[SystemId] = None,
    ) -> None:
        self.scheduler.add_system(stage, system, name=name)

    def _ensure_window(self) -> None:
        if self.window is not None:
            return

        pygame.init()

        pygame.display.gl_set_attribute(pygame.GL_CONTEXT_MAJOR_VERSION, 3)
        pygame.display.gl_set_attribute(pygame.GL_CONTEXT_MINOR_VERSION, 3)
        pygame.display.gl_set_attribute(
            pygame.GL_CONTEXT_PROFILE_MASK, pygame.GL_CONTEXT_PROFILE_CORE
        )

        self.window = pygame.display.set_mode(
            (self.settings.width_px, self.settings.height_px),
            pygame.OPENGL | pygame.DOUBLEBUF | pygame.RESIZABLE,
            vsync=int(self.settings.vsync),
        )
        pygame.display.set_caption(self.settings.title)

        self.ctx = moderngl.create_context()
        gl_version = self.ctx.version_code
        logger.info("OpenGL version %s.%s", str(gl_version)[0], str(gl_version)[1:])

        meshes = MeshManager(self.ctx)
        self.world.add_resource(meshes)
        self.world.add_resource(
            TerminalRenderer(self.ctx, meshes, list(self.settings.fonts))
        )

        self.clock = pygame.time.Clock()

    def run(self) -> None:
        self._ensure_window()
        assert self.window is not None

        # The drawable size can differ from the requested one (HiDPI, tiling WMs).
        width, height = self.window.get_size()
        self.world.emit_event(WindowResized(width, height))

        self.scheduler.run_stage(Stage.STARTUP, self.world)
        self.running = True

        while self.running:
            self.input.begin_tick()
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                self.input.process_event(event, self.world)

            self.scheduler.tick(self.world)

            pygame.display.flip()
            if self.clock is not None:
                self.clock.tick(self.fps)
                self.terminal.update_timing(
                    self.clock.get_fps(), self.clock.get_time()
                )

        self.shutdown()

    def quit(self) -> None:
        self.running = False

    def shutdown(self) -> None:
        renderer = self.world.try_resource(TerminalRenderer)
        if renderer is not None:
            renderer.release()
        meshes = self.world.try_resource(MeshManager)
        if meshes is not None:
            meshes.release_all()
        if self.window is not None:
            pygame.quit()
            self.window = None
