# glyphterm/input/handler.py
from __future__ import annotations

from typing import Optional, Set

import pygame

from glyphterm.core.events import PointerMoved, WindowResized
from glyphterm.core.world import World


class InputHandler:
    """
    Translates pygame events into world events and per-tick key state.

    Keyboard state is what a roguelike-style main loop polls: the key pressed
    this tick (if any), modifier flags and whether the left button was clicked.
    """

    def __init__(self) -> None:
        self.key: Optional[int] = None
        self.shift = False
        self.control = False
        self.alt = False
        self.left_click = False
        self._held: Set[int] = set()

    def begin_tick(self) -> None:
        """Forget edge-triggered input from the previous tick."""
        self.key = None
        self.left_click = False

    def process_event(self, event: pygame.event.Event, world: World) -> None:
        """Feed pygame events here to update state."""
        if event.type in (pygame.VIDEORESIZE, pygame.WINDOWSIZECHANGED):
            if event.type == pygame.VIDEORESIZE:
                width, height = event.size
            else:
                width, height = event.x, event.y
            if width >= 1 and height >= 1:
                world.emit_event(WindowResized(width, height))

        elif event.type == pygame.MOUSEMOTION:
            world.emit_event(PointerMoved(float(event.pos[0]), float(event.pos[1])))

        elif event.type == pygame.MOUSEBUTTONDOWN:
            if event.button == 1:
                self.left_click = True

        elif event.type == pygame.KEYDOWN:
            self.key = event.key
            self._held.add(event.key)
            self._update_modifiers(event.mod)

        elif event.type == pygame.KEYUP:
            self._held.discard(event.key)
            self._update_modifiers(event.mod)

    def is_held(self, key: int) -> bool:
        return key in self._held

    def _update_modifiers(self, mod: int) -> None:
        self.shift = bool(mod & pygame.KMOD_SHIFT)
        self.control = bool(mod & pygame.KMOD_CTRL)
        self.alt = bool(mod & pygame.KMOD_ALT)
