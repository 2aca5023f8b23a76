"""
Small interactive terminal.

Run mode:
    - "stretch": keep aspect ratio, scale freely
    - "pixel_perfect": whole-number scaling only
    - "resize_terminals": keep glyph size, change the grid

Expected keys:
    - 1/2/3: switch scaling mode
    - ESC: quit
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

import pygame

from glyphterm import colors
from glyphterm.config import ScalingMode, TerminalSettings
from glyphterm.context import TerminalContext
from glyphterm.core.application import Application
from glyphterm.core.world import World
from glyphterm.input.handler import InputHandler
from glyphterm.logging_config import setup_logging

MODE_KEYS = {
    pygame.K_1: ScalingMode.STRETCH,
    pygame.K_2: ScalingMode.PIXEL_PERFECT,
    pygame.K_3: ScalingMode.RESIZE_TERMINALS,
}


def make_demo_system(app: Application):
    def demo_system(world: World) -> None:
        ctx = world.get_resource(TerminalContext)
        inp = world.get_resource(InputHandler)

        if inp.key == pygame.K_ESCAPE:
            app.quit()
            return
        if inp.key in MODE_KEYS:
            ctx.set_scaling_mode(MODE_KEYS[inp.key])

        console = ctx.console()
        console.cls()
        console.print_color(1, 1, "glyphterm", colors.YELLOW)
        console.print(1, 3, f"mode   : {ctx.scaling_mode.value}")
        console.print(1, 4, f"scale  : {ctx.scaler.scale_factor}")
        console.print(1, 5, f"grid   : {console.width}x{console.height}")
        console.print(1, 6, f"mouse  : {ctx.mouse_cell[0]}, {ctx.mouse_cell[1]}")
        console.print(1, 7, f"fps    : {ctx.fps:.0f} ({ctx.frame_time_ms:.0f} ms)")
        console.print(1, 9, "1/2/3 switch scaling, ESC quits")

        # The grid may have shrunk since the pointer last moved
        col, row = ctx.mouse_cell
        if console.in_bounds(col, row):
            console.set_background(col, row, colors.BLUE)

    return demo_system


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("font", type=Path, help="16x16 glyph atlas (CP437 order)")
    parser.add_argument(
        "--mode",
        choices=[m.value for m in ScalingMode],
        default=ScalingMode.STRETCH.value,
    )
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.debug else logging.INFO)

    settings = TerminalSettings.simple_80x50(
        args.font, scaling_mode=ScalingMode(args.mode), title="glyphterm demo"
    )
    app = Application(settings)
    app.add_system(make_demo_system(app))
    app.run()


if __name__ == "__main__":
    main()
