from pathlib import Path

import pytest

from glyphterm.config import (
    FontSettings,
    LayerSettings,
    ScalingMode,
    TerminalSettings,
)
from glyphterm.console.atlas import AtlasLayout, GlyphAtlasMapper
from glyphterm.console.scaler import ViewportScaler
from glyphterm.core.world import World


class FakeBuffer:
    def __init__(self, data: bytes):
        self.data = data
        self.released = False

    def release(self) -> None:
        self.released = True


class FakeVertexArray:
    def __init__(self, program, content, index_buffer=None, index_element_size=4):
        self.program = program
        self.content = content
        self.index_buffer = index_buffer
        self.released = False

    def release(self) -> None:
        self.released = True


class FakeGL:
    """Records buffer creation instead of talking to a driver."""

    def __init__(self):
        self.buffers: list[FakeBuffer] = []

    def buffer(self, data: bytes) -> FakeBuffer:
        buf = FakeBuffer(data)
        self.buffers.append(buf)
        return buf

    def vertex_array(self, program, content, index_buffer=None, index_element_size=4):
        return FakeVertexArray(program, content, index_buffer, index_element_size)


def make_settings(
    mode: ScalingMode = ScalingMode.PIXEL_PERFECT,
    width_px: int = 1920,
    height_px: int = 1080,
    layers=None,
) -> TerminalSettings:
    return TerminalSettings(
        fonts=(FontSettings(Path("terminal8x8.png")),),
        layers=layers or (LayerSettings(font_index=0, width=80, height=50),),
        width_px=width_px,
        height_px=height_px,
        scaling_mode=mode,
        desired_gutter=0.0,
    )


@pytest.fixture
def world():
    """Returns a fresh World instance for each test."""
    return World()


@pytest.fixture
def scaler():
    """A scaler with no desired gutter, so expected gutters are exact."""
    return ViewportScaler(desired_gutter=0.0)


@pytest.fixture
def atlas():
    """The usual 16x16 CP437 atlas of 8x8 glyphs."""
    return GlyphAtlasMapper(AtlasLayout(columns=16, rows=16, glyph_px=(8.0, 8.0)))


@pytest.fixture
def fake_gl():
    return FakeGL()
