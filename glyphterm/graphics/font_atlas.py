# glyphterm/graphics/font_atlas.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import moderngl
from PIL import Image

from glyphterm.config import FontSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FontImage:
    """Decoded atlas pixels, RGBA8, first row is the top of the image."""

    data: bytes
    width: int
    height: int


def load_font_image(path: Path) -> FontImage:
    """
    Read an atlas image from disk.

    Atlases without an alpha channel are drawn white-on-black; their
    luminance becomes the alpha so the black surround does not cover the
    background layer.
    """
    with Image.open(path) as img:
        has_alpha = "A" in img.getbands() or "transparency" in img.info
        converted = img.convert("RGBA")
        if not has_alpha:
            converted.putalpha(img.convert("L"))

        width, height = converted.size
        data = converted.tobytes()

    return FontImage(data=data, width=width, height=height)


def create_font_texture(gl: moderngl.Context, font: FontSettings) -> moderngl.Texture:
    """Upload a font atlas with nearest filtering and clamped edges."""
    try:
        image = load_font_image(font.path)
    except OSError:
        logger.error("Failed to load font atlas %s", font.path)
        raise

    expected = font.layout().image_size
    if (image.width, image.height) != expected:
        logger.warning(
            "Font %s is %dx%d, layout expects %dx%d",
            font.path,
            image.width,
            image.height,
            *expected,
        )

    texture = gl.texture((image.width, image.height), 4, data=image.data)
    texture.filter = (moderngl.NEAREST, moderngl.NEAREST)
    texture.repeat_x = False
    texture.repeat_y = False
    return texture
