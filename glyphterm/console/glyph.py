# glyphterm/console/glyph.py
from __future__ import annotations

from dataclasses import dataclass

from glyphterm.colors import BLACK, WHITE
from glyphterm.types import RGBA

SPACE_GLYPH = 32


@dataclass(slots=True)
class GlyphCell:
    """One character position: a glyph index plus foreground/background colour."""

    glyph: int = SPACE_GLYPH
    foreground: RGBA = WHITE
    background: RGBA = BLACK

    def copy(self) -> GlyphCell:
        return GlyphCell(self.glyph, self.foreground, self.background)


# Unicode -> CP437 for the characters above 0x7F that fonts in this format draw.
_CP437_HIGH = (
    "ÇüéâäàåçêëèïîìÄÅÉæÆôöòûùÿÖÜ¢£¥₧ƒáíóúñÑªº¿⌐¬½¼¡«»"
    "░▒▓│┤╡╢╖╕╣║╗╝╜╛┐└┴┬├─┼╞╟╚╔╩╦╠═╬╧╨╤╥╙╘╒╓╫╪┘┌█▄▌▐▀"
    "αßΓπΣσµτΦΘΩδ∞φε∩≡±≥≤⌠⌡÷≈°∙·√ⁿ²■ "
)
_CP437_LOW = "\u0000☺☻♥♦♣♠•◘○◙♂♀♪♫☼►◄↕‼¶§▬↨↑↓→←∟↔▲▼"

_UNICODE_TO_CP437 = {ch: 128 + i for i, ch in enumerate(_CP437_HIGH)}
_UNICODE_TO_CP437.update({ch: i for i, ch in enumerate(_CP437_LOW) if i})
_UNICODE_TO_CP437["⌂"] = 127

QUESTION_MARK_GLYPH = ord("?")


def to_cp437(ch: str) -> int:
    """Translate one character into its code page 437 glyph index."""
    code = ord(ch)
    if 32 <= code < 127:
        return code
    return _UNICODE_TO_CP437.get(ch, QUESTION_MARK_GLYPH)
