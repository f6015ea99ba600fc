from vecplot.draw.canvas import BoundedCanvas, Tiles
from vecplot.draw.glyphs import (
    GLYPH_SHAPES,
    BoxGlyph,
    CircleGlyph,
    CrossGlyph,
    PlusGlyph,
    PyramidGlyph,
    RingGlyph,
    SquareGlyph,
    TriangleGlyph,
)
from vecplot.draw.styles import GlyphStyle, LineStyle, TextStyle

__all__ = [
    "BoundedCanvas",
    "BoxGlyph",
    "CircleGlyph",
    "CrossGlyph",
    "GLYPH_SHAPES",
    "GlyphStyle",
    "LineStyle",
    "PlusGlyph",
    "PyramidGlyph",
    "RingGlyph",
    "SquareGlyph",
    "TextStyle",
    "Tiles",
    "TriangleGlyph",
]
