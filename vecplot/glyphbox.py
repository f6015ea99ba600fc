from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from vecplot.vg.geom import Point, Rectangle

if TYPE_CHECKING:
    from vecplot.draw.canvas import BoundedCanvas
    from vecplot.plot import Plot


@dataclass(frozen=True)
class GlyphBox:
    """At normalized position (x, y) a glyph extends by ``rect`` around that point."""

    x: float = 0.0
    y: float = 0.0
    rect: Rectangle = Rectangle()

    def size(self) -> Point:
        return self.rect.size()


@runtime_checkable
class Plotter(Protocol):
    def plot(self, c: "BoundedCanvas", plt: "Plot") -> None:
        ...


@runtime_checkable
class DataRanger(Protocol):
    def data_range(self) -> tuple[float, float, float, float]:
        ...


@runtime_checkable
class GlyphBoxer(Protocol):
    def glyph_boxes(self, plt: "Plot") -> list[GlyphBox]:
        ...


@runtime_checkable
class Thumbnailer(Protocol):
    def thumbnail(self, c: "BoundedCanvas") -> None:
        ...
