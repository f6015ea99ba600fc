from __future__ import annotations

from dataclasses import dataclass, field, replace

from vecplot.draw.canvas import BoundedCanvas
from vecplot.draw.styles import TextStyle
from vecplot.glyphbox import Thumbnailer
from vecplot.vg.font import Font
from vecplot.vg.geom import Length, Point, Rectangle


@dataclass(frozen=True)
class LegendEntry:
    text: str
    thumbs: tuple[Thumbnailer, ...]


@dataclass
class Legend:
    """Labelled thumbnails drawn into one corner of the data area.

    ``top`` and ``left`` pick the corner; ``x_offs`` and ``y_offs`` shift the
    whole legend, ``padding`` separates entries.
    """

    text_style: TextStyle = field(default_factory=lambda: TextStyle(font=Font(size=12.0)))
    padding: Length = 0.0
    top: bool = False
    left: bool = False
    x_offs: Length = 0.0
    y_offs: Length = 0.0
    thumbnail_width: Length = 20.0
    entries: list[LegendEntry] = field(default_factory=list)

    def add(self, text: str, *thumbs: Thumbnailer) -> "Legend":
        self.entries.append(LegendEntry(text, tuple(thumbs)))
        return self

    def entry_height(self) -> Length:
        return max((self.text_style.height(e.text) for e in self.entries), default=0.0)

    def draw(self, c: BoundedCanvas) -> None:
        if not self.entries:
            return
        space = self.text_style.width(" ")
        iconx = c.min.x
        textx = iconx + self.thumbnail_width + space
        xalign = 0.0
        if not self.left:
            iconx = c.max.x - self.thumbnail_width
            textx = iconx - space
            xalign = -1.0
        textx += self.x_offs
        iconx += self.x_offs

        enth = self.entry_height()
        y = c.max.y - enth
        if not self.top:
            y = c.min.y + (enth + self.padding) * (len(self.entries) - 1)
        y += self.y_offs

        style = replace(self.text_style, xalign=xalign, yalign=0.0)
        for e in self.entries:
            icon = c.with_rect(Rectangle(Point(iconx, y), Point(iconx + self.thumbnail_width, y + enth)))
            for thumb in e.thumbs:
                thumb.thumbnail(icon)
            yoffs = (enth - self.text_style.height(e.text)) / 2
            c.fill_text(style, Point(textx, y + yoffs), e.text)
            y -= enth + self.padding
