from __future__ import annotations

from dataclasses import dataclass, field
import logging

import numpy as np

from vecplot.vg.canvas import DEFAULT_DPI, RGBA, Canvas, StateCanvas, to_rgba
from vecplot.vg.font import Font
from vecplot.vg.geom import Length, Point, Rectangle
from vecplot.vg.path import Path


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SetLineWidth:
    width: Length

    def apply(self, c: Canvas) -> None:
        c.set_line_width(self.width)


@dataclass(frozen=True)
class SetLineDash:
    dashes: tuple[Length, ...]
    offset: Length

    def apply(self, c: Canvas) -> None:
        c.set_line_dash(self.dashes, self.offset)


@dataclass(frozen=True)
class SetColor:
    color: RGBA

    def apply(self, c: Canvas) -> None:
        c.set_color(self.color)


@dataclass(frozen=True)
class Push:
    def apply(self, c: Canvas) -> None:
        c.push()


@dataclass(frozen=True)
class Pop:
    def apply(self, c: Canvas) -> None:
        c.pop()


@dataclass(frozen=True)
class Translate:
    dx: Length
    dy: Length

    def apply(self, c: Canvas) -> None:
        c.translate(self.dx, self.dy)


@dataclass(frozen=True)
class Rotate:
    theta: float

    def apply(self, c: Canvas) -> None:
        c.rotate(self.theta)


@dataclass(frozen=True)
class Scale:
    sx: float
    sy: float

    def apply(self, c: Canvas) -> None:
        c.scale(self.sx, self.sy)


@dataclass(frozen=True)
class Stroke:
    path: Path

    def apply(self, c: Canvas) -> None:
        c.stroke(self.path)


@dataclass(frozen=True)
class Fill:
    path: Path

    def apply(self, c: Canvas) -> None:
        c.fill(self.path)


@dataclass(frozen=True)
class FillString:
    font: Font
    point: Point
    text: str

    def apply(self, c: Canvas) -> None:
        c.fill_string(self.font, self.point, self.text)


@dataclass(frozen=True)
class DrawImage:
    rect: Rectangle
    image: np.ndarray = field(compare=False)
    digest: int = 0

    def apply(self, c: Canvas) -> None:
        c.draw_image(self.rect, self.image)


Action = (
    SetLineWidth | SetLineDash | SetColor | Push | Pop | Translate | Rotate | Scale | Stroke | Fill | FillString | DrawImage
)


class Recorder(StateCanvas):
    """Canvas that records every call so it can be inspected or replayed."""

    def __init__(self, width: Length = 0.0, height: Length = 0.0, *, dpi: float = DEFAULT_DPI) -> None:
        super().__init__(width, height, dpi=dpi)
        self.actions: list[Action] = []

    def reset(self) -> None:
        self.actions.clear()
        self._stack.clear()

    def replay_on(self, canvas: Canvas) -> None:
        LOGGER.debug("replaying %d recorded actions", len(self.actions))
        for action in self.actions:
            action.apply(canvas)

    def set_line_width(self, width: Length) -> None:
        super().set_line_width(width)
        self.actions.append(SetLineWidth(float(width)))

    def set_line_dash(self, dashes: tuple[Length, ...] | list[Length], offset: Length) -> None:
        super().set_line_dash(dashes, offset)
        self.actions.append(SetLineDash(tuple(float(d) for d in dashes), float(offset)))

    def set_color(self, color: RGBA | None) -> None:
        super().set_color(color)
        self.actions.append(SetColor(to_rgba(color)))

    def push(self) -> None:
        super().push()
        self.actions.append(Push())

    def pop(self) -> None:
        super().pop()
        self.actions.append(Pop())

    def translate(self, dx: Length, dy: Length) -> None:
        super().translate(dx, dy)
        self.actions.append(Translate(float(dx), float(dy)))

    def rotate(self, theta: float) -> None:
        super().rotate(theta)
        self.actions.append(Rotate(float(theta)))

    def scale(self, sx: float, sy: float) -> None:
        super().scale(sx, sy)
        self.actions.append(Scale(float(sx), float(sy)))

    def stroke(self, path: Path) -> None:
        self.actions.append(Stroke(Path(list(path.comps))))

    def fill(self, path: Path) -> None:
        self.actions.append(Fill(Path(list(path.comps))))

    def fill_string(self, font: Font, pt: Point, text: str) -> None:
        self.actions.append(FillString(font, pt, text))

    def draw_image(self, rect: Rectangle, image: np.ndarray) -> None:
        arr = np.array(image, copy=True)
        self.actions.append(DrawImage(rect, arr, hash(arr.tobytes())))
