from __future__ import annotations

from dataclasses import dataclass, field, replace
import math
from typing import Protocol, runtime_checkable

import numpy as np

from vecplot.errors import StackUnderflow
from vecplot.vg.font import Font
from vecplot.vg.geom import Length, Point, Rectangle
from vecplot.vg.path import Path


RGBA = tuple[int, int, int, int]

BLACK: RGBA = (0, 0, 0, 255)
WHITE: RGBA = (255, 255, 255, 255)
TRANSPARENT: RGBA = (0, 0, 0, 0)

DEFAULT_DPI = 96.0


@runtime_checkable
class Canvas(Protocol):
    def size(self) -> tuple[Length, Length]:
        ...

    def set_line_width(self, width: Length) -> None:
        ...

    def set_line_dash(self, dashes: tuple[Length, ...] | list[Length], offset: Length) -> None:
        ...

    def set_color(self, color: RGBA | None) -> None:
        ...

    def push(self) -> None:
        ...

    def pop(self) -> None:
        ...

    def translate(self, dx: Length, dy: Length) -> None:
        ...

    def rotate(self, theta: float) -> None:
        ...

    def scale(self, sx: float, sy: float) -> None:
        ...

    def stroke(self, path: Path) -> None:
        ...

    def fill(self, path: Path) -> None:
        ...

    def fill_string(self, font: Font, pt: Point, text: str) -> None:
        ...

    def draw_image(self, rect: Rectangle, image: np.ndarray) -> None:
        ...

    def dpi(self) -> float:
        ...


def to_rgba(color: tuple[int, ...] | None) -> RGBA:
    if color is None:
        return BLACK
    if len(color) == 3:
        r, g, b = color
        return (int(r), int(g), int(b), 255)
    r, g, b, a = color
    return (int(r), int(g), int(b), int(a))


def _identity() -> np.ndarray:
    return np.eye(3, dtype=np.float64)


@dataclass(frozen=True)
class CanvasState:
    color: RGBA = BLACK
    line_width: Length = 1.0
    dashes: tuple[Length, ...] = ()
    dash_offset: Length = 0.0
    matrix: np.ndarray = field(default_factory=_identity, compare=False)


class StateCanvas:
    """Shared state machine for canvas implementations.

    Keeps the current style and an explicit stack of saved states. The
    transform is a 3x3 affine matrix; the most recent translate, rotate or
    scale call is applied to a point first.
    """

    def __init__(self, width: Length, height: Length, *, dpi: float = DEFAULT_DPI) -> None:
        if width < 0 or height < 0:
            raise ValueError("canvas width/height must be >= 0")
        self._width = float(width)
        self._height = float(height)
        self._dpi = float(dpi)
        self._state = CanvasState()
        self._stack: list[CanvasState] = []

    @property
    def state(self) -> CanvasState:
        return self._state

    @property
    def depth(self) -> int:
        return len(self._stack)

    def size(self) -> tuple[Length, Length]:
        return (self._width, self._height)

    def dpi(self) -> float:
        return self._dpi

    def set_line_width(self, width: Length) -> None:
        self._state = replace(self._state, line_width=float(width))

    def set_line_dash(self, dashes: tuple[Length, ...] | list[Length], offset: Length) -> None:
        self._state = replace(self._state, dashes=tuple(float(d) for d in dashes), dash_offset=float(offset))

    def set_color(self, color: RGBA | None) -> None:
        self._state = replace(self._state, color=to_rgba(color))

    def push(self) -> None:
        self._stack.append(replace(self._state, matrix=self._state.matrix.copy()))

    def pop(self) -> None:
        if not self._stack:
            raise StackUnderflow("pop without matching push")
        self._state = self._stack.pop()

    def translate(self, dx: Length, dy: Length) -> None:
        t = _identity()
        t[0, 2] = dx
        t[1, 2] = dy
        self._concat(t)

    def rotate(self, theta: float) -> None:
        c, s = math.cos(theta), math.sin(theta)
        r = _identity()
        r[0, 0], r[0, 1] = c, -s
        r[1, 0], r[1, 1] = s, c
        self._concat(r)

    def scale(self, sx: float, sy: float) -> None:
        m = _identity()
        m[0, 0] = sx
        m[1, 1] = sy
        self._concat(m)

    def transform_point(self, p: Point) -> Point:
        m = self._state.matrix
        return Point(m[0, 0] * p.x + m[0, 1] * p.y + m[0, 2], m[1, 0] * p.x + m[1, 1] * p.y + m[1, 2])

    def transform_scale(self) -> float:
        """Return the mean linear scale factor of the current transform."""
        m = self._state.matrix
        return math.sqrt(abs(m[0, 0] * m[1, 1] - m[0, 1] * m[1, 0]))

    def transform_angle(self) -> float:
        m = self._state.matrix
        return math.atan2(m[1, 0], m[0, 0])

    def _concat(self, t: np.ndarray) -> None:
        self._state = replace(self._state, matrix=self._state.matrix @ t)
