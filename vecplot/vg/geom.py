from __future__ import annotations

from dataclasses import dataclass
import math
import re


# Lengths are plain floats measured in points.
Length = float

INCH: Length = 72.0
MILLIMETER: Length = INCH / 25.4
CENTIMETER: Length = MILLIMETER * 10.0

_UNITS = {
    "pt": 1.0,
    "in": INCH,
    "inch": INCH,
    "mm": MILLIMETER,
    "cm": CENTIMETER,
}
_LENGTH_RE = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)\s*([a-z]*)\s*$")


def points(value: float) -> Length:
    return float(value)


def inches(value: float) -> Length:
    return float(value) * INCH


def millimeters(value: float) -> Length:
    return float(value) * MILLIMETER


def centimeters(value: float) -> Length:
    return float(value) * CENTIMETER


def dots(length: Length, dpi: float) -> float:
    """Convert a length to device pixels at the given resolution."""
    return length / INCH * dpi


def from_dots(pixels: float, dpi: float) -> Length:
    return pixels / dpi * INCH


def parse_length(text: str) -> Length:
    """Parse strings such as ``"12pt"``, ``"2.5cm"`` or ``"4in"``; bare numbers are points."""
    match = _LENGTH_RE.match(text.lower())
    if match is None:
        raise ValueError(f"invalid length: {text!r}")
    value, unit = match.groups()
    if unit == "":
        unit = "pt"
    if unit not in _UNITS:
        raise ValueError(f"unknown length unit {unit!r} in {text!r}")
    return float(value) * _UNITS[unit]


@dataclass(frozen=True)
class Point:
    x: Length = 0.0
    y: Length = 0.0

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, s: float) -> "Point":
        return Point(self.x * s, self.y * s)

    def dot(self, other: "Point") -> float:
        return self.x * other.x + self.y * other.y


@dataclass(frozen=True)
class Rectangle:
    min: Point = Point()
    max: Point = Point()

    def size(self) -> Point:
        return Point(self.max.x - self.min.x, self.max.y - self.min.y)

    def add(self, p: Point) -> "Rectangle":
        return Rectangle(self.min + p, self.max + p)

    def path(self) -> "Path":
        from vecplot.vg.path import Path

        p = Path()
        p.move(self.min)
        p.line(Point(self.max.x, self.min.y))
        p.line(self.max)
        p.line(Point(self.min.x, self.max.y))
        p.close()
        return p


def rotate_point(theta: float, p: Point) -> Point:
    if theta == 0:
        return p
    sin, cos = math.sin(theta), math.cos(theta)
    return Point(p.x * cos - p.y * sin, p.y * cos + p.x * sin)
