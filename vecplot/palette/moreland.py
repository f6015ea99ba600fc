"""Perceptual color maps after Kenneth Moreland's color advice.

Colors move through linear RGB, CIE XYZ, CIE LAB and the polar
Magnitude-Saturation-Hue form of LAB. Luminance maps interpolate in LAB
between anchors of strictly increasing lightness; smooth diverging maps
interpolate in MSH through a light, unsaturated convergence color.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Sequence

import numpy as np

from vecplot.errors import GamutClamp, InputRangeError
from vecplot.palette.colormap import RangedColorMap, check_range, search_scalars, unit_to_byte
from vecplot.vg.canvas import RGBA, to_rgba


LOGGER = logging.getLogger(__name__)

_LINEAR_TO_XYZ = np.array(
    [
        [0.4124, 0.3576, 0.1805],
        [0.2126, 0.7152, 0.0722],
        [0.0193, 0.1192, 0.9505],
    ],
    dtype=np.float64,
)
_XYZ_TO_LINEAR = np.array(
    [
        [3.2406, -1.5372, -0.4986],
        [-0.9689, 1.8758, 0.0415],
        [0.0557, -0.204, 1.057],
    ],
    dtype=np.float64,
)
_D65 = (0.95047, 1.0, 1.08883)
_LAB_EPS = 0.008856
_LAB_K = 7.787
_LAB_B = 16.0 / 116.0
# Channels further than half an 8-bit step outside [0, 1] are reported.
_GAMUT_TOLERANCE = 0.5 / 255


@dataclass(frozen=True)
class LAB:
    l: float
    a: float
    b: float

    def msh(self) -> "MSH":
        m = math.sqrt(self.l * self.l + self.a * self.a + self.b * self.b)
        return MSH(m, math.acos(self.l / m), math.atan2(self.b, self.a))


@dataclass(frozen=True)
class MSH:
    m: float
    s: float
    h: float

    def lab(self) -> LAB:
        return LAB(
            self.m * math.cos(self.s),
            self.m * math.sin(self.s) * math.cos(self.h),
            self.m * math.sin(self.s) * math.sin(self.h),
        )


def srgb_to_linear(v: np.ndarray) -> np.ndarray:
    v = np.asarray(v, dtype=np.float64)
    return np.where(v > 0.04045, ((v + 0.055) / 1.055) ** 2.4, v / 12.92)


def linear_to_srgb(v: np.ndarray) -> np.ndarray:
    v = np.asarray(v, dtype=np.float64)
    # Negative channels stay on the linear branch.
    safe = np.where(v > 0.0031308, v, 1.0)
    return np.where(v > 0.0031308, 1.055 * safe ** (1 / 2.4) - 0.055, 12.92 * v)


def linear_to_xyz(rgb: np.ndarray) -> np.ndarray:
    return _LINEAR_TO_XYZ @ np.asarray(rgb, dtype=np.float64)


def xyz_to_linear(xyz: np.ndarray) -> np.ndarray:
    return _XYZ_TO_LINEAR @ np.asarray(xyz, dtype=np.float64)


def xyz_to_lab(xyz: np.ndarray) -> LAB:
    def f(v: float) -> float:
        if v > _LAB_EPS:
            return v ** (1.0 / 3.0)
        return _LAB_K * v + _LAB_B

    x, y, z = (float(c) for c in xyz)
    fx, fy, fz = f(x / 0.9505), f(y), f(z / 1.089)
    return LAB(116.0 * fy - 16.0, 500.0 * (fx - fy), 200.0 * (fy - fz))


def lab_to_xyz(c: LAB) -> np.ndarray:
    ylim = _LAB_K * _LAB_EPS + _LAB_B

    def f(v: float) -> float:
        if v > ylim:
            return v * v * v
        return (v - _LAB_B) / _LAB_K

    xn, yn, zn = _D65
    fy = (c.l + 16) / 116
    return np.array([xn * f(c.a / 500 + fy), yn * f(fy), zn * f(fy - c.b / 200)], dtype=np.float64)


def color_to_lab(color: tuple[int, ...]) -> LAB:
    """CIE LAB of a non-premultiplied 8-bit color; alpha is ignored."""
    r, g, b, _ = to_rgba(color)
    srgb = np.array([r, g, b], dtype=np.float64) / 255.0
    return xyz_to_lab(linear_to_xyz(srgb_to_linear(srgb)))


def lab_to_srgb(c: LAB) -> np.ndarray:
    """Unclamped sRGB channels in nominal [0, 1]."""
    return linear_to_srgb(xyz_to_linear(lab_to_xyz(c)))


def color_to_msh(color: tuple[int, ...]) -> MSH:
    return color_to_lab(color).msh()


def _to_rgba(srgb: np.ndarray, alpha: float) -> RGBA:
    r, g, b = (unit_to_byte(float(v)) for v in srgb)
    return (r, g, b, unit_to_byte(alpha))


def hue_twist(c: MSH, converge_m: float) -> float:
    sign_h = math.copysign(1.0, c.h) if c.h != 0 else 0.0
    return sign_h * c.s * math.sqrt(converge_m * converge_m - c.m * c.m) / (c.m * math.sin(c.s))


class LuminanceMap(RangedColorMap):
    """Interpolates in LAB so lightness grows linearly with the value."""

    def __init__(self, colors: Sequence[LAB], scalars: Sequence[float] | None = None) -> None:
        super().__init__()
        if len(colors) < 2:
            raise ValueError("a luminance map needs at least two colors")
        self.colors = list(colors)
        if scalars is None:
            lo = min(c.l for c in self.colors)
            hi = max(c.l for c in self.colors)
            scalars = [(c.l - lo) / (hi - lo) for c in self.colors]
        self.scalars = list(scalars)
        # Pin the ends so min and max never fall outside the anchors.
        self.scalars[0] = 0.0
        self.scalars[-1] = 1.0

    @classmethod
    def from_colors(cls, controls: Sequence[tuple[int, ...]]) -> "LuminanceMap":
        labs = [color_to_lab(c) for c in controls]
        for i in range(1, len(labs)):
            if labs[i].l <= labs[i - 1].l:
                raise InputRangeError(
                    f"luminance of color {i} ({labs[i].l:g}) is not greater than "
                    f"that of color {i - 1} ({labs[i - 1].l:g})"
                )
        return cls(labs)

    def at(self, v: float) -> RGBA:
        check_range(self.min, self.max, v)
        t = (v - self.min) / (self.max - self.min)
        i = search_scalars(self.scalars, t)
        if i == 0:
            return _to_rgba(lab_to_srgb(self.colors[0]), self.alpha)
        c1, c2 = self.colors[i - 1], self.colors[i]
        frac = (t - self.scalars[i - 1]) / (self.scalars[i] - self.scalars[i - 1])
        lab = LAB(
            frac * (c2.l - c1.l) + c1.l,
            frac * (c2.a - c1.a) + c1.a,
            frac * (c2.b - c1.b) + c1.b,
        )
        return _to_rgba(np.clip(lab_to_srgb(lab), 0.0, 1.0), self.alpha)


class SmoothDiverging(RangedColorMap):
    """Diverging map through MSH space meeting at a convergence point.

    ``converge_m`` is the MSH magnitude of the color in the middle, not its
    position; the position is ``converge_point``, which resets to the middle
    of the range whenever ``min`` or ``max`` change.
    """

    def __init__(self, start: MSH, end: MSH, converge_m: float = 88.0) -> None:
        super().__init__()
        self.start = start
        self.end = end
        self.converge_m = float(converge_m)
        self._converge_point = math.nan

    @classmethod
    def from_colors(cls, start: tuple[int, ...], end: tuple[int, ...], converge_m: float = 88.0) -> "SmoothDiverging":
        return cls(color_to_msh(start), color_to_msh(end), converge_m)

    @RangedColorMap.min.setter
    def min(self, v: float) -> None:
        self._min = float(v)
        self._converge_point = (self._min + self._max) / 2

    @RangedColorMap.max.setter
    def max(self, v: float) -> None:
        self._max = float(v)
        self._converge_point = (self._min + self._max) / 2

    @property
    def converge_point(self) -> float:
        return self._converge_point

    @converge_point.setter
    def converge_point(self, v: float) -> None:
        if v > self.max or v < self.min:
            raise ValueError(f"convergence point ({v:g}) must be between min ({self.min:g}) and max ({self.max:g})")
        self._converge_point = float(v)

    def interpolate(self, t: float, cp: float) -> MSH:
        """MSH color at normalized ``t`` with the convergence at normalized ``cp``."""
        if t < cp:
            twist = hue_twist(self.start, self.converge_m)
            k = t / cp
            return MSH(
                (self.converge_m - self.start.m) * k + self.start.m,
                self.start.s * (1 - k),
                self.start.h + twist * k,
            )
        if t == cp:
            return MSH(self.converge_m, 0.0, 0.0)
        k1 = (t - 1) / (cp - 1)
        # With the convergence at min, saturation ramps over the whole range.
        k2 = t / cp - 1 if cp > 0 else t
        h = self.end.h + hue_twist(self.end, self.converge_m) * k1
        return MSH((self.converge_m - self.end.m) * k1 + self.end.m, self.end.s * k2, h)

    def at(self, v: float) -> RGBA:
        check_range(self.min, self.max, v)
        span = self.max - self.min
        cp = (self._converge_point - self.min) / span
        t = (v - self.min) / span
        srgb = lab_to_srgb(self.interpolate(t, cp).lab())
        if np.any(srgb < -_GAMUT_TOLERANCE) or np.any(srgb > 1 + _GAMUT_TOLERANCE):
            LOGGER.debug("diverging map out of gamut at %r: %s", v, srgb)
            raise GamutClamp(v, _to_rgba(np.clip(srgb, 0.0, 1.0), self.alpha))
        return _to_rgba(srgb, self.alpha)


def black_body() -> LuminanceMap:
    """Perceptually linear black body radiation colors."""
    return LuminanceMap(
        [
            LAB(0, 0, 0),
            LAB(39.112572747719774, 55.92470934659227, 37.65159714510402),
            LAB(58.45705480680232, 43.34389690857626, 65.95409116544081),
            LAB(84.13253643355525, -6.459770854468639, 82.41994470228775),
            LAB(100, 0, 0),
        ],
        [0, 0.39112572747719776, 0.5845705480680232, 0.8413253643355525, 1],
    )


def extended_black_body() -> LuminanceMap:
    """Black body colors with blues and purples added at the dark end."""
    return LuminanceMap(
        [
            LAB(0, 0, 0),
            LAB(21.873483862751876, 50.19882295659109, -74.66982659778306),
            LAB(34.506542513775905, 75.41302687474061, -88.73807072507786),
            LAB(47.02980511087303, 70.93217189227919, 33.59880053746508),
            LAB(65.17482203230537, 49.14591409658836, 56.86480950937553),
            LAB(84.13253643355525, -6.459770854468639, 82.41994470228775),
            LAB(100, 0, 0),
        ],
        [0, 0.21873483862751875, 0.34506542513775906, 0.4702980511087303, 0.6517482203230537, 0.8413253643355525, 1],
    )


def kindlmann() -> LuminanceMap:
    """Rainbow hues with monotonically increasing luminance (Kindlmann, Reinhard and Creem 2002)."""
    return LuminanceMap(
        [
            LAB(0, 0, 0),
            LAB(10.479520542426698, 34.05557958902206, -34.21934877170809),
            LAB(21.03011379005111, 52.30473571100955, -61.852601228346536),
            LAB(31.03098927978494, 23.814976212074402, -57.73419358300511),
            LAB(40.21480513626115, -24.858012706049536, -7.322176588219942),
            LAB(52.73108089333358, -19.064976357731634, -25.558178073848147),
            LAB(60.007326812392634, -61.75624590074585, 56.43522875191319),
            LAB(69.81578343076002, -58.33353084882392, 68.37457857626646),
            LAB(79.55703752324776, -22.50477758899383, 78.57946686200843),
            LAB(89.818961593653, 7.586705160677109, 15.375961528833981),
            LAB(100, 0, 0),
        ],
        [
            0,
            0.10479520542426699,
            0.2103011379005111,
            0.3103098927978494,
            0.4021480513626115,
            0.5273108089333358,
            0.6000732681239264,
            0.6981578343076003,
            0.7955703752324775,
            0.89818961593653,
            1,
        ],
    )


def extended_kindlmann() -> LuminanceMap:
    """Kindlmann colors looping more than once around the hue circle."""
    return LuminanceMap(
        [
            LAB(0, 0, 0),
            LAB(13.371291966477482, 40.39368469479174, -47.73239449160565),
            LAB(25.072421338587574, -18.01441053740843, -5.313556572210176),
            LAB(37.411516363056116, -43.058336774976055, 39.30203907343062),
            LAB(49.75026355291354, -15.774050138318895, 53.507917567416094),
            LAB(61.643756252245225, 52.67703578954919, 43.82595336046358),
            LAB(74.93187540089825, 50.92061741619164, -30.235411697966242),
            LAB(87.64732748562544, 14.355163639545697, -17.471161313826332),
            LAB(100, 0, 0),
        ],
        [
            0,
            0.13371291966477483,
            0.25072421338587575,
            0.37411516363056113,
            0.4975026355291354,
            0.6164375625224523,
            0.7493187540089825,
            0.8764732748562544,
            1,
        ],
    )


def smooth_blue_red() -> SmoothDiverging:
    return SmoothDiverging(MSH(80, 1.08, -1.1), MSH(80, 1.08, 0.5), 88)


def smooth_purple_orange() -> SmoothDiverging:
    return SmoothDiverging(
        MSH(64.97539711, 0.899434815, -0.899431964),
        MSH(85.00850996, 0.949730284, 0.950636521),
        88,
    )


def smooth_green_purple() -> SmoothDiverging:
    return SmoothDiverging(
        MSH(78.04105346, 0.885011982, 2.499491379),
        MSH(64.97539711, 0.899434815, -0.899431964),
        88,
    )


def smooth_blue_tan() -> SmoothDiverging:
    return SmoothDiverging(
        MSH(79.94788321, 0.798754784, -1.401313221),
        MSH(80.07193125, 0.799798811, 1.401089787),
        88,
    )


def smooth_green_red() -> SmoothDiverging:
    return SmoothDiverging(
        MSH(78.04105346, 0.885011982, 2.499491379),
        MSH(76.96722122, 0.949483656, 0.499492043),
        88,
    )
