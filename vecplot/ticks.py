from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
import logging
import math
from typing import Callable, Protocol, Sequence, runtime_checkable

import numpy as np

from vecplot.errors import DomainError, InputRangeError


LOGGER = logging.getLogger(__name__)

SUGGESTED_TICKS = 3


@dataclass(frozen=True)
class Tick:
    value: float
    # Empty label marks a minor tick.
    label: str = ""

    def is_minor(self) -> bool:
        return self.label == ""


@runtime_checkable
class Ticker(Protocol):
    def ticks(self, vmin: float, vmax: float) -> list[Tick]:
        ...


def labelled(ticks: Sequence[Tick]) -> list[Tick]:
    return [t for t in ticks if not t.is_minor()]


@dataclass(frozen=True)
class DefaultTicks:
    """Legacy "nice" linear ticks: about three labelled ticks plus minor ticks."""

    def ticks(self, vmin: float, vmax: float) -> list[Tick]:
        if not vmax > vmin:
            raise InputRangeError(f"illegal tick range: min={vmin} max={vmax}")
        span = vmax - vmin
        tens = 10.0 ** math.floor(math.log10(span))
        n = span / tens
        while n < SUGGESTED_TICKS:
            tens /= 10
            n = span / tens

        major_mult = int(n / SUGGESTED_TICKS)
        if major_mult == 7:
            major_mult = 6
        elif major_mult == 9:
            major_mult = 8
        major_delta = major_mult * tens

        prec = max(_legacy_precision(vmin), _legacy_precision(vmax))
        ticks: list[Tick] = []
        # Both walks use integer multiples of their step so no rounding accumulates.
        k = math.floor(vmin / major_delta)
        while k * major_delta <= vmax:
            val = k * major_delta
            if val >= vmin:
                ticks.append(Tick(val, _legacy_label(val, prec)))
            k += 1

        per_major = 2
        if major_mult in (3, 6):
            per_major = 3
        elif major_mult == 5:
            per_major = 5
        minor_delta = major_delta / per_major

        m = math.floor(vmin / minor_delta)
        while m * minor_delta <= vmax:
            val = m * minor_delta
            # Every per_major-th minor position is a major one.
            if val >= vmin and m % per_major != 0:
                ticks.append(Tick(val))
            m += 1
        return ticks


def _legacy_precision(x: float) -> int:
    # Rounds to at least four decimals; digits near zero can be lost.
    if x == 0:
        return 4
    return int(max(math.ceil(-math.log10(abs(x))), 4))


def _legacy_label(v: float, prec: int) -> str:
    return shortest(round(v, prec))


def shortest(v: float) -> str:
    """Shortest round-tripping representation, without a trailing ``.0``."""
    out = repr(float(v))
    if out.endswith(".0"):
        out = out[:-2]
    if out == "-0":
        out = "0"
    return out


class Containment(Enum):
    FREE = "free"
    CONTAIN_DATA = "contain"
    WITHIN_DATA = "within"


DEFAULT_Q = (1.0, 5.0, 2.0, 2.5, 4.0, 3.0)
DEFAULT_WEIGHTS = (0.25, 0.2, 0.5, 0.05)
_EPS = 2.22e-16 * 100


@dataclass(frozen=True)
class TalbotResult:
    values: np.ndarray = field(compare=False)
    # Step as a multiple of 10**magnitude (j * q).
    step: float
    q: float
    magnitude: int

    @property
    def spacing(self) -> float:
        """Distance between consecutive values."""
        if self.q == 0:
            return self.step
        return self.step * 10.0**self.magnitude


def _unit_legibility(lmin: float, lmax: float, step: float) -> float:
    return 1.0


def talbot_lin_hanrahan(
    dmin: float,
    dmax: float,
    want: int,
    containment: Containment = Containment.FREE,
    q: Sequence[float] | None = None,
    w: Sequence[float] | None = None,
    legibility: Callable[[float, float, float], float] | None = None,
) -> TalbotResult:
    """Extended Wilkinson labelling (Talbot, Lin and Hanrahan, 2010).

    Searches steps ``j * q * 10**z`` for the label sequence that maximises the
    weighted sum of simplicity, coverage, density and legibility. ``q`` lists
    nice step values in order of preference, ``w`` the four weights. With
    ``CONTAIN_DATA`` the labels must enclose [dmin, dmax]; with
    ``WITHIN_DATA`` they must lie inside it.
    """
    if dmin > dmax:
        raise InputRangeError(f"illegal label range: min={dmin} max={dmax}")
    if want < 0:
        raise ValueError("want must be >= 0")
    q = tuple(DEFAULT_Q if q is None else q)
    w = tuple(DEFAULT_WEIGHTS if w is None else w)
    if len(w) != 4:
        raise ValueError("w must hold four weights")
    legibility = legibility or _unit_legibility

    span = dmax - dmin
    if span < _EPS or want < 2:
        LOGGER.debug("degenerate label range [%s, %s], using %d evenly spaced values", dmin, dmax, want)
        return _evenly_spaced(dmin, dmax, want)

    def score(s: float, c: float, d: float, l: float) -> float:
        return w[0] * s + w[1] * c + w[2] * d + w[3] * l

    n = len(q)
    best_score = -2.0
    best: tuple[int, int, float, int, int] | None = None

    j = 1
    searching = True
    while searching:
        for qi, qv in enumerate(q):
            sm = _max_simplicity(qi, n, j)
            if score(sm, 1, 1, 1) < best_score:
                searching = False
                break

            k = 2
            while True:
                dm = _max_density(k, want)
                if score(sm, 1, dm, 1) < best_score:
                    break

                delta = span / (k + 1) / j / qv
                z = int(math.ceil(math.log10(delta)))
                while True:
                    step = j * qv * _pow10(z)
                    if not math.isfinite(step):
                        break
                    cm = _max_coverage(dmin, dmax, step * (k - 1))
                    if score(sm, cm, dm, 1) < best_score:
                        break

                    min_start = int(math.floor(dmax / step) * j - (k - 1) * j)
                    max_start = int(math.ceil(dmin / step) * j)
                    for start in range(min_start, max_start + 1):
                        lmin = start * (step / j)
                        lmax = lmin + step * (k - 1)
                        if containment is Containment.CONTAIN_DATA and (lmin > dmin or lmax < dmax):
                            continue
                        if containment is Containment.WITHIN_DATA and (lmin < dmin or lmax > dmax):
                            continue

                        total = score(
                            _simplicity(qi, n, j, lmin, lmax, step),
                            _coverage(dmin, dmax, lmin, lmax),
                            _density(k, want, dmin, dmax, lmin, lmax),
                            legibility(lmin, lmax, step),
                        )
                        if total > best_score:
                            best_score = total
                            best = (start, j, qv, k, z)
                    z += 1
                k += 1
        j += 1

    if best is None:
        LOGGER.debug("no scorable labelling for [%s, %s], using %d evenly spaced values", dmin, dmax, want)
        return _evenly_spaced(dmin, dmax, want)

    start, j, qv, k, z = best
    values = np.asarray([_scaled((start + i * j) * qv, z) for i in range(k)], dtype=np.float64)
    return TalbotResult(values=values, step=j * qv, q=qv, magnitude=z)


def _evenly_spaced(dmin: float, dmax: float, want: int) -> TalbotResult:
    values = np.linspace(dmin, dmax, want)
    step = (dmax - dmin) / (want - 1) if want > 1 else 0.0
    mags = [math.floor(math.log10(abs(v))) for v in (dmin, dmax) if v != 0]
    return TalbotResult(values=values, step=step, q=0.0, magnitude=min(mags) if mags else 0)


def _pow10(z: int) -> float:
    try:
        return 10.0**z
    except OverflowError:
        return math.inf


def _scaled(v: float, z: int) -> float:
    # Dividing by an exact power of ten keeps values like 0.1 clean.
    if z < 0:
        return v / 10.0 ** (-z)
    return v * 10.0**z


def _simplicity(qi: int, n: int, j: int, lmin: float, lmax: float, step: float) -> float:
    mod = lmin % step
    v = 1.0 if (mod < _EPS or step - mod < _EPS) and lmin <= 0 <= lmax else 0.0
    return 1 - qi / (n - 1) - j + v


def _max_simplicity(qi: int, n: int, j: int) -> float:
    return 1 - qi / (n - 1) - j + 1


def _coverage(dmin: float, dmax: float, lmin: float, lmax: float) -> float:
    r = 0.1 * (dmax - dmin)
    hi, lo = dmax - lmax, dmin - lmin
    return 1 - 0.5 * (hi * hi + lo * lo) / (r * r)


def _max_coverage(dmin: float, dmax: float, span: float) -> float:
    r = dmax - dmin
    if span <= r:
        return 1.0
    h = 0.5 * (span - r)
    r *= 0.1
    return 1 - 0.5 * (2 * h * h) / (r * r)


def _density(k: int, m: int, dmin: float, dmax: float, lmin: float, lmax: float) -> float:
    r = (k - 1) / (lmax - lmin)
    rt = (m - 1) / (max(lmax, dmax) - min(dmin, lmin))
    if r == 0 or rt == 0:
        # Labels overflowed to infinity.
        return -math.inf
    return 2 - max(r / rt, rt / r)


def _max_density(k: int, m: int) -> float:
    if k >= m:
        return 2 - (k - 1) / (m - 1)
    return 1.0


@dataclass(frozen=True)
class TalbotTicks:
    """Ticker choosing labelled ticks with :func:`talbot_lin_hanrahan`."""

    want: int = SUGGESTED_TICKS
    containment: Containment = Containment.FREE

    def ticks(self, vmin: float, vmax: float) -> list[Tick]:
        if vmin > vmax:
            raise InputRangeError(f"illegal tick range: min={vmin} max={vmax}")
        res = talbot_lin_hanrahan(vmin, vmax, self.want, self.containment)
        spacing = res.spacing
        if spacing <= 0:
            return [Tick(float(v), format_tick(float(v))) for v in res.values]
        slack = spacing * 1e-9
        ticks = [
            Tick(float(v), format_tick(float(v), step=spacing))
            for v in res.values
            if vmin - slack <= v <= vmax + slack
        ]
        majors = [t.value for t in ticks]
        minor = spacing / 2
        val = math.floor(vmin / minor) * minor
        while val <= vmax:
            if val >= vmin and not any(abs(val - m) <= slack for m in majors):
                ticks.append(Tick(val))
            val += minor
        return ticks


@dataclass(frozen=True)
class LogTicks:
    """Labelled ticks at powers of ten with minor ticks at their multiples."""

    def ticks(self, vmin: float, vmax: float) -> list[Tick]:
        if vmin <= 0 or vmax <= 0:
            raise DomainError("values must be greater than 0 for a log scale")
        val = 10.0 ** math.floor(math.log10(vmin))
        top = 10.0 ** math.ceil(math.log10(vmax))
        ticks: list[Tick] = []
        while val < top:
            ticks.append(Tick(val, shortest(val)))
            ticks.extend(Tick(val * i) for i in range(2, 10))
            val *= 10
        ticks.append(Tick(val, shortest(val)))
        return ticks


@dataclass(frozen=True)
class ConstantTicks:
    values: tuple[Tick, ...] = ()

    def ticks(self, vmin: float, vmax: float) -> list[Tick]:
        return list(self.values)


def utc_from_unix(value: float) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc)


@dataclass(frozen=True)
class TimeTicks:
    """Ticks from another ticker, labelled as times with ``strftime``."""

    ticker: Ticker = DefaultTicks()
    fmt: str = "%Y-%m-%d"
    time: Callable[[float], datetime] = utc_from_unix

    def ticks(self, vmin: float, vmax: float) -> list[Tick]:
        out = []
        for t in self.ticker.ticks(vmin, vmax):
            if t.is_minor():
                out.append(t)
            else:
                out.append(Tick(t.value, self.time(t.value).strftime(self.fmt)))
        return out


def format_tick(value: float, *, step: float | None = None) -> str:
    if not np.isfinite(value):
        return str(value)
    if step is not None and np.isfinite(step) and step > 0 and abs(value) <= step * 1e-9:
        value = 0.0
    abs_v = abs(value)
    decimals = _decimals_from_step(step) if step is not None else 6
    if abs_v != 0 and (abs_v >= 1e9 or (step is not None and abs(step) < 1e-4) or abs_v < 1e-6):
        return f"{value:.4e}"

    d = Decimal(repr(value))
    quant = Decimal("1").scaleb(-decimals)
    try:
        q = d.quantize(quant)
    except InvalidOperation:
        q = d
    out = format(q, "f")
    # Only trim trailing zeros for fractional values (preserve integer zeros like 30, 40).
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    if out == "-0":
        out = "0"
    return out


def _decimals_from_step(step: float) -> int:
    if step <= 0 or not np.isfinite(step):
        return 6
    d = Decimal(repr(step)).normalize()
    exp = d.as_tuple().exponent
    decimals = max(0, -int(exp))
    return min(12, decimals)


TICKERS = {
    "default": DefaultTicks,
    "talbot": TalbotTicks,
    "log": LogTicks,
    "time": TimeTicks,
}


def ticker_by_name(name: str) -> Ticker:
    key = name.strip().lower()
    if key not in TICKERS:
        raise ValueError(f"unknown tick marker: {name!r}")
    return TICKERS[key]()
