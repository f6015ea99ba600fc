from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Protocol, runtime_checkable

from vecplot.errors import DomainError


@runtime_checkable
class Normalizer(Protocol):
    def normalize(self, vmin: float, vmax: float, x: float) -> float:
        ...

    def denormalize(self, vmin: float, vmax: float, t: float) -> float:
        ...


@dataclass(frozen=True)
class LinearScale:
    def normalize(self, vmin: float, vmax: float, x: float) -> float:
        return (x - vmin) / (vmax - vmin)

    def denormalize(self, vmin: float, vmax: float, t: float) -> float:
        return vmin + t * (vmax - vmin)


@dataclass(frozen=True)
class LogScale:
    def normalize(self, vmin: float, vmax: float, x: float) -> float:
        if vmin <= 0 or vmax <= 0 or x <= 0:
            raise DomainError(f"log scale requires positive values, got min={vmin} max={vmax} x={x}")
        logmin = math.log(vmin)
        return (math.log(x) - logmin) / (math.log(vmax) - logmin)

    def denormalize(self, vmin: float, vmax: float, t: float) -> float:
        if vmin <= 0 or vmax <= 0:
            raise DomainError(f"log scale requires positive bounds, got min={vmin} max={vmax}")
        logmin = math.log(vmin)
        return math.exp(logmin + t * (math.log(vmax) - logmin))


@dataclass(frozen=True)
class InvertedScale:
    inner: Normalizer = LinearScale()

    def normalize(self, vmin: float, vmax: float, x: float) -> float:
        return 1.0 - self.inner.normalize(vmin, vmax, x)

    def denormalize(self, vmin: float, vmax: float, t: float) -> float:
        return self.inner.denormalize(vmin, vmax, 1.0 - t)


SCALES = {
    "linear": LinearScale,
    "log": LogScale,
}


def scale_by_name(name: str) -> Normalizer:
    """Resolve ``linear``, ``log``, ``inverted`` or ``inverted-log``."""
    key = name.strip().lower()
    if key.startswith("inverted"):
        inner = key[len("inverted") :].lstrip("-_ ") or "linear"
        return InvertedScale(scale_by_name(inner))
    if key not in SCALES:
        raise ValueError(f"unknown scale: {name!r}")
    return SCALES[key]()
