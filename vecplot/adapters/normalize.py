from __future__ import annotations

from typing import Any

import numpy as np

from vecplot.errors import PlotDataError
from vecplot.plotter.base import Values, XYs
from vecplot.plotter.conrec import GridXYZ


try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]

try:
    import torch
except Exception:  # pragma: no cover - optional dependency
    torch = None  # type: ignore[assignment]


def xys_from(y: Any = None, *, x: Any = None, data: Any = None, drop_nonfinite: bool = False) -> XYs:
    """Build plotter points from arrays, sequences, pandas columns or torch tensors.

    ``x`` defaults to 0, 1, 2, ... . With ``data`` (a DataFrame) ``x`` and
    ``y`` may name columns. Non-finite pairs raise ``NaNValue`` unless
    ``drop_nonfinite`` is set.
    """
    y_arr = _floats(_column(y, data, "y"), label="y")

    if x is None:
        x_arr = np.arange(y_arr.size, dtype=np.float64)
    else:
        x_arr = _floats(_column(x, data, "x"), label="x")

    if x_arr.shape != y_arr.shape:
        raise PlotDataError(f"x and y length mismatch: {x_arr.size} != {y_arr.size}")

    if drop_nonfinite:
        mask = np.isfinite(x_arr) & np.isfinite(y_arr)
        x_arr, y_arr = x_arr[mask], y_arr[mask]
    return XYs.from_columns(x_arr, y_arr)


def values_from(v: Any, *, data: Any = None, drop_nonfinite: bool = False) -> Values:
    arr = _floats(_column(v, data, "values"), label="values")
    if drop_nonfinite:
        arr = arr[np.isfinite(arr)]
    return Values(arr)


def grid_from(z: Any, *, x: Any = None, y: Any = None) -> GridXYZ:
    """Grid from a 2-D array (rows are y) or a DataFrame indexed by y with x columns."""
    if pd is not None and isinstance(z, pd.DataFrame):
        if x is None:
            x = z.columns
        if y is None:
            y = z.index
        z = z.to_numpy(dtype=np.float64)
    elif torch is not None and isinstance(z, torch.Tensor):
        z = z.detach().cpu().to(torch.float64).numpy()
    arr = np.asarray(z, dtype=np.float64)
    if arr.ndim != 2:
        raise PlotDataError(f"grid values must be 2-D, got {arr.ndim}-D")
    rows, cols = arr.shape
    xs = np.arange(cols, dtype=np.float64) if x is None else _floats(x, label="x")
    ys = np.arange(rows, dtype=np.float64) if y is None else _floats(y, label="y")
    return GridXYZ(arr, xs, ys)


def _column(value: Any, data: Any, label: str) -> Any:
    """Look up ``value`` as a column name of ``data`` when a DataFrame is given."""
    if data is None:
        return value
    if pd is None or not isinstance(data, pd.DataFrame):
        raise PlotDataError("`data` must be a pandas DataFrame")
    if not isinstance(value, str):
        return value
    if value not in data.columns:
        raise PlotDataError(f"{label} column not found: {value}")
    return data[value]


def _floats(value: Any, *, label: str) -> np.ndarray:
    if torch is not None and isinstance(value, torch.Tensor):
        value = value.detach().cpu().to(torch.float64).numpy()
    elif pd is not None and isinstance(value, (pd.Series, pd.Index)):
        value = value.to_numpy()
    if value is None or isinstance(value, (str, bytes)):
        raise PlotDataError(f"unsupported {label} input: {value!r}")
    try:
        # None entries become NaN.
        arr = np.asarray(value, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise PlotDataError(f"{label} contains non-numeric values") from exc
    if arr.ndim != 1:
        raise PlotDataError(f"{label} must be 1-D, got {arr.ndim}-D")
    return arr
