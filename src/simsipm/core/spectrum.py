"""Resampling of wavelength dependent photon detection efficiency.

Measured PDE curves come as a handful of ``(wavelength, efficiency)`` points,
neither sorted nor uniformly spaced.  :func:`resample_pde_spectrum` maps them
onto a fixed grid of :data:`PDE_SPECTRUM_POINTS` wavelengths starting at the
shortest measured wavelength with a step of ``(xmax - xmin) / N``, so the
grid stops one step short of the longest wavelength.

Between two bracketing points the efficiency is interpolated in log-log
space, i.e. as a power law

.. math::

   \\log y = \\frac{\\log y_0 \\log(x_1/x) + \\log y_1 \\log(x/x_0)}{\\log(x_1/x_0)}

which suits curves that vary multiplicatively with wavelength.  When one of
the bracketing efficiencies is not positive the logarithm is undefined and a
linear interpolation is used instead.  Negative results are clamped to zero.
"""

from __future__ import annotations

import bisect
import math
from typing import Sequence, Tuple

import numpy as np

from ..errors import InvalidParameter

PDE_SPECTRUM_POINTS = 32


def _bracket(keys: Sequence[float], x: float) -> int:
    """Return ``i1`` such that ``keys[i1 - 1]`` and ``keys[i1]`` bracket ``x``."""

    i1 = bisect.bisect_right(keys, x)
    # Never use the first or last table entry as both ends of the bracket
    if i1 == len(keys):
        i1 -= 1
    if i1 == 0:
        i1 += 1
    return i1


def _interpolate(x: float, x0: float, x1: float, y0: float, y1: float) -> float:
    y = math.nan
    if y0 > 0 and y1 > 0:
        log_y = (math.log(y0) * math.log(x1 / x) + math.log(y1) * math.log(x / x0)) / math.log(x1 / x0)
        y = math.exp(log_y)
    if not math.isfinite(y) or y < 0:
        m = (y1 - y0) / (x1 - x0)
        y = y0 + m * (x - x0)
    return max(y, 0.0)


def resample_pde_spectrum(
    wavelengths: Sequence[float] | np.ndarray,
    efficiencies: Sequence[float] | np.ndarray,
    n_points: int = PDE_SPECTRUM_POINTS,
) -> Tuple[np.ndarray, np.ndarray]:
    """Resample a PDE curve onto a uniform wavelength grid.

    Parameters
    ----------
    wavelengths:
        Wavelengths in nm.  Order is irrelevant; when a wavelength appears
        more than once the later efficiency wins.
    efficiencies:
        Detection efficiencies in ``[0, 1]``, paired with ``wavelengths``.
    n_points:
        Number of grid points.

    Returns
    -------
    tuple of numpy.ndarray
        ``(grid, pde)`` arrays of length ``n_points``.

    Raises
    ------
    InvalidParameter
        If the inputs differ in length, contain fewer than two distinct
        wavelengths, non-positive or non-finite wavelengths, or efficiencies
        outside ``[0, 1]``.
    """

    wav = np.asarray(wavelengths, dtype=float).reshape(-1)
    eff = np.asarray(efficiencies, dtype=float).reshape(-1)
    if wav.size != eff.size:
        raise InvalidParameter(
            "pde_spectrum", (wav.size, eff.size), "wavelengths and efficiencies must have the same length"
        )
    if not np.all(np.isfinite(wav)) or np.any(wav <= 0):
        raise InvalidParameter("pde_spectrum", wav.tolist(), "wavelengths must be positive and finite")
    if np.any(np.isnan(eff)) or np.any(eff < 0) or np.any(eff > 1):
        raise InvalidParameter("pde_spectrum", eff.tolist(), "efficiencies must lie in [0, 1]")

    table = dict(zip(wav.tolist(), eff.tolist()))
    if len(table) < 2:
        raise InvalidParameter("pde_spectrum", wav.tolist(), "at least two distinct wavelengths are required")

    keys = sorted(table)
    xmin, xmax = keys[0], keys[-1]
    dx = (xmax - xmin) / n_points

    grid = np.empty(n_points, dtype=float)
    pde = np.empty(n_points, dtype=float)
    for i in range(n_points):
        x = xmin + i * dx
        i1 = _bracket(keys, x)
        x0, x1 = keys[i1 - 1], keys[i1]
        grid[i] = x
        pde[i] = _interpolate(x, x0, x1, table[x0], table[x1])
    return grid, pde


def evaluate_pde(grid: Sequence[float] | np.ndarray, pde: Sequence[float] | np.ndarray, wavelength: float) -> float:
    """Linearly look up the efficiency at ``wavelength`` on a resampled grid.

    Wavelengths outside the grid take the value of the nearest end point.
    """

    return float(np.interp(wavelength, np.asarray(grid, dtype=float), np.asarray(pde, dtype=float)))


__all__ = ["PDE_SPECTRUM_POINTS", "resample_pde_spectrum", "evaluate_pde"]
