"""
Discrete calculus over sampled sequences.

    deriv     first derivative    central difference inside, one-sided at the ends
    deriv2    second derivative   three-point formula inside, ends copied inward
    integral  cumulative integral trapezoidal rule, s[0] = 0

Each operator takes an optional coordinate array. Without one the samples
are taken to be one unit apart.
"""

import numpy as np
from typing import Optional, Tuple

from eef.errors import InvalidArgumentError


def _prepare(
    ys: np.ndarray,
    xs: Optional[np.ndarray],
) -> Tuple[np.ndarray, Optional[np.ndarray]]:
    """Coerce to float64 and check shape. Needs at least two samples."""
    ys = np.asarray(ys, dtype=np.float64)
    if ys.ndim != 1:
        raise InvalidArgumentError(f"ys must be 1D, got shape {ys.shape}")
    if len(ys) < 2:
        raise InvalidArgumentError(f"Need at least 2 samples, got {len(ys)}")
    if xs is not None:
        xs = np.asarray(xs, dtype=np.float64)
        if xs.shape != ys.shape:
            raise InvalidArgumentError(
                f"xs and ys must have the same length, got {len(xs)} and {len(ys)}"
            )
    return ys, xs


def deriv(ys: np.ndarray, xs: Optional[np.ndarray] = None) -> np.ndarray:
    """
    First derivative.

    Interior points use the central difference; with unit steps that is
    0.5 * (y[i+1] - y[i-1]). The two end points use the plain one-sided
    difference, without the 0.5 factor.
    """
    ys, xs = _prepare(ys, xs)
    d1 = np.zeros_like(ys)
    if xs is None:
        d1[0] = ys[1] - ys[0]
        d1[1:-1] = 0.5 * (ys[2:] - ys[:-2])
        d1[-1] = ys[-1] - ys[-2]
    else:
        d1[0] = (ys[1] - ys[0]) / (xs[1] - xs[0])
        d1[1:-1] = (ys[2:] - ys[:-2]) / (xs[2:] - xs[:-2])
        d1[-1] = (ys[-1] - ys[-2]) / (xs[-1] - xs[-2])
    return d1


def deriv2(ys: np.ndarray, xs: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Second derivative.

    Only interior points are computed. The first and last values repeat
    their interior neighbour.
    """
    ys, xs = _prepare(ys, xs)
    d2 = np.zeros_like(ys)
    if xs is None:
        d2[1:-1] = ys[2:] - 2.0 * ys[1:-1] + ys[:-2]
    else:
        right = (ys[2:] - ys[1:-1]) / (xs[2:] - xs[1:-1])
        left = (ys[1:-1] - ys[:-2]) / (xs[1:-1] - xs[:-2])
        d2[1:-1] = (right - left) * 2.0 / (xs[2:] - xs[:-2])
    d2[0] = d2[1]
    d2[-1] = d2[-2]
    return d2


def integral(ys: np.ndarray, xs: Optional[np.ndarray] = None) -> np.ndarray:
    """Cumulative trapezoidal integral, starting from 0 at the first sample."""
    ys, xs = _prepare(ys, xs)
    areas = 0.5 * (ys[:-1] + ys[1:])
    if xs is not None:
        areas = areas * np.diff(xs)
    s = np.zeros_like(ys)
    s[1:] = np.cumsum(areas)
    return s
