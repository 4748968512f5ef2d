"""
Control-point selection.

A ControlPoints snapshot holds a sampled series and the subset of sample
indices chosen to represent its shape. Two selectors choose the subset:

    find_extrema   one point per monotonic run of a driving signal
    partition      recursive bisection at weighted centroids of |signal|

adjust_ends then adds one reflected point beyond each end, so a spline
fitted through (x_e, g_e) has neighbours at the domain edges.

Snapshots are immutable. Every selector returns a new one.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from eef.calculus import integral
from eef.config import get as get_config
from eef.errors import InvalidArgumentError

logger = logging.getLogger(__name__)


def _frozen(values, dtype=np.float64) -> np.ndarray:
    arr = np.array(values, dtype=dtype)
    arr.flags.writeable = False
    return arr


def _empty(dtype=np.float64) -> np.ndarray:
    return _frozen([], dtype=dtype)


def unit_step_coordinates(n: int, config: Optional[Dict[str, Any]] = None) -> np.ndarray:
    """Coordinates origin, origin + 1, ..., with origin from 'grid.unit_step_origin'."""
    origin = float(get_config('grid.unit_step_origin', 1.0, config=config))
    return origin + np.arange(n, dtype=np.float64)


@dataclass(frozen=True, eq=False)
class ControlPoints:
    """
    Series plus selected control points.

    Attributes
    ----------
    xs, ys : np.ndarray
        Coordinates and values, length n. xs is strictly increasing.
    unit_step : bool
        True when xs was synthesized as origin, origin + 1, ...
    gs : np.ndarray
        Cumulative integral of ys over xs.
    indices : np.ndarray
        Selected sample indices (0-based, strictly increasing).
    x_e, y_e, g_e : np.ndarray
        xs, ys, gs at the selected indices. After adjust_ends these carry
        two extra synthetic points and no longer line up with indices.
    """
    xs: np.ndarray
    ys: np.ndarray
    unit_step: bool
    gs: np.ndarray
    indices: np.ndarray = field(default_factory=lambda: _empty(np.intp))
    x_e: np.ndarray = field(default_factory=_empty)
    y_e: np.ndarray = field(default_factory=_empty)
    g_e: np.ndarray = field(default_factory=_empty)

    @classmethod
    def from_series(
        cls,
        ys: Sequence[float],
        xs: Optional[Sequence[float]] = None,
        config: Optional[Dict[str, Any]] = None,
    ) -> 'ControlPoints':
        """
        Build an empty snapshot from a series.

        Without xs the coordinates are unit steps starting at
        config 'grid.unit_step_origin'. Values and coordinates must be
        finite.
        """
        ys = np.asarray(ys, dtype=np.float64)
        if ys.ndim != 1:
            raise InvalidArgumentError(f"ys must be 1D, got shape {ys.shape}")
        n = len(ys)
        if n < 2:
            raise InvalidArgumentError(f"Need at least 2 samples, got {n}")
        if not np.all(np.isfinite(ys)):
            raise InvalidArgumentError(f"ys has {int(np.sum(~np.isfinite(ys)))} non-finite values")

        unit_step = xs is None
        if unit_step:
            xs = unit_step_coordinates(n, config)
        else:
            xs = np.asarray(xs, dtype=np.float64)
            if xs.shape != ys.shape:
                raise InvalidArgumentError(
                    f"xs and ys must have the same length, got {len(xs)} and {n}"
                )
            if not np.all(np.isfinite(xs)):
                raise InvalidArgumentError("xs must be finite")
            if np.any(np.diff(xs) <= 0):
                raise InvalidArgumentError("xs must be strictly increasing")

        cp = cls(xs=_frozen(xs), ys=_frozen(ys), unit_step=unit_step, gs=_empty())
        return replace(cp, gs=_frozen(cp.integrate(cp.ys)))

    @property
    def n(self) -> int:
        """Number of samples."""
        return len(self.ys)

    @property
    def count(self) -> int:
        """Number of control points currently held in x_e/y_e/g_e."""
        return len(self.x_e)

    def integrate(self, values: np.ndarray) -> np.ndarray:
        """Cumulative integral of values over this snapshot's coordinates."""
        if self.unit_step:
            return integral(values)
        return integral(values, self.xs)

    def sample(self, indices: Sequence[int]) -> 'ControlPoints':
        """New snapshot selecting indices, with gs recomputed from ys."""
        idx = _frozen(indices, dtype=np.intp)
        gs = _frozen(self.integrate(self.ys))
        return replace(
            self,
            gs=gs,
            indices=idx,
            x_e=_frozen(self.xs[idx]),
            y_e=_frozen(self.ys[idx]),
            g_e=_frozen(gs[idx]),
        )


def _check_signal(cp: ControlPoints, hs) -> np.ndarray:
    hs = np.asarray(hs, dtype=np.float64)
    if hs.shape != cp.ys.shape:
        raise InvalidArgumentError(
            f"Driving signal length {len(hs)} does not match series length {cp.n}"
        )
    return hs


# ---------------------------------------------------------------------------
# Extrema selector
# ---------------------------------------------------------------------------

def find_extrema(cp: ControlPoints, hs: Sequence[float]) -> ControlPoints:
    """
    Place control points on the extrema of hs.

    Each step between neighbouring samples is flat, rising or falling.
    Flat steps are skipped. The tracked index of the current run moves to
    the latest rising (or falling) sample; when the direction reverses one
    index is emitted for the run: the midpoint between the tracked index
    and the sample before the reversal when a plateau separates them,
    otherwise the tracked index itself. The first and last samples are
    always included.

    Driving this off the first derivative puts control points on the
    inflection points of ys, which makes the fit less sensitive to local
    noise.

    Returns a new snapshot; its count is the number of control points.
    """
    hs = _check_signal(cp, hs)
    n = cp.n

    indices: List[int] = [0]
    inc: Optional[int] = None
    dec: Optional[int] = None
    for j in range(1, n):
        hp = hs[j - 1]
        hc = hs[j]
        if hp == hc:
            continue
        prev = j - 1
        if hp < hc:
            if dec is not None:
                indices.append((dec + prev) // 2 if prev > dec else dec)
            inc = j
            dec = None
        else:
            if inc is not None:
                indices.append((inc + prev) // 2 if prev > inc else inc)
            dec = j
            inc = None
    indices.append(n - 1)

    result = cp.sample(indices)
    logger.debug("find_extrema: %d control points from %d samples", result.count, n)
    return result


# ---------------------------------------------------------------------------
# Partition selector
# ---------------------------------------------------------------------------

def find_index(xs: np.ndarray, t: float, k1: int, k2: int) -> int:
    """
    Index of the first bracket xs[i] <= t < xs[i+1] with i in [k1, k2].

    Brackets stop at the last sample. Falls back to k1 when t is not
    bracketed.
    """
    last = min(k2, len(xs) - 2)
    for i in range(k1, last + 1):
        if xs[i] <= t < xs[i + 1]:
            return i
    return k1


def _collapse(points: List[int]) -> List[int]:
    """Drop every index that is not greater than its predecessor."""
    kept = [points[0]]
    for i in range(1, len(points)):
        if points[i] > points[i - 1]:
            kept.append(points[i])
    return kept


def check_split_levels(split_levels: int, n: int, config: Optional[Dict[str, Any]] = None) -> None:
    """Raise unless 1 <= split_levels and 2**split_levels + 1 <= n."""
    min_levels = get_config('partition.split_levels_min', 1, config=config)
    if (
        isinstance(split_levels, bool)
        or not isinstance(split_levels, (int, np.integer))
        or split_levels < min_levels
        or 2 ** int(split_levels) + 1 > n
    ):
        raise InvalidArgumentError(
            f"Invalid split_levels ({split_levels}) for {n} samples; "
            f"need {min_levels} <= split_levels and 2**split_levels + 1 <= n"
        )


def partition(
    cp: ControlPoints,
    hs: Sequence[float],
    split_levels: int,
    config: Optional[Dict[str, Any]] = None,
) -> ControlPoints:
    """
    Place control points by recursive weighted bisection.

    The weight is |hs|. Level 1 splits the whole range at its weighted
    centroid; each further level splits every sub-range of the previous
    level the same way. A sub-range with zero total weight is split at
    the midpoint of its end coordinates. Control points gather where the
    weight is dense, so |deriv2| concentrates them on curvature.

    Parameters
    ----------
    cp : ControlPoints
        Series snapshot.
    hs : sequence of float
        Weight-producing signal, same length as the series.
    split_levels : int
        Number of bisection levels, 1 <= split_levels and
        2**split_levels + 1 <= n.
    config : dict, optional
        Settings to read instead of the module CONFIG.

    Returns
    -------
    ControlPoints with at most 2**split_levels + 1 strictly increasing
    indices, always including the first and last sample.
    """
    check_split_levels(split_levels, cp.n, config)
    hs = _check_signal(cp, hs)

    xs = cp.xs
    w = np.abs(hs)
    ws = cp.integrate(w)
    ms = cp.integrate(w * xs)

    def centroid_index(k1: int, k2: int) -> int:
        dw = ws[k2] - ws[k1]
        if dw == 0:
            t = 0.5 * (xs[k1] + xs[k2])
        else:
            t = (ms[k2] - ms[k1]) / dw
        return find_index(xs, t, k1, k2)

    last = cp.n - 1
    points = _collapse([0, centroid_index(0, last), last])
    for level in range(2, split_levels + 1):
        doubled = [points[0]]
        for a, b in zip(points[:-1], points[1:]):
            doubled.append(centroid_index(a, b))
            doubled.append(b)
        points = _collapse(doubled)
        logger.debug("partition: level %d -> %d points", level, len(points))

    return cp.sample(points)


# ---------------------------------------------------------------------------
# End adjustment
# ---------------------------------------------------------------------------

def adjust_ends(cp: ControlPoints) -> ControlPoints:
    """
    Even extension: add one reflected control point beyond each end.

    x and g are mirrored about the end point; y copies the neighbour's
    value. The index set is left as is.
    """
    m = cp.count
    if m < 2:
        raise InvalidArgumentError(f"adjust_ends needs at least 2 control points, got {m}")

    x, y, g = cp.x_e, cp.y_e, cp.g_e
    return replace(
        cp,
        x_e=_frozen(np.concatenate(([2 * x[0] - x[1]], x, [2 * x[-1] - x[-2]]))),
        y_e=_frozen(np.concatenate(([y[1]], y, [y[-2]]))),
        g_e=_frozen(np.concatenate(([2 * g[0] - g[1]], g, [2 * g[-1] - g[-2]]))),
    )
