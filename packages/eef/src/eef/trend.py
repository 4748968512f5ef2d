"""
Trend extraction entry points.

    eef_extrema    control points on the extrema of a driving signal
    eef_partition  control points on a weighted bisection of the domain

Both sequence: validate → driving signal → select control points →
adjust ends → fit spline on the integral → differentiate → subtract.
No math lives here beyond that wiring.
"""

import logging
from typing import Any, Dict, Optional, Sequence, Tuple, Union

import numpy as np

from eef.config import get as get_config
from eef.control_points import (
    ControlPoints,
    adjust_ends,
    check_split_levels,
    find_extrema,
    partition,
)
from eef.errors import InvalidArgumentError
from eef.signals import ExtremaSignal, PartitionSignal, driving_signal
from eef.spline import trend_from_control_points

logger = logging.getLogger(__name__)


def _check_p_order(p_order: int, config: Optional[Dict[str, Any]] = None) -> int:
    lo = get_config('trend.p_order_min', 0, config=config)
    hi = get_config('trend.p_order_max', 4, config=config)
    if isinstance(p_order, bool) or not isinstance(p_order, (int, np.integer)) or not lo <= p_order <= hi:
        raise InvalidArgumentError(f"Invalid p_order ({p_order}), must be an integer in [{lo}, {hi}]")
    return int(p_order)


def _fit(
    cp: ControlPoints,
    p_order: int,
    config: Optional[Dict[str, Any]] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    cp = adjust_ends(cp)
    trend = trend_from_control_points(cp, p_order + 1, config)
    diff = cp.ys - trend
    return trend, diff


def eef_extrema(
    ys: Sequence[float],
    xs: Optional[Sequence[float]] = None,
    *,
    p_order: Optional[int] = None,
    depend_on: Union[str, ExtremaSignal, None] = None,
    config: Optional[Dict[str, Any]] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Equivalent effect function with control points on extrema.

    Args:
        ys: Series values, length n >= 2.
        xs: Strictly increasing coordinates, or None for unit steps.
        p_order: Polynomial order of the trend, 0..4 (default 3).
            The integral spline has degree p_order + 1.
        depend_on: 'value', 'first_deriv' or 'second_deriv'
            (default 'second_deriv'). 'first_deriv' places control points
            on the inflection points of ys.
        config: Settings dict (e.g. from config.load) read instead of
            the module CONFIG.

    Returns:
        (trend, diff) with diff = ys - trend, both length n.
    """
    if p_order is None:
        p_order = get_config('trend.p_order_default', 3, config=config)
    if depend_on is None:
        depend_on = get_config('extrema.depend_on', 'second_deriv', config=config)
    p_order = _check_p_order(p_order, config)
    option = ExtremaSignal.parse(depend_on)

    cp = ControlPoints.from_series(ys, xs, config)
    hs = driving_signal(cp.ys, None if cp.unit_step else cp.xs, option)
    cp = find_extrema(cp, hs)
    logger.debug("eef_extrema: %d control points on %s, p_order=%d", cp.count, option.value, p_order)
    return _fit(cp, p_order, config)


def eef_partition(
    ys: Sequence[float],
    split_levels: int,
    xs: Optional[Sequence[float]] = None,
    *,
    p_order: Optional[int] = None,
    depend_on: Union[str, PartitionSignal, None] = None,
    config: Optional[Dict[str, Any]] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Equivalent effect function with control points on a weighted partition.

    Args:
        ys: Series values, length n >= 2.
        split_levels: Bisection levels, 1 <= split_levels and
            2**split_levels + 1 <= n.
        xs: Strictly increasing coordinates, or None for unit steps.
        p_order: Polynomial order of the trend, 0..4 (default 3).
        depend_on: 'abs_value', 'abs_first_deriv' or 'abs_second_deriv'
            (default 'abs_second_deriv'). More control points land where
            the chosen signal is dense.
        config: Settings dict read instead of the module CONFIG.

    Returns:
        (trend, diff) with diff = ys - trend, both length n.
    """
    if p_order is None:
        p_order = get_config('trend.p_order_default', 3, config=config)
    if depend_on is None:
        depend_on = get_config('partition.depend_on', 'abs_second_deriv', config=config)
    p_order = _check_p_order(p_order, config)
    option = PartitionSignal.parse(depend_on)
    check_split_levels(split_levels, len(np.atleast_1d(ys)), config)

    cp = ControlPoints.from_series(ys, xs, config)
    hs = driving_signal(cp.ys, None if cp.unit_step else cp.xs, option)
    cp = partition(cp, hs, split_levels, config)
    logger.debug(
        "eef_partition: %d control points on %s, split_levels=%d, p_order=%d",
        cp.count, option.value, split_levels, p_order,
    )
    return _fit(cp, p_order, config)
