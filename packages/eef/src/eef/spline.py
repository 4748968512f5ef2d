"""
Spline step: fit the control points in integral space, differentiate back.

The fitter is scipy.interpolate.UnivariateSpline (FITPACK). Fitting the
cumulative integral and taking its derivative gives a trend whose area
matches the series between control points.
"""

import logging
from typing import Any, Dict, Optional

import numpy as np
from scipy.interpolate import UnivariateSpline

from eef.config import get as get_config
from eef.control_points import ControlPoints
from eef.errors import InvalidArgumentError

logger = logging.getLogger(__name__)

MAX_DEGREE = 5  # FITPACK limit


def fit_integral_spline(
    x: np.ndarray,
    g: np.ndarray,
    degree: int,
    config: Optional[Dict[str, Any]] = None,
) -> UnivariateSpline:
    """
    Fit a spline of the given degree through (x, g).

    FITPACK needs more points than the degree. With fewer (a flat driving
    signal leaves only the end points) the degree drops to len(x) - 1.
    Smoothing and extrapolation come from config 'spline.*'.
    """
    x = np.asarray(x, dtype=np.float64)
    g = np.asarray(g, dtype=np.float64)
    if not 1 <= degree <= MAX_DEGREE:
        raise InvalidArgumentError(f"Spline degree must be in [1, {MAX_DEGREE}], got {degree}")

    k = degree
    if len(x) <= k:
        k = len(x) - 1
        logger.warning(
            "Only %d control points for a degree %d spline, fitting degree %d instead",
            len(x), degree, k,
        )

    return UnivariateSpline(
        x, g,
        k=k,
        s=get_config('spline.smoothing', 0.0, config=config),
        ext=get_config('spline.ext', 'const', config=config),
    )


def trend_from_control_points(
    cp: ControlPoints,
    degree: int,
    config: Optional[Dict[str, Any]] = None,
) -> np.ndarray:
    """Derivative of the integral spline, evaluated at the series coordinates."""
    spl = fit_integral_spline(cp.x_e, cp.g_e, degree, config)
    return spl.derivative(1)(cp.xs)
