"""
EEF Configuration
=================
Defaults for trend extraction and the command line tool.
Single source of truth for the orchestration entry points.

Usage:
    from eef.config import CONFIG, get
    p_order = get('trend.p_order_default')

    # Overlay a YAML file on the defaults
    from eef.config import load
    cfg = load('eef.yaml')
"""

import copy
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from eef.errors import InvalidArgumentError


CONFIG = {

    # =================================================================
    # Trend fitting
    # =================================================================
    'trend': {
        'p_order_default': 3,
        'p_order_min': 0,
        'p_order_max': 4,
    },

    # =================================================================
    # Driving signal defaults per selector
    # =================================================================
    'extrema': {
        'depend_on': 'second_deriv',
    },
    'partition': {
        'depend_on': 'abs_second_deriv',
        'split_levels_min': 1,
    },

    # =================================================================
    # Spline fitter (scipy.interpolate.UnivariateSpline)
    # =================================================================
    'spline': {
        'smoothing': 0.0,       # interpolate the control points
        'ext': 'const',         # hold boundary value outside the knots
    },

    # =================================================================
    # Implicit coordinates
    # =================================================================
    'grid': {
        'unit_step_origin': 1.0,
    },

    # =================================================================
    # Command line tool
    # =================================================================
    'cli': {
        'x_column': None,
        'column': None,
        'reverse': False,
        'split_levels': 4,
    },
}


def get(path: str, default=None, config: Optional[Dict[str, Any]] = None):
    """
    Get a config value by dot-separated path.

    Usage:
        get('trend.p_order_max')       → 4
        get('spline.smoothing')        → 0.0
    """
    keys = path.split('.')
    val = CONFIG if config is None else config
    for key in keys:
        if isinstance(val, dict) and key in val:
            val = val[key]
        else:
            return default
    return val


def _merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def load(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Deep-merge a YAML file over a copy of CONFIG.

    CONFIG itself is never modified. An empty file yields the defaults.
    """
    with open(path) as f:
        overlay = yaml.safe_load(f) or {}
    if not isinstance(overlay, dict):
        raise InvalidArgumentError(f"Config file {path} must contain a mapping, got {type(overlay).__name__}")
    return _merge(copy.deepcopy(CONFIG), overlay)
