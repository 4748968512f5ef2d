"""
EEF — Equivalent Effect Function trend extraction.

Extracts a smooth trend from a noisy 1D series. A small set of control
points is selected from the data, their cumulative integrals are fitted
with a spline, and the spline's derivative is the trend:

    eef_extrema(ys, xs)                control points on extrema of a driving signal
    eef_partition(ys, levels, xs)      control points on a weighted bisection

Both return (trend, diff) with diff = ys - trend, for detrending or
mode-decomposition workflows.

Usage:
    import eef

    trend, diff = eef.eef_extrema(ys, depend_on='first_deriv')
    trend, diff = eef.eef_partition(ys, 4, xs, depend_on='abs_second_deriv')
"""

__version__ = '0.1.0'

from eef.calculus import deriv, deriv2, integral
from eef.control_points import ControlPoints, adjust_ends, find_extrema, partition
from eef.errors import EEFError, InvalidArgumentError
from eef.signals import ExtremaSignal, PartitionSignal, driving_signal
from eef.trend import eef_extrema, eef_partition

__all__ = [
    'deriv', 'deriv2', 'integral',
    'ControlPoints', 'find_extrema', 'partition', 'adjust_ends',
    'ExtremaSignal', 'PartitionSignal', 'driving_signal',
    'eef_extrema', 'eef_partition',
    'EEFError', 'InvalidArgumentError',
]
