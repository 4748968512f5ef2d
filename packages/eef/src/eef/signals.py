"""
Driving signals for the control-point selectors.

The extrema selector runs on the series itself or one of its derivatives;
the partition selector runs on the absolute value of one of those. Options
are closed enumerations so an unknown option fails at the boundary.
"""

from enum import Enum
from typing import Optional, Union

import numpy as np

from eef.calculus import deriv, deriv2
from eef.errors import InvalidArgumentError


class _SignalOption(str, Enum):
    """Base for option enums: resolves aliases and rejects unknown values."""

    @classmethod
    def _aliases(cls):
        return {}

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            alias = cls._aliases().get(value.lower())
            if alias is not None:
                return cls(alias)
            for member in cls:
                if member.value == value.lower():
                    return member
        return None

    @classmethod
    def parse(cls, value: Union[str, '_SignalOption']):
        """Resolve an option or raise InvalidArgumentError."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            allowed = ', '.join(m.value for m in cls)
            raise InvalidArgumentError(
                f"Invalid depend_on ({value!r}), must be one of: {allowed}"
            ) from None


class ExtremaSignal(_SignalOption):
    """Signal whose extrema place control points."""
    VALUE = "value"
    FIRST_DERIV = "first_deriv"
    SECOND_DERIV = "second_deriv"

    @classmethod
    def _aliases(cls):
        return {'ys_val': 'value'}


class PartitionSignal(_SignalOption):
    """Signal whose absolute value weights the partition."""
    ABS_VALUE = "abs_value"
    ABS_FIRST_DERIV = "abs_first_deriv"
    ABS_SECOND_DERIV = "abs_second_deriv"

    @classmethod
    def _aliases(cls):
        return {
            'abs_ys_val': 'abs_value',
            'abs_1st_deriv': 'abs_first_deriv',
            'abs_2nd_deriv': 'abs_second_deriv',
        }


def driving_signal(
    ys: np.ndarray,
    xs: Optional[np.ndarray],
    option: Union[str, ExtremaSignal, PartitionSignal],
) -> np.ndarray:
    """
    Compute the driving signal for a selector option.

    Args:
        ys: Series values.
        xs: Coordinates, or None for unit steps.
        option: An ExtremaSignal or PartitionSignal member, or its value.
            Plain strings are looked up in ExtremaSignal first.

    Returns:
        Array of the same length as ys.
    """
    if isinstance(option, str) and not isinstance(option, _SignalOption):
        try:
            option = ExtremaSignal(option)
        except ValueError:
            option = PartitionSignal.parse(option)

    if option in (ExtremaSignal.VALUE, PartitionSignal.ABS_VALUE):
        hs = np.asarray(ys, dtype=np.float64).copy()
    elif option in (ExtremaSignal.FIRST_DERIV, PartitionSignal.ABS_FIRST_DERIV):
        hs = deriv(ys, xs)
    elif option in (ExtremaSignal.SECOND_DERIV, PartitionSignal.ABS_SECOND_DERIV):
        hs = deriv2(ys, xs)
    else:
        raise InvalidArgumentError(f"Invalid depend_on ({option!r})")

    if isinstance(option, PartitionSignal):
        hs = np.abs(hs)
    return hs
