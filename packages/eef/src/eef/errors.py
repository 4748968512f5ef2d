"""Error types raised by the eef package."""


class EEFError(Exception):
    """Base class for eef errors."""


class InvalidArgumentError(EEFError, ValueError):
    """
    Caller supplied an argument outside its permitted domain.

    Raised before any computation starts: out-of-range polynomial order,
    unknown driving-signal option, invalid split depth, series too short,
    mismatched or non-increasing coordinates.
    """
