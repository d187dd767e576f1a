"""Exception types raised by dualopt.

Every error derives from :class:`DualOptError` and from the closest built-in
exception, so callers can catch either ``DualOptError`` or the usual
``ValueError``/``ZeroDivisionError``.
"""

from __future__ import annotations


class DualOptError(Exception):
    """Base class for all dualopt errors."""


class DomainError(DualOptError, ValueError):
    """Elementary function evaluated outside its domain (e.g. ``log(-1)``)."""


class DivisionByZero(DualOptError, ZeroDivisionError):
    """Division by a value (or dual number) equal to zero."""


class DimensionMismatch(DualOptError, ValueError):
    """Point, bounds, gradient buffer or dual widths disagree in length."""


class InvalidBounds(DualOptError, ValueError):
    """Lower bound above upper bound, or a bound that is NaN."""


class LineSearchFailed(DualOptError, RuntimeError):
    """No acceptable step was found along the search direction."""


__all__ = [
    "DualOptError",
    "DomainError",
    "DivisionByZero",
    "DimensionMismatch",
    "InvalidBounds",
    "LineSearchFailed",
]
