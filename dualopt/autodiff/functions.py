"""Elementary functions accepting either real scalars or :class:`Dual` numbers.

Writing an objective with these functions (instead of :mod:`math`) lets the
same expression run on plain floats and on seeded duals. Real inputs return a
``float``; dual inputs return a new :class:`Dual` with the chain rule applied.
"""

from __future__ import annotations

import math
from numbers import Real
from typing import Union

from ..errors import DomainError
from .dual import Dual, safe_pow

Scalar = Union[float, Dual]


def _real(x: object, name: str) -> float:
    if isinstance(x, Real):
        return float(x)
    raise TypeError(f"{name}() expects a real number or Dual, got {type(x).__name__}")


def _exp(a: float) -> float:
    try:
        return math.exp(a)
    except OverflowError:
        return math.inf


def exp(x: Scalar) -> Scalar:
    """Exponential; overflow saturates to ``inf``."""
    if isinstance(x, Dual):
        value = _exp(x.value)
        return Dual._wrap(value, value * x.grad)
    return _exp(_real(x, "exp"))


def log(x: Scalar) -> Scalar:
    """Natural logarithm, defined for positive inputs only."""
    a = x.value if isinstance(x, Dual) else _real(x, "log")
    if a <= 0:
        raise DomainError(f"log() of non-positive value {a!r}")
    if isinstance(x, Dual):
        return Dual._wrap(math.log(a), x.grad / a)
    return math.log(a)


def sqrt(x: Scalar) -> Scalar:
    """Square root. Duals additionally reject zero, where the slope is infinite."""
    if isinstance(x, Dual):
        a = x.value
        if a <= 0:
            raise DomainError(f"sqrt() of dual number with value {a!r}")
        root = math.sqrt(a)
        return Dual._wrap(root, x.grad / (2.0 * root))
    a = _real(x, "sqrt")
    if a < 0:
        raise DomainError(f"sqrt() of negative value {a!r}")
    return math.sqrt(a)


def sin(x: Scalar) -> Scalar:
    if isinstance(x, Dual):
        return Dual._wrap(math.sin(x.value), math.cos(x.value) * x.grad)
    return math.sin(_real(x, "sin"))


def cos(x: Scalar) -> Scalar:
    if isinstance(x, Dual):
        return Dual._wrap(math.cos(x.value), -math.sin(x.value) * x.grad)
    return math.cos(_real(x, "cos"))


def tanh(x: Scalar) -> Scalar:
    if isinstance(x, Dual):
        t = math.tanh(x.value)
        return Dual._wrap(t, (1.0 - t * t) * x.grad)
    return math.tanh(_real(x, "tanh"))


def power(x: Scalar, p: Union[float, int, Dual]) -> Scalar:
    """``x ** p`` with explicit domain checks for real arguments.

    Duals follow :meth:`Dual.__pow__`. For two reals a negative base with a
    non-integer exponent, or a zero base with a negative exponent, raises
    :class:`~dualopt.errors.DomainError` instead of producing a complex number
    or ``ZeroDivisionError``.
    """
    if isinstance(x, Dual) or isinstance(p, Dual):
        return x**p
    a = _real(x, "power")
    e = _real(p, "power")
    if a == 0 and e < 0:
        raise DomainError(f"zero base with negative exponent {e!r}")
    if a < 0 and not e.is_integer():
        raise DomainError(f"negative base {a!r} with non-integer exponent {e!r}")
    return float(safe_pow(a, e))


__all__ = ["exp", "log", "sqrt", "sin", "cos", "tanh", "power"]
