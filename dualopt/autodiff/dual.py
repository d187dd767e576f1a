"""Forward-mode dual numbers.

A :class:`Dual` carries a real value together with the vector of its partial
derivatives with respect to every seeded variable. Arithmetic on duals applies
the chain rule, so evaluating an expression once on seeded inputs yields both
the value and the exact gradient.

Example
-------
>>> from dualopt.autodiff import DualSpace
>>> x, y = DualSpace(2).seed([3.0, -1.0])
>>> f = x * x * y + 2.0 * y
>>> f.value
-11.0
>>> f.grad.tolist()
[-6.0, 11.0]
"""

from __future__ import annotations

import math
from numbers import Integral, Real
from typing import Iterable, List, Optional, Union

import numpy as np

from ..errors import DimensionMismatch, DivisionByZero, DomainError

Number = Union[float, int]


def safe_pow(base: float, exponent: float) -> float:
    """``base ** exponent`` that saturates to +/-inf instead of raising."""
    try:
        return base**exponent
    except OverflowError:
        if base < 0 and float(exponent).is_integer() and int(exponent) % 2 == 1:
            return -math.inf
        return math.inf


def check_power_domain(base: float, exponent: float) -> None:
    """Reject constant powers whose value or derivative is undefined at ``base``."""
    if base < 0 and not float(exponent).is_integer():
        raise DomainError(
            f"negative base {base!r} with non-integer exponent {exponent!r}"
        )
    if base == 0 and exponent < 1:
        raise DomainError(
            f"zero base with exponent {exponent!r} < 1 has no finite derivative"
        )


class Dual:
    """Real value paired with a read-only derivative vector.

    Instances are immutable: every operation returns a new dual. Real scalars
    (``int``, ``float`` and NumPy scalars) may appear on either side of an
    operator and are treated as constants. Duals of different widths cannot be
    combined.
    """

    __slots__ = ("value", "grad")

    # Make NumPy scalars on the left-hand side defer to the reflected operators.
    __array_ufunc__ = None

    def __init__(self, value: Number, grad: Iterable[float]) -> None:
        derivative = np.array(grad, dtype=float)
        if derivative.ndim != 1:
            raise DimensionMismatch(
                f"derivative must be one-dimensional, got shape {derivative.shape}"
            )
        derivative.setflags(write=False)
        self.value = float(value)
        self.grad = derivative

    @classmethod
    def _wrap(cls, value: float, grad: np.ndarray) -> "Dual":
        out = cls.__new__(cls)
        if grad.flags.writeable:
            grad.setflags(write=False)
        out.value = value
        out.grad = grad
        return out

    @classmethod
    def constant(cls, value: Number, width: int) -> "Dual":
        """Dual with an all-zero derivative of length ``width``."""
        if width < 0:
            raise DimensionMismatch(f"width must be non-negative, got {width}")
        return cls._wrap(float(value), np.zeros(int(width)))

    @classmethod
    def variable(cls, value: Number, index: int, width: int) -> "Dual":
        """Seed for variable ``index``: derivative is the one-hot vector ``e_index``."""
        if not 0 <= index < width:
            raise DimensionMismatch(
                f"seed index {index} outside derivative width {width}"
            )
        grad = np.zeros(int(width))
        grad[index] = 1.0
        return cls._wrap(float(value), grad)

    @property
    def width(self) -> int:
        """Number of partial derivatives carried."""
        return self.grad.shape[0]

    def _same_width(self, other: "Dual") -> None:
        if other.grad.shape != self.grad.shape:
            raise DimensionMismatch(
                f"cannot combine duals of width {self.width} and {other.width}"
            )

    # arithmetic ---------------------------------------------------------

    def __add__(self, other: object) -> "Dual":
        if isinstance(other, Dual):
            self._same_width(other)
            return Dual._wrap(self.value + other.value, self.grad + other.grad)
        if isinstance(other, Real):
            return Dual._wrap(self.value + float(other), self.grad)
        return NotImplemented

    __radd__ = __add__

    def __sub__(self, other: object) -> "Dual":
        if isinstance(other, Dual):
            self._same_width(other)
            return Dual._wrap(self.value - other.value, self.grad - other.grad)
        if isinstance(other, Real):
            return Dual._wrap(self.value - float(other), self.grad)
        return NotImplemented

    def __rsub__(self, other: object) -> "Dual":
        if isinstance(other, Real):
            return Dual._wrap(float(other) - self.value, -self.grad)
        return NotImplemented

    def __mul__(self, other: object) -> "Dual":
        if isinstance(other, Dual):
            self._same_width(other)
            a, b = self.value, other.value
            return Dual._wrap(a * b, a * other.grad + b * self.grad)
        if isinstance(other, Real):
            c = float(other)
            return Dual._wrap(self.value * c, c * self.grad)
        return NotImplemented

    __rmul__ = __mul__

    def __truediv__(self, other: object) -> "Dual":
        if isinstance(other, Dual):
            self._same_width(other)
            a, b = self.value, other.value
            if b == 0:
                raise DivisionByZero("division by a dual number with zero value")
            return Dual._wrap(a / b, (self.grad * b - a * other.grad) / (b * b))
        if isinstance(other, Real):
            c = float(other)
            if c == 0:
                raise DivisionByZero("division of a dual number by zero")
            return Dual._wrap(self.value / c, self.grad / c)
        return NotImplemented

    def __rtruediv__(self, other: object) -> "Dual":
        if isinstance(other, Real):
            a = self.value
            if a == 0:
                raise DivisionByZero("division by a dual number with zero value")
            c = float(other)
            return Dual._wrap(c / a, (-c / (a * a)) * self.grad)
        return NotImplemented

    def __pow__(self, other: object) -> "Dual":
        if isinstance(other, Dual):
            self._same_width(other)
            a, b = self.value, other.value
            if a <= 0:
                raise DomainError(
                    f"dual exponent requires a positive base, got {a!r}"
                )
            value = safe_pow(a, b)
            return Dual._wrap(
                value, value * (b / a * self.grad + math.log(a) * other.grad)
            )
        if isinstance(other, Real):
            p = other if isinstance(other, Integral) else float(other)
            a = self.value
            check_power_domain(a, p)
            slope = p * safe_pow(a, p - 1)
            return Dual._wrap(float(safe_pow(a, p)), slope * self.grad)
        return NotImplemented

    def __rpow__(self, other: object) -> "Dual":
        if isinstance(other, Real):
            base = float(other)
            if base <= 0:
                raise DomainError(
                    f"dual exponent requires a positive base, got {base!r}"
                )
            value = safe_pow(base, self.value)
            return Dual._wrap(value, value * math.log(base) * self.grad)
        return NotImplemented

    def __neg__(self) -> "Dual":
        return Dual._wrap(-self.value, -self.grad)

    def __pos__(self) -> "Dual":
        return self

    def __abs__(self) -> "Dual":
        sign = float(np.sign(self.value))
        return Dual._wrap(abs(self.value), sign * self.grad)

    # comparisons act on the value so that branchy expressions work

    def __lt__(self, other: object) -> bool:
        return self.value < _value_of(other)

    def __le__(self, other: object) -> bool:
        return self.value <= _value_of(other)

    def __gt__(self, other: object) -> bool:
        return self.value > _value_of(other)

    def __ge__(self, other: object) -> bool:
        return self.value >= _value_of(other)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Dual):
            return NotImplemented
        return self.value == other.value and np.array_equal(self.grad, other.grad)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Dual(value={self.value!r}, grad={self.grad.tolist()!r})"


def _value_of(other: object) -> float:
    if isinstance(other, Dual):
        return other.value
    if isinstance(other, Real):
        return float(other)
    raise TypeError(f"cannot compare Dual with {type(other).__name__}")


class DualSpace:
    """Factory producing duals of one derivative width.

    ``DualSpace(2)`` is a fixed-width engine: seeding a point whose length is
    not 2 raises :class:`~dualopt.errors.DimensionMismatch`. ``DualSpace()``
    is dynamic and takes the width from whatever point it seeds.
    """

    __slots__ = ("_width",)

    def __init__(self, width: Optional[int] = None) -> None:
        if width is not None:
            if not isinstance(width, Integral) or width < 1:
                raise ValueError(f"width must be a positive integer, got {width!r}")
            width = int(width)
        self._width = width

    @property
    def width(self) -> Optional[int]:
        return self._width

    @property
    def fixed(self) -> bool:
        return self._width is not None

    def resolve_width(self, n: int) -> int:
        if self._width is not None and n != self._width:
            raise DimensionMismatch(
                f"expected {self._width} variables, got {n}"
            )
        return n

    def constant(self, value: Number, width: Optional[int] = None) -> Dual:
        if width is None:
            if self._width is None:
                raise ValueError("a dynamic DualSpace needs an explicit width")
            width = self._width
        return Dual.constant(value, self.resolve_width(width))

    def variable(self, value: Number, index: int, width: Optional[int] = None) -> Dual:
        if width is None:
            if self._width is None:
                raise ValueError("a dynamic DualSpace needs an explicit width")
            width = self._width
        return Dual.variable(value, index, self.resolve_width(width))

    def seed(self, point: Iterable[float]) -> List[Dual]:
        """Return one seeded dual per coordinate of ``point``."""
        x = np.asarray(point, dtype=float)
        if x.ndim != 1:
            raise DimensionMismatch(f"point must be one-dimensional, got shape {x.shape}")
        n = self.resolve_width(x.shape[0])
        basis = np.eye(n)
        basis.setflags(write=False)
        return [Dual._wrap(float(x[i]), basis[i]) for i in range(n)]

    def __repr__(self) -> str:
        return f"DualSpace(width={self._width!r})"


__all__ = ["Dual", "DualSpace", "Number", "check_power_domain", "safe_pow"]
