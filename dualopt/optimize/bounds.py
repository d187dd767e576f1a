"""Box constraints: validation, projection and the projected gradient.

Bounds are element-wise vectors ``lower <= x <= upper``. ``None`` stands for a
free side and ``-np.inf``/``np.inf`` entries mark individual coordinates as
unbounded on that side. A coordinate with ``lower == upper`` is frozen.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from ..errors import DimensionMismatch, InvalidBounds

BoundLike = Optional[Union[float, np.ndarray, list, tuple]]


def _as_bound(value: BoundLike, n: int, fill: float, name: str) -> np.ndarray:
    if value is None:
        return np.full(n, fill)
    arr = np.asarray(value, dtype=float)
    if arr.ndim == 0:
        return np.full(n, float(arr))
    if arr.ndim != 1 or arr.shape[0] != n:
        raise DimensionMismatch(
            f"{name} bound has shape {arr.shape}, expected ({n},)"
        )
    return arr.copy()


@dataclass(frozen=True)
class Bounds:
    """Validated lower/upper bound vectors of one problem."""

    lower: np.ndarray
    upper: np.ndarray

    @classmethod
    def create(cls, n: int, lower: BoundLike = None, upper: BoundLike = None) -> "Bounds":
        """Build bounds for ``n`` variables, broadcasting scalars.

        Raises:
            DimensionMismatch: If a bound vector does not have length ``n``.
            InvalidBounds: If a bound is NaN or ``lower[i] > upper[i]``.
        """
        lo = _as_bound(lower, n, -np.inf, "lower")
        hi = _as_bound(upper, n, np.inf, "upper")
        if np.isnan(lo).any() or np.isnan(hi).any():
            raise InvalidBounds("bounds must not contain NaN")
        crossed = np.flatnonzero(lo > hi)
        if crossed.size:
            i = int(crossed[0])
            raise InvalidBounds(
                f"lower[{i}] = {lo[i]!r} exceeds upper[{i}] = {hi[i]!r}"
            )
        lo.setflags(write=False)
        hi.setflags(write=False)
        return cls(lower=lo, upper=hi)

    @property
    def size(self) -> int:
        return self.lower.shape[0]

    @property
    def frozen(self) -> np.ndarray:
        """Mask of coordinates with ``lower == upper``."""
        return self.lower == self.upper

    @property
    def unbounded(self) -> bool:
        return bool(np.all(np.isneginf(self.lower)) and np.all(np.isposinf(self.upper)))

    def project(self, x: np.ndarray) -> np.ndarray:
        """Clip ``x`` into the box (returns a new array)."""
        return np.minimum(np.maximum(x, self.lower), self.upper)

    def contains(self, x: np.ndarray) -> bool:
        return bool(np.all(x >= self.lower) and np.all(x <= self.upper))

    def active(self, x: np.ndarray, grad: np.ndarray) -> np.ndarray:
        """Mask of coordinates held by a bound under a steepest-descent move.

        A coordinate is active when it is frozen, sits at its lower bound with
        a positive gradient, or sits at its upper bound with a negative one.
        """
        at_lower = (x <= self.lower) & (grad > 0)
        at_upper = (x >= self.upper) & (grad < 0)
        return self.frozen | at_lower | at_upper

    def projected_gradient(self, x: np.ndarray, grad: np.ndarray) -> np.ndarray:
        pg = np.array(grad, dtype=float, copy=True)
        pg[self.active(x, grad)] = 0.0
        return pg

    def blocked(self, x: np.ndarray, direction: np.ndarray) -> np.ndarray:
        """Mask of coordinates where ``direction`` immediately leaves the box."""
        return (
            self.frozen
            | ((x <= self.lower) & (direction < 0))
            | ((x >= self.upper) & (direction > 0))
        )

    def max_step(self, x: np.ndarray, direction: np.ndarray) -> float:
        """Largest ``t >= 0`` with ``x + t * direction`` inside the box."""
        step = np.inf
        down = direction < 0
        if down.any():
            step = min(step, float(np.min((self.lower[down] - x[down]) / direction[down])))
        up = direction > 0
        if up.any():
            step = min(step, float(np.min((self.upper[up] - x[up]) / direction[up])))
        return max(step, 0.0)


__all__ = ["Bounds", "BoundLike"]
