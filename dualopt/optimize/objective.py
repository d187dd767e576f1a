"""Adapter turning a plain mathematical expression into a solver objective."""

from __future__ import annotations

from numbers import Real
from typing import Callable, Optional, Sequence, Tuple

import numpy as np

from ..autodiff import Dual, DualSpace
from ..errors import DimensionMismatch

Expression = Callable[[Sequence], object]


class AutoDiffObjective:
    """Objective computing value and gradient in one forward dual-number pass.

    ``expr`` receives a sequence of scalars, one per variable, and returns a
    scalar. It is called with seeded :class:`~dualopt.autodiff.Dual` numbers
    by :meth:`__call__` and with plain floats by :meth:`value`, so it should
    use operators and the functions of :mod:`dualopt.autodiff` rather than
    :mod:`math`.

    Args:
        expr: The expression to minimize.
        dim: Number of variables. When given, the adapter uses a fixed-width
            :class:`DualSpace` and rejects points of any other length; when
            ``None`` the width follows the point.

    Example:
        >>> import numpy as np
        >>> objective = AutoDiffObjective(lambda x: 0.5 * (10.0 - x[0]) ** 2, dim=1)
        >>> grad = np.zeros(1)
        >>> objective(np.array([4.0]), grad)
        18.0
        >>> grad.tolist()
        [-6.0]
    """

    def __init__(self, expr: Expression, dim: Optional[int] = None) -> None:
        if not callable(expr):
            raise TypeError("expr must be callable")
        self.expr = expr
        self.space = DualSpace(dim)

    @property
    def dim(self) -> Optional[int]:
        return self.space.width

    def __call__(self, x: np.ndarray, grad: np.ndarray) -> float:
        """Return ``f(x)`` and write ``df/dx`` into ``grad`` in place."""
        point = np.asarray(x, dtype=float)
        if grad.shape != point.shape:
            raise DimensionMismatch(
                f"gradient buffer has shape {grad.shape}, point has shape {point.shape}"
            )
        seeds = self.space.seed(point)
        out = self.expr(seeds)
        if isinstance(out, Dual):
            if out.width != point.shape[0]:
                raise DimensionMismatch(
                    f"expression returned derivative width {out.width}, "
                    f"expected {point.shape[0]}"
                )
            grad[:] = out.grad
            return out.value
        if isinstance(out, Real):
            grad[:] = 0.0
            return float(out)
        raise TypeError(
            f"expression must return a Dual or real scalar, got {type(out).__name__}"
        )

    def value_and_grad(self, x: Sequence[float]) -> Tuple[float, np.ndarray]:
        point = np.asarray(x, dtype=float)
        grad = np.zeros_like(point)
        value = self(point, grad)
        return value, grad

    def value(self, x: Sequence[float]) -> float:
        """Evaluate the expression on plain floats (no derivatives)."""
        point = np.asarray(x, dtype=float)
        if point.ndim != 1:
            raise DimensionMismatch(f"point must be one-dimensional, got shape {point.shape}")
        self.space.resolve_width(point.shape[0])
        return float(self.expr([float(v) for v in point]))

    def __repr__(self) -> str:
        name = getattr(self.expr, "__name__", type(self.expr).__name__)
        return f"AutoDiffObjective({name}, dim={self.dim!r})"


__all__ = ["AutoDiffObjective", "Expression"]
