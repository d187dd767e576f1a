"""Finite-difference helpers for verifying objective gradients.

The solver never uses these; they exist to check a hand-written or
dual-number gradient against central differences.
"""

from __future__ import annotations

from typing import Callable

import numpy as np

from .core import Array, Objective


def approx_grad(fun: Callable[[Array], float], x: Array, eps: float = 1e-6) -> Array:
    """Central-difference gradient of a value-only function.

    Parameters
    ----------
    fun:
        Function returning a scalar given x.
    x:
        Point where the gradient is approximated.
    eps:
        Perturbation size.
    """
    if eps <= 0:
        raise ValueError("eps must be positive")
    x = np.asarray(x, dtype=float).copy()
    grad = np.zeros_like(x)
    for i in range(x.size):
        ei = np.zeros_like(x)
        ei[i] = eps
        grad[i] = (fun(x + ei) - fun(x - ei)) / (2.0 * eps)
    return grad


def check_grad(fun: Objective, x: Array, eps: float = 1e-6) -> float:
    """Euclidean distance between ``fun``'s gradient and central differences."""
    x = np.asarray(x, dtype=float)
    analytic = np.zeros_like(x)
    fun(x, analytic)

    def value_only(point: Array) -> float:
        return float(fun(point, np.zeros_like(point)))

    return float(np.linalg.norm(analytic - approx_grad(value_only, x, eps)))


__all__ = ["approx_grad", "check_grad"]
